"""GroupBot: randomized group creation for chat channels.

WHY: Teams regularly need to split a channel into small random groups
(pair programming, coffee chats, breakout discussions). Doing this by hand
is slow and rarely fair. This package lets anyone type ``/groupbot`` in a
channel, pick participants, choose a group size, and publish the groups.

HOW: Three layers: core (partitioner, session state machine, command
parsing), platform (Slack collaborator that fetches rosters and publishes
messages), and transport (Bolt handlers over Socket Mode or FastAPI).

RULES:
- The core has no Slack imports; it only sees the ChatPlatform protocol
- Sessions are in-memory and lost on restart
- Group size is always within [2, 5]
"""

__version__ = "0.1.0"
