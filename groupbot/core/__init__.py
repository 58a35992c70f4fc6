"""Core group-making logic: partitioner, session state machine, command parsing.

WHY: The only stateful, sequenced part of the bot is the interactive
selection menu and the random partition it ends in. Keeping it free of
Slack imports makes it testable with plain fakes.

RULES:
- No transport or Slack imports in this package
- Expected user-facing conditions are result variants, not exceptions
"""

from groupbot.core.command import Command, CommandKind, parse_command
from groupbot.core.errors import (
    CommandError,
    GroupBotError,
    InsufficientMembersError,
    PublishFailedError,
    RosterUnavailableError,
)
from groupbot.core.models import Group, Member
from groupbot.core.partition import format_group_listing, partition
from groupbot.core.sessions import (
    ChatPlatform,
    Outcome,
    Session,
    SessionManager,
    SessionResult,
    SessionView,
)

__all__ = [
    "ChatPlatform",
    "Command",
    "CommandKind",
    "CommandError",
    "Group",
    "GroupBotError",
    "InsufficientMembersError",
    "Member",
    "Outcome",
    "PublishFailedError",
    "RosterUnavailableError",
    "Session",
    "SessionManager",
    "SessionResult",
    "SessionView",
    "format_group_listing",
    "parse_command",
    "partition",
]
