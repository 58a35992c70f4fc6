"""Chat platform collaborators implementing the ChatPlatform protocol.

WHY: The core only needs "fetch a channel's members" and "publish a
message". Everything Slack-specific (pagination, bot filtering, transport
fallback) lives here.
"""

from groupbot.platform.slack import SlackPlatform

__all__ = ["SlackPlatform"]
