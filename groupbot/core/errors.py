"""Exception types shared by the core and the platform collaborator.

WHY: Callers need typed exceptions to tell expected collaborator failures
(roster or publish unavailable) apart from programming errors, which are
allowed to propagate.

RULES:
- RosterUnavailableError and PublishFailedError are raised only by
  ChatPlatform implementations
- InsufficientMembersError and CommandError subclass ValueError
"""


class GroupBotError(Exception):
    """Base exception for GroupBot."""


class RosterUnavailableError(GroupBotError):
    """Raised when a channel's member list cannot be fetched."""

    def __init__(self, channel_id: str, reason: str = "") -> None:
        self.channel_id = channel_id
        self.reason = reason
        message = "Member list unavailable for channel {}".format(channel_id)
        if reason:
            message = "{}: {}".format(message, reason)
        super().__init__(message)


class PublishFailedError(GroupBotError):
    """Raised when the group listing could not be posted to a channel."""

    def __init__(self, channel_id: str, reason: str = "") -> None:
        self.channel_id = channel_id
        self.reason = reason
        message = "Could not publish to channel {}".format(channel_id)
        if reason:
            message = "{}: {}".format(message, reason)
        super().__init__(message)


class InsufficientMembersError(GroupBotError, ValueError):
    """Raised when there are fewer members than the requested group size.

    RULES:
    - Message includes both the member count and the group size
    """

    def __init__(self, count: int, group_size: int) -> None:
        self.count = count
        self.group_size = group_size
        super().__init__(
            "Not enough members ({}) for groups of {}".format(count, group_size)
        )


class CommandError(GroupBotError, ValueError):
    """Raised when slash command text cannot be parsed."""
