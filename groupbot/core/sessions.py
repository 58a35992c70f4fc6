"""Per-user menu sessions and the state machine that drives them.

WHY: The interactive menu spans several clicks (pick members, pick a
size, confirm). Between clicks the bot has to remember what each user
has chosen so far. An in-memory store is enough: sessions are short and
losing them on restart only means reopening the menu.

HOW: Four components work together:
  Session: dataclass holding one user's in-progress selection
  SessionView: read-only projection used to re-render the menu
  SessionResult: outcome tag plus view, groups, or message
  SessionManager: keyed store owner -> session with one lock per session,
    implementing open/toggle/size/reset/confirm transitions

RULES:
- At most one session per owner; open_menu overwrites any existing one
- selected is always a subset of the candidate ids
- group_size is always within [min_size, max_size]
- Expected conditions (expired session, empty selection) are result
  variants, never exceptions
- Only RosterUnavailableError and PublishFailedError are translated into
  results; any other collaborator exception propagates
- A failed publish keeps the session so the user can confirm again
- Sessions idle longer than ttl_seconds count as expired
"""

from __future__ import annotations

import enum
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Set, Tuple

from groupbot.config import (
    DEFAULT_GROUP_SIZE,
    GROUP_SIZE_MAX,
    GROUP_SIZE_MIN,
    SESSION_TTL_SECONDS,
)
from groupbot.core.errors import PublishFailedError, RosterUnavailableError
from groupbot.core.models import Group, Member
from groupbot.core.partition import format_group_listing, partition

logger = logging.getLogger(__name__)


class ChatPlatform(Protocol):
    """The two capabilities the core needs from the chat platform."""

    def fetch_channel_members(self, channel_id: str) -> List[Member]:
        """Return active members of a channel or raise RosterUnavailableError."""

    def publish_message(self, channel_id: str, text: str) -> None:
        """Post text to a channel or raise PublishFailedError."""


class Outcome(str, enum.Enum):
    """Result tag for every state machine event.

    HOW: Inherits from str so values serialize cleanly to JSON and logs.
    """

    OPENED = "opened"
    UPDATED = "updated"
    CONFIRMED = "confirmed"
    SESSION_EXPIRED = "session_expired"
    UNKNOWN_MEMBER = "unknown_member"
    NOTHING_SELECTED = "nothing_selected"
    INSUFFICIENT_MEMBERS = "insufficient_members"
    ROSTER_UNAVAILABLE = "roster_unavailable"
    PUBLISH_FAILED = "publish_failed"


_SUCCESS_OUTCOMES = frozenset({Outcome.OPENED, Outcome.UPDATED, Outcome.CONFIRMED})


@dataclass
class Session:
    """One user's in-progress group selection."""

    owner: str
    channel: str
    candidates: List[Member]
    selected: Set[str] = field(default_factory=set)
    group_size: int = DEFAULT_GROUP_SIZE
    created_at: float = 0.0
    updated_at: float = 0.0

    def has_candidate(self, member_id: str) -> bool:
        return any(member.id == member_id for member in self.candidates)

    def selected_members(self) -> List[Member]:
        """Selected members in roster order."""
        return [member for member in self.candidates if member.id in self.selected]


@dataclass(frozen=True)
class MemberChoice:
    member: Member
    selected: bool


@dataclass(frozen=True)
class SessionView:
    """Stateless projection of a session for rendering the menu."""

    owner: str
    channel: str
    entries: Tuple[MemberChoice, ...]
    group_size: int

    @property
    def selected_names(self) -> List[str]:
        return [entry.member.name for entry in self.entries if entry.selected]

    @property
    def selected_count(self) -> int:
        return sum(1 for entry in self.entries if entry.selected)

    @classmethod
    def of(cls, session: Session) -> SessionView:
        return cls(
            owner=session.owner,
            channel=session.channel,
            entries=tuple(
                MemberChoice(member=member, selected=member.id in session.selected)
                for member in session.candidates
            ),
            group_size=session.group_size,
        )


@dataclass
class SessionResult:
    """What an event produced: an outcome tag plus data to render."""

    outcome: Outcome
    view: Optional[SessionView] = None
    groups: Optional[List[Group]] = None
    listing: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in _SUCCESS_OUTCOMES


class _Entry:
    """A stored session plus the lock that guards its fields."""

    __slots__ = ("session", "lock")

    def __init__(self, session: Session) -> None:
        self.session = session
        self.lock = threading.Lock()


class SessionManager:
    """Thread-safe in-memory store of menu sessions keyed by owner.

    WHY: Slack delivers interactions for different users concurrently.
    Each user's session must change atomically without blocking other
    users.

    HOW: self._lock guards only the owner -> entry mapping and is never
    held during I/O. Each entry carries its own lock which is held for the
    whole of a transition, including the publish on confirm. After taking
    an entry's lock the manager re-checks that the entry is still the one
    stored for the owner, so a session replaced or confirmed concurrently
    reports SESSION_EXPIRED instead of being edited.

    RULES:
    - open_menu fetches the roster before touching the store; a failed
      fetch leaves any existing session untouched
    - confirm deletes the session only after a successful publish
    - prune_expired() removes sessions idle longer than ttl_seconds
    """

    def __init__(
        self,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        min_size: int = GROUP_SIZE_MIN,
        max_size: int = GROUP_SIZE_MAX,
        default_size: int = DEFAULT_GROUP_SIZE,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not min_size <= default_size <= max_size:
            raise ValueError(
                "default_size {} outside [{}, {}]".format(default_size, min_size, max_size)
            )
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.min_size = min_size
        self.max_size = max_size
        self.default_size = default_size
        self._rng = rng
        self._clock = clock

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def open_menu(self, owner: str, channel: str, platform: ChatPlatform) -> SessionResult:
        """Fetch the channel roster and start a fresh session for owner."""
        self.prune_expired()

        try:
            roster = platform.fetch_channel_members(channel)
        except RosterUnavailableError as exc:
            logger.warning("Roster unavailable for %s in %s: %s", owner, channel, exc)
            return SessionResult(Outcome.ROSTER_UNAVAILABLE, message=str(exc))

        candidates: List[Member] = []
        seen: Set[str] = set()
        for member in roster:
            if member.id not in seen:
                seen.add(member.id)
                candidates.append(member)

        now = self._clock()
        session = Session(
            owner=owner,
            channel=channel,
            candidates=candidates,
            group_size=self.default_size,
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            self._entries[owner] = _Entry(session)

        logger.info(
            "Opened menu for %s in %s with %d candidates", owner, channel, len(candidates)
        )
        return SessionResult(Outcome.OPENED, view=SessionView.of(session))

    def toggle_member(self, owner: str, member_id: str) -> SessionResult:
        """Add member_id to the selection, or remove it if already selected."""

        def apply(session: Session) -> SessionResult:
            if not session.has_candidate(member_id):
                return SessionResult(
                    Outcome.UNKNOWN_MEMBER,
                    view=SessionView.of(session),
                    message="{} is not in this channel's roster".format(member_id),
                )
            if member_id in session.selected:
                session.selected.discard(member_id)
            else:
                session.selected.add(member_id)
            return SessionResult(Outcome.UPDATED, view=SessionView.of(session))

        return self._transition(owner, apply)

    def set_group_size(self, owner: str, size: int) -> SessionResult:
        """Set the group size; values outside the bounds keep the prior size."""

        def apply(session: Session) -> SessionResult:
            message = None
            if isinstance(size, int) and self.min_size <= size <= self.max_size:
                session.group_size = size
            else:
                message = "Group size must be between {} and {}".format(
                    self.min_size, self.max_size
                )
            return SessionResult(Outcome.UPDATED, view=SessionView.of(session), message=message)

        return self._transition(owner, apply)

    def reset_selection(self, owner: str) -> SessionResult:
        """Clear the selection, keeping roster and group size."""

        def apply(session: Session) -> SessionResult:
            session.selected.clear()
            return SessionResult(Outcome.UPDATED, view=SessionView.of(session))

        return self._transition(owner, apply)

    def confirm(self, owner: str, platform: ChatPlatform) -> SessionResult:
        """Partition the selection, publish it, and close the session."""
        entry = self._live_entry(owner)
        if entry is None:
            return _expired()

        with entry.lock:
            if not self._is_current(owner, entry):
                return _expired()

            session = entry.session
            session.updated_at = self._clock()

            members = session.selected_members()
            if not members:
                return SessionResult(
                    Outcome.NOTHING_SELECTED,
                    view=SessionView.of(session),
                    message="Select at least one member first",
                )

            if len(members) < session.group_size:
                return SessionResult(
                    Outcome.INSUFFICIENT_MEMBERS,
                    view=SessionView.of(session),
                    message="Not enough members ({}) for groups of {}".format(
                        len(members), session.group_size
                    ),
                )

            groups = partition(members, session.group_size, self._rng)
            listing = format_group_listing(groups, session.group_size)

            try:
                platform.publish_message(session.channel, listing)
            except PublishFailedError as exc:
                logger.warning(
                    "Publish failed for %s in %s, keeping session: %s\n%s",
                    owner, session.channel, exc, listing,
                )
                return SessionResult(
                    Outcome.PUBLISH_FAILED,
                    view=SessionView.of(session),
                    groups=groups,
                    listing=listing,
                    message=str(exc),
                )

            with self._lock:
                if self._entries.get(owner) is entry:
                    del self._entries[owner]

        logger.info(
            "Published %d groups of %d for %s in %s",
            len(groups), session.group_size, owner, session.channel,
        )
        return SessionResult(Outcome.CONFIRMED, groups=groups, listing=listing)

    # ------------------------------------------------------------------
    # Queries and housekeeping
    # ------------------------------------------------------------------

    def view(self, owner: str) -> Optional[SessionView]:
        """Current projection of owner's session, or None."""
        entry = self._live_entry(owner)
        if entry is None:
            return None
        with entry.lock:
            return SessionView.of(entry.session)

    def discard(self, owner: str) -> bool:
        """Abandon owner's session. Returns True if one existed."""
        with self._lock:
            return self._entries.pop(owner, None) is not None

    def active_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def prune_expired(self) -> int:
        """Remove sessions idle longer than the TTL. Returns the count removed."""
        now = self._clock()
        with self._lock:
            stale = [
                owner for owner, entry in self._entries.items()
                if self._is_expired(entry.session, now)
            ]
            for owner in stale:
                del self._entries[owner]

        if stale:
            logger.info("Pruned %d idle sessions", len(stale))
        return len(stale)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(
        self, owner: str, apply: Callable[[Session], SessionResult]
    ) -> SessionResult:
        entry = self._live_entry(owner)
        if entry is None:
            return _expired()

        with entry.lock:
            if not self._is_current(owner, entry):
                return _expired()
            entry.session.updated_at = self._clock()
            return apply(entry.session)

    def _live_entry(self, owner: str) -> Optional[_Entry]:
        with self._lock:
            entry = self._entries.get(owner)
            if entry is None:
                return None
            if self._is_expired(entry.session, self._clock()):
                del self._entries[owner]
                logger.info("Session for %s expired", owner)
                return None
            return entry

    def _is_current(self, owner: str, entry: _Entry) -> bool:
        with self._lock:
            return self._entries.get(owner) is entry

    def _is_expired(self, session: Session, now: float) -> bool:
        return self._ttl_seconds > 0 and now - session.updated_at > self._ttl_seconds


def _expired() -> SessionResult:
    return SessionResult(
        Outcome.SESSION_EXPIRED,
        message="This menu has expired. Run the command again to start over.",
    )
