"""Member and Group types.

RULES:
- Member is immutable; identity is the platform user id
- A Group is a plain list of members in display order
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Member:
    """A non-bot, non-deleted user eligible for grouping."""

    id: str
    name: str


Group = List[Member]
