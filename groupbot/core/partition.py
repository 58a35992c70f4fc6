"""Random partitioning of members into fixed-size groups.

WHY: The whole point of the bot is a fair random split. Sorting with a
random comparator is biased, so the permutation step uses a proper
uniform shuffle.

HOW: Copy the input, shuffle the copy in place, then slice consecutive
chunks of group_size. The last chunk holds the remainder.

RULES:
- Every input member appears in exactly one group
- Number of groups is ceil(len(members) / group_size)
- Only the last group may be short (1 <= remainder < group_size)
- The caller's sequence is never mutated
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence

from groupbot.core.errors import InsufficientMembersError
from groupbot.core.models import Group, Member


def partition(
    members: Sequence[Member],
    group_size: int,
    rng: Optional[random.Random] = None,
) -> List[Group]:
    """Split members into randomized consecutive groups of group_size.

    RULES:
    - group_size < 2 raises ValueError
    - Empty members returns an empty list
    - 0 < len(members) < group_size raises InsufficientMembersError
    """
    if group_size < 2:
        raise ValueError("group_size must be at least 2, got {}".format(group_size))

    if not members:
        return []

    if len(members) < group_size:
        raise InsufficientMembersError(len(members), group_size)

    rng = rng or random.Random()
    shuffled = list(members)
    # Random.shuffle is an in-place Fisher-Yates swap from the end
    rng.shuffle(shuffled)

    return [
        shuffled[i:i + group_size]
        for i in range(0, len(shuffled), group_size)
    ]


def format_group_listing(groups: Sequence[Group], group_size: int) -> str:
    """Render groups as the mrkdwn message published to the channel.

    HOW: A header line, a participant/size summary, one line per group,
    and a note when the last group is short.
    """
    total = sum(len(group) for group in groups)

    lines = [
        ":dart: *Groups created*",
        "*Participants:* {} | *Group size:* {}".format(total, group_size),
        "",
    ]

    for index, group in enumerate(groups, start=1):
        names = ", ".join(member.name for member in group)
        lines.append("*Group {}:* {}".format(index, names))

    remainder = total % group_size
    if remainder > 0:
        lines.append("")
        lines.append("_The last group has {} {}_".format(
            remainder, "member" if remainder == 1 else "members",
        ))

    return "\n".join(lines)
