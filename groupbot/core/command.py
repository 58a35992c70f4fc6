"""Parsing of the /groupbot slash command text.

WHY: The command has three forms. With no text it opens the interactive
menu. "help" prints usage. "<size> | name | ..." splits a hand-typed list
of names immediately, without a menu session.

HOW: The quick form accepts the table layout chat clients produce when a
user pastes names as a one-column table:

    3 | Alice |
    | --- |
    | Bob |
    | Carol |

as well as a single line "3 | Alice | Bob | Carol". Every non-empty cell
after the leading size is a name; separator cells made of dashes are
skipped.

RULES:
- Empty or whitespace-only text -> MENU
- "help" or "?" (any case) -> HELP
- Leading token must be an integer within [GROUP_SIZE_MIN, GROUP_SIZE_MAX]
- At least one name is required in the quick form
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import List, Optional

from groupbot.config import GROUP_SIZE_MAX, GROUP_SIZE_MIN
from groupbot.core.errors import CommandError

_SIZE_PREFIX = re.compile(r"^\s*(\d+)\s*\|(.*)$", re.DOTALL)
_SEPARATOR_CELL = re.compile(r"^:?-{3,}:?$")


class CommandKind(str, enum.Enum):
    MENU = "menu"
    HELP = "help"
    QUICK = "quick"


@dataclass
class Command:
    kind: CommandKind
    group_size: Optional[int] = None
    names: List[str] = field(default_factory=list)


def parse_command(text: Optional[str]) -> Command:
    """Parse slash command text into a Command.

    Raises CommandError with a user-facing message when the text is
    neither empty, help, nor a valid quick list.
    """
    stripped = (text or "").strip()
    if not stripped:
        return Command(CommandKind.MENU)

    if stripped.lower() in ("help", "?"):
        return Command(CommandKind.HELP)

    match = _SIZE_PREFIX.match(stripped)
    if not match:
        raise CommandError(
            "Invalid command format. The first line must hold a group size "
            "and a name, e.g. `3 | Alice |`."
        )

    group_size = int(match.group(1))
    if not GROUP_SIZE_MIN <= group_size <= GROUP_SIZE_MAX:
        raise CommandError(
            "Group size must be between {} and {}.".format(GROUP_SIZE_MIN, GROUP_SIZE_MAX)
        )

    names = _extract_names(match.group(2))
    if not names:
        raise CommandError("No names found. List one name per line between `|` bars.")

    return Command(CommandKind.QUICK, group_size=group_size, names=names)


def _extract_names(body: str) -> List[str]:
    names = []
    for line in body.splitlines():
        for cell in line.split("|"):
            cell = cell.strip()
            if cell and not _SEPARATOR_CELL.match(cell):
                names.append(cell)
    return names
