"""Message templates and Block Kit builders for the group menu.

WHY: The bot sends three kinds of messages: the interactive selection
menu (re-rendered after every click), short ephemeral notices, and the
help text. Centralizing these builders keeps bot.py focused on event and
action handling.

HOW: Each builder returns a list of Block Kit block dicts ready to be
passed to respond(blocks=...), or a plain mrkdwn string. The menu is
rendered from a SessionView, never from stored session state.

RULES:
- action_id values must match the handler registrations in bot.py
- Member toggle buttons use ACTION_TOGGLE_PREFIX + member id so every
  button in a message has a unique action_id
- Slack allows at most 25 elements per actions block
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from groupbot.config import GROUP_SIZE_MAX, GROUP_SIZE_MIN, GROUPBOT_COMMAND
from groupbot.core.sessions import Outcome, SessionView

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Action IDs, must match @app.action() registrations in bot.py
ACTION_TOGGLE_PREFIX = "toggle_member:"
ACTION_GROUP_SIZE = "group_size_select"
ACTION_RESET = "reset_selection"
ACTION_CONFIRM = "confirm_groups"

SELECTED_MARKER = ":white_check_mark:"

_MAX_ELEMENTS_PER_ACTIONS = 25

_OUTCOME_TEXT = {
    Outcome.SESSION_EXPIRED: "This menu has expired. Run `{}` again to start over.".format(
        GROUPBOT_COMMAND
    ),
    Outcome.NOTHING_SELECTED: "Select at least one member before creating groups.",
    Outcome.ROSTER_UNAVAILABLE: "Could not load the channel's members. Please try again.",
    Outcome.PUBLISH_FAILED: "The groups could not be posted to the channel. Press *Create groups* to retry.",
    Outcome.UNKNOWN_MEMBER: "That member is no longer part of this menu.",
}


# ---------------------------------------------------------------------------
# Menu builder
# ---------------------------------------------------------------------------


def build_menu_blocks(view: SessionView, notice: Optional[str] = None) -> List[Dict[str, Any]]:
    """Build the interactive selection menu for one session.

    HOW: A header, a summary of the current selection and size, one
    button per candidate (marked when selected), a size dropdown, and
    Reset / Create groups buttons. An optional notice is shown as a
    context block under the summary.
    """
    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "Create groups"},
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": format_selection_summary(view)},
        },
    ]

    if notice:
        blocks.append({
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": notice}],
        })

    buttons = [_member_button(entry.member.id, entry.member.name, entry.selected)
               for entry in view.entries]
    if buttons:
        for start in range(0, len(buttons), _MAX_ELEMENTS_PER_ACTIONS):
            blocks.append({
                "type": "actions",
                "elements": buttons[start:start + _MAX_ELEMENTS_PER_ACTIONS],
            })
    else:
        blocks.append({
            "type": "section",
            "text": {"type": "mrkdwn", "text": "_No members available in this channel._"},
        })

    blocks.append({"type": "divider"})
    blocks.append({
        "type": "section",
        "text": {"type": "mrkdwn", "text": "*Group size*"},
        "accessory": _size_select(view.group_size),
    })
    blocks.append({
        "type": "actions",
        "elements": [
            {
                "type": "button",
                "text": {"type": "plain_text", "text": "Reset"},
                "action_id": ACTION_RESET,
                "value": view.owner,
            },
            {
                "type": "button",
                "text": {"type": "plain_text", "text": "Create groups"},
                "style": "primary",
                "action_id": ACTION_CONFIRM,
                "value": view.owner,
            },
        ],
    })

    return blocks


def format_selection_summary(view: SessionView) -> str:
    """Summary line: how many are selected, who, and the current size."""
    if view.selected_count:
        who = ", ".join(view.selected_names)
    else:
        who = "_nobody yet_"
    return "*Selected ({}):* {}\n*Group size:* {}".format(
        view.selected_count, who, view.group_size
    )


def _member_button(member_id: str, name: str, selected: bool) -> Dict[str, Any]:
    label = "{} {}".format(SELECTED_MARKER, name) if selected else name
    button: Dict[str, Any] = {
        "type": "button",
        "text": {"type": "plain_text", "text": label[:75], "emoji": True},
        "action_id": "{}{}".format(ACTION_TOGGLE_PREFIX, member_id),
        "value": member_id,
    }
    if selected:
        button["style"] = "primary"
    return button


def _size_select(current: int) -> Dict[str, Any]:
    options = [
        {"text": {"type": "plain_text", "text": str(n)}, "value": str(n)}
        for n in range(GROUP_SIZE_MIN, GROUP_SIZE_MAX + 1)
    ]
    select: Dict[str, Any] = {
        "type": "static_select",
        "action_id": ACTION_GROUP_SIZE,
        "placeholder": {"type": "plain_text", "text": "Group size"},
        "options": options,
    }
    for option in options:
        if option["value"] == str(current):
            select["initial_option"] = option
    return select


# ---------------------------------------------------------------------------
# Notices
# ---------------------------------------------------------------------------


def outcome_text(outcome: Outcome, detail: Optional[str] = None) -> str:
    """User-facing text for a non-success outcome.

    RULES:
    - INSUFFICIENT_MEMBERS uses the detail, since it carries the counts
    - Unknown outcomes fall back to the detail or a generic message
    """
    if outcome == Outcome.INSUFFICIENT_MEMBERS and detail:
        return "{}. Select more members or pick a smaller group size.".format(detail)
    return _OUTCOME_TEXT.get(outcome) or detail or "Something went wrong."


def build_notice_blocks(text: str) -> List[Dict[str, Any]]:
    return [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": text},
        },
    ]


def build_help_text() -> str:
    """Usage text shown for "help" or a malformed command."""
    return (
        "*GroupBot help*\n"
        "• `{cmd}` opens a menu to pick members from this channel, choose a "
        "group size and post random groups.\n"
        "• `{cmd} <size> | <name1> | <name2> | ...` splits the listed names "
        "right away. Names may also go on separate lines as a one-column table:\n"
        "```{cmd} 2 | Alice |\n| --- |\n| Bob |\n| Carol |```\n"
        "*Rules:* group size {lo}–{hi}, at least as many names as the group size."
    ).format(cmd=GROUPBOT_COMMAND, lo=GROUP_SIZE_MIN, hi=GROUP_SIZE_MAX)
