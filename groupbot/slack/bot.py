"""Slack bot: slash command and Block Kit action handlers.

WHY: Users type /groupbot in a channel and either get an interactive
menu (pick members, pick a size, create groups) or, with a list of names
in the command text, get groups posted immediately. This module is the
glue between Slack payloads and the session state machine.

HOW: Uses slack-bolt. Every handler acks first, extracts the owner and
the clicked value from the payload, runs one SessionManager transition,
and re-renders the ephemeral menu through respond(). The same handlers
serve Socket Mode (main() here) and HTTP mode (groupbot.server.app).

RULES:
- All Slack commands and actions must be ack()'d within 3 seconds
- The owner of a session is always the clicking/invoking user id
- Menu messages are ephemeral and replaced in place on each click
- Handlers never raise into Bolt; unexpected faults are logged and
  reported to the user
- Runnable as: python -m groupbot.slack.bot
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Optional

from slack_bolt import App
from slack_bolt.adapter.socket_mode import SocketModeHandler

from groupbot.config import GROUPBOT_COMMAND, SESSION_TTL_SECONDS, load_bot_token
from groupbot.core.command import CommandKind, parse_command
from groupbot.core.errors import CommandError, InsufficientMembersError, PublishFailedError
from groupbot.core.models import Member
from groupbot.core.partition import format_group_listing, partition
from groupbot.core.sessions import Outcome, SessionManager, SessionResult
from groupbot.platform.slack import SlackPlatform
from groupbot.slack.messages import (
    ACTION_CONFIRM,
    ACTION_GROUP_SIZE,
    ACTION_RESET,
    ACTION_TOGGLE_PREFIX,
    build_help_text,
    build_menu_blocks,
    build_notice_blocks,
    outcome_text,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Session store
# ---------------------------------------------------------------------------

session_manager = SessionManager(ttl_seconds=SESSION_TTL_SECONDS)

CONFIRMED_TEXT = "Groups created and posted to the channel!"
FAILURE_TEXT = "Something went wrong while handling your request. Please try again."

_TOGGLE_PATTERN = re.compile("^{}".format(re.escape(ACTION_TOGGLE_PREFIX)))


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------


def create_app(
    bot_token: Optional[str] = None,
    signing_secret: Optional[str] = None,
    token_verification_enabled: bool = True,
) -> App:
    """Create and configure the Slack Bolt app with all handlers.

    WHY: Factory function allows tests and the HTTP server to inject
    credentials and avoids module-level side effects.

    RULES:
    - If bot_token is None, reads from SLACK_BOT_TOKEN env var
    - If signing_secret is None, reads from SLACK_SIGNING_SECRET env var
    - All handlers are registered before returning
    """
    token = bot_token or os.environ.get("SLACK_BOT_TOKEN", "")
    secret = signing_secret or os.environ.get("SLACK_SIGNING_SECRET", "")

    app = App(
        token=token,
        signing_secret=secret,
        token_verification_enabled=token_verification_enabled,
    )

    app.command(GROUPBOT_COMMAND)(handle_groupbot_command)
    app.action(_TOGGLE_PATTERN)(handle_toggle_member)
    app.action(ACTION_GROUP_SIZE)(handle_group_size_select)
    app.action(ACTION_RESET)(handle_reset_selection)
    app.action(ACTION_CONFIRM)(handle_confirm)

    return app


# ---------------------------------------------------------------------------
# Slash command
# ---------------------------------------------------------------------------


def handle_groupbot_command(
    ack: Any, command: Dict[str, Any], respond: Any, client: Any, logger: Any
) -> None:
    """Handle /groupbot: open the menu, show help, or split a name list.

    RULES:
    - ack() FIRST, before the roster fetch
    - A parse error replies with the error and the help text
    """
    ack()

    user_id = command.get("user_id", "")
    channel_id = command.get("channel_id", "")

    try:
        parsed = parse_command(command.get("text", ""))
    except CommandError as exc:
        respond(
            response_type="ephemeral",
            text="*Error:* {}\n\n{}".format(exc, build_help_text()),
        )
        return

    if parsed.kind == CommandKind.HELP:
        respond(response_type="ephemeral", text=build_help_text())
        return

    try:
        if parsed.kind == CommandKind.QUICK:
            _run_quick_command(respond, client, channel_id, parsed.group_size, parsed.names)
        else:
            result = session_manager.open_menu(user_id, channel_id, SlackPlatform(client))
            _render_result(respond, result, replace_original=False)
    except Exception:
        logger.exception("Failed to handle %s for %s", GROUPBOT_COMMAND, user_id)
        respond(response_type="ephemeral", text=FAILURE_TEXT)


def _run_quick_command(
    respond: Any, client: Any, channel_id: str, group_size: int, names: List[str]
) -> None:
    """Partition hand-typed names and publish them without a session."""
    # Names are not user ids; index them so duplicate names stay distinct
    members = [Member(id="{}:{}".format(index, name), name=name)
               for index, name in enumerate(names)]

    try:
        groups = partition(members, group_size)
    except InsufficientMembersError as exc:
        respond(
            response_type="ephemeral",
            text=outcome_text(Outcome.INSUFFICIENT_MEMBERS, str(exc)),
        )
        return

    listing = format_group_listing(groups, group_size)

    try:
        SlackPlatform(client).publish_message(channel_id, listing)
    except PublishFailedError as exc:
        logger.warning("Quick command publish failed: %s\n%s", exc, listing)
        respond(
            response_type="ephemeral",
            text="*Error:* the groups could not be posted ({}).".format(exc.reason or exc),
        )
        return

    respond(response_type="ephemeral", text=CONFIRMED_TEXT)


# ---------------------------------------------------------------------------
# Action handlers (Block Kit interactions)
# ---------------------------------------------------------------------------


def handle_toggle_member(ack: Any, body: Dict[str, Any], respond: Any, logger: Any) -> None:
    """Select or deselect the member whose button was clicked."""
    ack()
    owner = _owner_of(body)
    action = _first_action(body)
    member_id = action.get("value") or action.get("action_id", "")[len(ACTION_TOGGLE_PREFIX):]

    _dispatch(respond, logger, "toggle", lambda: session_manager.toggle_member(owner, member_id))


def handle_group_size_select(ack: Any, body: Dict[str, Any], respond: Any, logger: Any) -> None:
    """Apply the size picked in the dropdown."""
    ack()
    owner = _owner_of(body)
    selected = _first_action(body).get("selected_option") or {}
    try:
        size = int(selected.get("value", ""))
    except ValueError:
        size = 0

    _dispatch(respond, logger, "set size", lambda: session_manager.set_group_size(owner, size))


def handle_reset_selection(ack: Any, body: Dict[str, Any], respond: Any, logger: Any) -> None:
    """Clear the owner's selection."""
    ack()
    owner = _owner_of(body)

    _dispatch(respond, logger, "reset", lambda: session_manager.reset_selection(owner))


def handle_confirm(
    ack: Any, body: Dict[str, Any], respond: Any, client: Any, logger: Any
) -> None:
    """Partition the selection and post the groups to the channel.

    RULES:
    - ack() FIRST; the publish happens after
    - On publish failure the menu stays open so the user can retry
    """
    ack()
    owner = _owner_of(body)
    platform = SlackPlatform(client)

    _dispatch(respond, logger, "confirm", lambda: session_manager.confirm(owner, platform))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dispatch(respond: Any, log: Any, label: str, transition: Any) -> None:
    try:
        result = transition()
    except Exception:
        log.exception("Menu %s failed", label)
        respond(replace_original=False, response_type="ephemeral", text=FAILURE_TEXT)
        return
    _render_result(respond, result)


def _render_result(respond: Any, result: SessionResult, replace_original: bool = True) -> None:
    """Send the menu, a notice, or the confirmation for a transition result."""
    if result.outcome == Outcome.CONFIRMED:
        respond(
            replace_original=replace_original,
            response_type="ephemeral",
            blocks=build_notice_blocks(CONFIRMED_TEXT),
            text=CONFIRMED_TEXT,
        )
        return

    if result.view is None:
        text = outcome_text(result.outcome, result.message)
        respond(
            replace_original=replace_original,
            response_type="ephemeral",
            blocks=build_notice_blocks(text),
            text=text,
        )
        return

    if result.ok:
        notice = result.message
    else:
        notice = outcome_text(result.outcome, result.message)

    respond(
        replace_original=replace_original,
        response_type="ephemeral",
        blocks=build_menu_blocks(result.view, notice),
        text="Create groups",
    )


def _owner_of(body: Dict[str, Any]) -> str:
    return (body.get("user") or {}).get("id", "")


def _first_action(body: Dict[str, Any]) -> Dict[str, Any]:
    actions = body.get("actions") or [{}]
    return actions[0]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Start the Slack bot in Socket Mode.

    RULES:
    - Requires SLACK_BOT_TOKEN and SLACK_APP_TOKEN environment variables
    - Blocks on the SocketModeHandler.start() call
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    bot_token = load_bot_token()
    app_token = os.environ.get("SLACK_APP_TOKEN", "")

    if not app_token:
        raise ValueError("SLACK_APP_TOKEN environment variable is required")

    app = create_app(bot_token=bot_token)

    logger.info("Starting GroupBot in Socket Mode (command %s)...", GROUPBOT_COMMAND)
    logger.info("Idle menu sessions expire after %ds", SESSION_TTL_SECONDS)

    handler = SocketModeHandler(app, app_token)
    handler.start()


if __name__ == "__main__":
    main()
