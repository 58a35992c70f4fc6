"""Configuration constants, group size bounds, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Tokens, the command name, and session expiry are
plain module-level values, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are read from
the environment with sensible defaults. load_bot_token() provides a clear
error when the token is missing.

RULES:
- Group size is bounded to [GROUP_SIZE_MIN, GROUP_SIZE_MAX]
- Tokens are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the bot is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Group size bounds
# ---------------------------------------------------------------------------

GROUP_SIZE_MIN = 2
GROUP_SIZE_MAX = 5
DEFAULT_GROUP_SIZE = 3

# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
"""Idle time after which an unconfirmed menu session is discarded."""

SESSION_PRUNE_INTERVAL_S = 300

# ---------------------------------------------------------------------------
# Slack
# ---------------------------------------------------------------------------

SLACK_API_URL = os.getenv("SLACK_API_URL", "https://slack.com/api")
GROUPBOT_COMMAND = os.getenv("GROUPBOT_COMMAND", "/groupbot")
PORT = int(os.getenv("PORT", "3000"))


def load_bot_token() -> str:
    """Load the Slack bot token from the environment.

    WHY: Every roster lookup and publish needs the pre-shared bot token.

    RULES:
    - Raises ValueError if the token is missing or empty
    - Strips an accidental "Bearer " prefix
    """
    token = os.getenv("SLACK_BOT_TOKEN", "").strip()
    if token.startswith("Bearer "):
        token = token[len("Bearer "):].strip()
    if not token:
        raise ValueError(
            "Slack bot token not configured. "
            "Add SLACK_BOT_TOKEN to the .env file."
        )
    return token
