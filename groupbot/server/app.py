"""FastAPI application receiving Slack webhooks over HTTP.

WHY: Socket Mode is convenient for development, but a public deployment
receives slash commands and button clicks as signed HTTP requests. This
app exposes the Bolt handlers behind one endpoint and adds a health check
for load balancers.

HOW: The Bolt app is built lazily on the first Slack request so the
module imports without credentials. A lifespan task prunes idle menu
sessions every SESSION_PRUNE_INTERVAL_S seconds.

RULES:
- POST /slack/events handles commands, actions and events
- GET /health never touches Slack
- The session store is the one owned by groupbot.slack.bot
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from slack_bolt.adapter.fastapi import SlackRequestHandler

from groupbot import __version__
from groupbot.config import PORT, SESSION_PRUNE_INTERVAL_S, load_bot_token
from groupbot.server.models import HealthResponse
from groupbot.slack import bot

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

_handler: Optional[SlackRequestHandler] = None
_handler_lock = threading.Lock()


def get_slack_handler() -> SlackRequestHandler:
    """Build the Bolt request handler once, on first use."""
    global _handler
    with _handler_lock:
        if _handler is None:
            _handler = SlackRequestHandler(bot.create_app(bot_token=load_bot_token()))
        return _handler


async def _periodic_prune() -> None:
    """Prune idle menu sessions on a fixed interval."""
    while True:
        await asyncio.sleep(SESSION_PRUNE_INTERVAL_S)
        bot.session_manager.prune_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic pruning on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_prune())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="GroupBot",
    description=(
        "Slack bot that splits channel members into random groups. "
        "Slack sends slash commands and interactive payloads to "
        "/slack/events."
    ),
    version=__version__,
)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.post(
    "/slack/events",
    tags=["slack"],
    summary="Slack webhook",
    description="Slash commands, Block Kit actions and events, verified with the signing secret.",
)
async def slack_events(req: Request):
    return await get_slack_handler().handle(req)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        active_sessions=bot.session_manager.active_count(),
    )


def run_api():
    """Entry point for the groupbot-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=PORT)
