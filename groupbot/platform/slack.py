"""Slack implementation of the ChatPlatform collaborator.

WHY: The session manager needs a channel roster when a menu opens and a
way to post the groups when the user confirms. Both are Slack Web API
calls that can fail in ways the core should only see as "roster
unavailable" or "publish failed".

HOW: Wraps the slack_sdk WebClient that Bolt injects into handlers.
The roster is read with paginated conversations.members plus one
users.info per member. Publishing goes through chat.postMessage; if the
SDK call fails, the same API method is retried once as a raw httpx POST
with the bot token.

RULES:
- Bots, deleted users and Slackbot are never part of a roster
- Display name falls back to real name, then to the handle, then the id
- Any SDK or network failure surfaces as RosterUnavailableError or
  PublishFailedError
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from slack_sdk.errors import SlackApiError

from groupbot.config import SLACK_API_URL
from groupbot.core.errors import PublishFailedError, RosterUnavailableError
from groupbot.core.models import Member

logger = logging.getLogger(__name__)

SLACKBOT_USER_ID = "USLACKBOT"

_PAGE_SIZE = 200
_FALLBACK_TIMEOUT_S = 10.0


class SlackPlatform:
    """Roster lookup and message publishing against the Slack Web API."""

    def __init__(
        self,
        client: Any,
        api_url: str = SLACK_API_URL,
        token: Optional[str] = None,
    ) -> None:
        self._client = client
        self._api_url = api_url.rstrip("/")
        self._token = token or getattr(client, "token", None) or ""

    def fetch_channel_members(self, channel_id: str) -> List[Member]:
        try:
            user_ids = self._channel_user_ids(channel_id)
            members = []
            for user_id in user_ids:
                if user_id == SLACKBOT_USER_ID:
                    continue
                user = self._client.users_info(user=user_id).get("user", {})
                if user.get("is_bot") or user.get("deleted"):
                    continue
                members.append(Member(id=user_id, name=_display_name(user)))
        except (SlackApiError, OSError) as exc:
            logger.exception("Failed to fetch members of %s", channel_id)
            raise RosterUnavailableError(channel_id, str(exc)) from exc

        logger.debug("Fetched %d members for %s", len(members), channel_id)
        return members

    def publish_message(self, channel_id: str, text: str) -> None:
        try:
            self._client.chat_postMessage(channel=channel_id, text=text, mrkdwn=True)
            return
        except (SlackApiError, OSError):
            logger.exception("chat_postMessage failed for %s, retrying over HTTP", channel_id)

        self._publish_over_http(channel_id, text)

    def _channel_user_ids(self, channel_id: str) -> List[str]:
        user_ids: List[str] = []
        cursor = None
        while True:
            kwargs: Dict[str, Any] = {"channel": channel_id, "limit": _PAGE_SIZE}
            if cursor:
                kwargs["cursor"] = cursor
            resp = self._client.conversations_members(**kwargs)
            user_ids.extend(resp.get("members", []))
            cursor = (resp.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return user_ids

    def _publish_over_http(self, channel_id: str, text: str) -> None:
        if not self._token:
            raise PublishFailedError(channel_id, "no bot token for HTTP fallback")

        try:
            with httpx.Client(timeout=_FALLBACK_TIMEOUT_S) as http:
                resp = http.post(
                    "{}/chat.postMessage".format(self._api_url),
                    headers={"Authorization": "Bearer {}".format(self._token)},
                    json={"channel": channel_id, "text": text, "mrkdwn": True},
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.exception("HTTP fallback publish failed for %s", channel_id)
            raise PublishFailedError(channel_id, str(exc)) from exc

        if not data.get("ok"):
            raise PublishFailedError(channel_id, data.get("error", "unknown error"))


def _display_name(user: Dict[str, Any]) -> str:
    profile = user.get("profile", {}) or {}
    return (
        profile.get("display_name")
        or profile.get("real_name")
        or user.get("real_name")
        or user.get("name")
        or user.get("id", "")
    )
