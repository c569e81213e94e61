# backend/livechat/channels.py
"""Publishing to, and authorizing subscriptions on, the hosted channel service."""
import logging
import re
from typing import Callable, Optional

import pusher

from . import config
from .errors import Internal

logger = logging.getLogger(__name__)

NEW_MESSAGE = "new-message"
NEW_CONVERSATION = "new-conversation"

CONVERSATION_PREFIX = "private-conversation-"
AGENT_PREFIX = "private-agent-"

_CHANNEL_NAME = re.compile(r"^[A-Za-z0-9_\-=@,.;]{1,164}$")


def conversation_channel(conversation_id: str) -> str:
    return f"{CONVERSATION_PREFIX}{conversation_id}"


def agent_channel(user_id: str) -> str:
    return f"{AGENT_PREFIX}{user_id}"


def parse_channel(channel_name: str) -> tuple[Optional[str], Optional[str]]:
    """Split a channel name into ("conversation" | "agent", id), or (None, None)."""
    if not channel_name or not _CHANNEL_NAME.match(channel_name):
        return None, None
    for kind, prefix in (("conversation", CONVERSATION_PREFIX), ("agent", AGENT_PREFIX)):
        if channel_name.startswith(prefix) and len(channel_name) > len(prefix):
            return kind, channel_name[len(prefix):]
    return None, None


def _default_client() -> pusher.Pusher:
    return pusher.Pusher(
        app_id=config.PUSHER_APP_ID,
        key=config.PUSHER_KEY,
        secret=config.PUSHER_SECRET,
        cluster=config.PUSHER_CLUSTER,
        ssl=True,
    )


class ChannelService:
    """Owns the channel-service client; it is built on first use."""

    def __init__(self, client_factory: Callable[[], pusher.Pusher] = _default_client):
        self._client_factory = client_factory
        self._client = None

    @property
    def client(self) -> pusher.Pusher:
        if self._client is None:
            try:
                self._client = self._client_factory()
            except ValueError as e:
                logger.error("Channel service is misconfigured: %s", e)
                raise Internal("Channel service unavailable") from e
            logger.info("Channel service client created")
        return self._client

    def publish(self, channel: str, event: str, payload: dict) -> bool:
        """Best effort: failures are logged and reported as False, never raised."""
        try:
            self.client.trigger(channel, event, payload)
        except Exception:
            logger.exception("Failed to publish %s to %s", event, channel)
            return False
        return True

    def authorize(self, socket_id: str, channel_name: str) -> dict:
        return self.client.authenticate(channel=channel_name, socket_id=socket_id)
