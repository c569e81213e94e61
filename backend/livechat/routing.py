# backend/livechat/routing.py
"""Who gets told about a brand-new conversation."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from . import config, models

logger = logging.getLogger(__name__)


class AgentSelector:
    def select(self, db: Session) -> List[models.User]:
        raise NotImplementedError


class DesignatedAgentSelector(AgentSelector):
    """A single agent: the one with ``email``, or the oldest account."""

    def __init__(self, email: Optional[str] = None):
        self.email = email

    def select(self, db: Session) -> List[models.User]:
        agent = None
        if self.email:
            agent = db.query(models.User).filter(models.User.email == self.email).first()
            if agent is None:
                logger.warning("Designated agent %s not found, falling back to oldest account", self.email)
        if agent is None:
            agent = db.query(models.User).order_by(models.User.created_at.asc()).first()
        return [agent] if agent else []


class BroadcastAgentSelector(AgentSelector):
    def select(self, db: Session) -> List[models.User]:
        return db.query(models.User).order_by(models.User.created_at.asc()).all()


def selector_from_config() -> AgentSelector:
    if config.NEW_CONVERSATION_ROUTING == "broadcast":
        return BroadcastAgentSelector()
    if config.NEW_CONVERSATION_ROUTING != "admin":
        logger.warning("Unknown NEW_CONVERSATION_ROUTING %r, using admin", config.NEW_CONVERSATION_ROUTING)
    return DesignatedAgentSelector(config.ADMIN_EMAIL or None)
