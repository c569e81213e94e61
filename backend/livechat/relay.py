# backend/livechat/relay.py
"""Message relay: persist inbound messages, then push them to subscribers.

Writes happen in one transaction; publishing happens after commit and is
best effort, so a failed push is a delivery gap rather than an error for the
sender. Subscribers merge pushed messages by id.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .channels import (
    NEW_CONVERSATION,
    NEW_MESSAGE,
    ChannelService,
    agent_channel,
    conversation_channel,
    parse_channel,
)
from .database import transaction
from .errors import Forbidden, InvalidArgument, MissingConversation, NotFound, Unauthorized
from .routing import AgentSelector
from .session import SessionData, encode_conversation_token

logger = logging.getLogger(__name__)


def guest_label(conversation_id: str) -> str:
    return f"Guest {conversation_id[:6]}"


def _event_payload(model: schemas.CamelModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)


class RelayService:
    def __init__(self, db: Session, channels: ChannelService, agent_selector: AgentSelector):
        self.db = db
        self.channels = channels
        self.agent_selector = agent_selector

    def submit_message(
            self,
            data: schemas.MessageCreate,
            session: Optional[SessionData] = None,
    ) -> schemas.SubmitResult:
        text = (data.text or "").strip()
        image_url = data.metadata.image_url if data.metadata else None
        if not text and not image_url:
            raise InvalidArgument(details={"text": ["Message text is required"]})
        if data.sender == "agent" and (session is None or self.db.get(models.User, session.user_id) is None):
            raise Unauthorized()

        created = False
        with transaction(self.db):
            if data.conversation_id:
                conversation = (
                    self.db.query(models.Conversation)
                    .filter(models.Conversation.id == data.conversation_id)
                    .with_for_update()
                    .first()
                )
                if conversation is None:
                    raise NotFound("Conversation not found")
            elif data.sender == "customer":
                conversation_id = models.new_id()
                conversation = models.Conversation(
                    id=conversation_id,
                    customer_name=(data.sender_name or "").strip() or guest_label(conversation_id),
                    is_active=True,
                )
                self.db.add(conversation)
                created = True
            else:
                raise MissingConversation()

            # never move updated_at backwards, even if this host's clock lags
            now = models.utcnow()
            if conversation.updated_at is not None and conversation.updated_at > now:
                now = conversation.updated_at
            conversation.updated_at = now
            if data.sender == "customer":
                conversation.is_active = True

            message = models.Message(
                conversation_id=conversation.id,
                text=text or None,
                sender=data.sender,
                timestamp=now,
                meta={"imageUrl": image_url} if image_url else None,
            )
            self.db.add(message)
            self.db.flush()
            message_out = schemas.MessageOut.model_validate(message)
            conversation_id = conversation.id
            customer_name = conversation.customer_name
            created_at = conversation.created_at

        logger.info("Stored %s message %s in conversation %s", data.sender, message_out.id, conversation_id)
        self.channels.publish(conversation_channel(conversation_id), NEW_MESSAGE, _event_payload(message_out))

        if created:
            event = schemas.NewConversationEvent(
                id=conversation_id,
                name=customer_name,
                message=message_out,
                created_at=created_at,
                is_active=True,
            )
            self._notify_agents(event)

        return schemas.SubmitResult(
            conversation_id=conversation_id,
            customer_token=encode_conversation_token(conversation_id) if created else None,
        )

    def _notify_agents(self, event: schemas.NewConversationEvent):
        try:
            agents = self.agent_selector.select(self.db)
        except SQLAlchemyError:
            logger.exception("Could not select agents for conversation %s", event.id)
            return
        if not agents:
            logger.warning("No agent to notify about conversation %s", event.id)
            return
        payload = _event_payload(event)
        for agent in agents:
            self.channels.publish(agent_channel(agent.id), NEW_CONVERSATION, payload)

    def get_conversation(self, conversation_id: Optional[str]) -> schemas.ConversationOut:
        if not conversation_id:
            raise MissingConversation()
        conversation = self.db.get(models.Conversation, conversation_id)
        if conversation is None:
            raise NotFound("Conversation not found")
        messages = (
            self.db.query(models.Message)
            .filter(models.Message.conversation_id == conversation_id)
            .order_by(models.Message.timestamp.asc(), models.Message.id.asc())
            .all()
        )
        return schemas.ConversationOut(
            id=conversation.id,
            name=conversation.customer_name,
            is_active=conversation.is_active,
            messages=[schemas.MessageOut.model_validate(m) for m in messages],
        )

    def list_conversations(self) -> List[schemas.ConversationSummary]:
        conversations = (
            self.db.query(models.Conversation)
            .order_by(models.Conversation.updated_at.desc())
            .all()
        )
        # history is fetched lazily per conversation
        return [
            schemas.ConversationSummary(
                id=c.id,
                name=c.customer_name,
                messages=[],
                is_active=c.is_active,
                unread=0,
                updated_at=c.updated_at,
            )
            for c in conversations
        ]

    def authorize_channel(
            self,
            socket_id: Optional[str],
            channel_name: Optional[str],
            session: Optional[SessionData] = None,
            customer_conversation_id: Optional[str] = None,
    ) -> dict:
        """Grant a private-channel subscription to the agent or customer it belongs to."""
        if session is None and customer_conversation_id is None:
            raise Unauthorized()
        if session is not None and self.db.get(models.User, session.user_id) is None:
            raise Unauthorized()
        if not socket_id or not channel_name:
            raise InvalidArgument(details={"socket_id": ["required"], "channel_name": ["required"]})

        kind, target = parse_channel(channel_name)
        allowed = False
        if session is not None:
            if kind == "agent":
                allowed = target == session.user_id
            elif kind == "conversation":
                conversation = self.db.get(models.Conversation, target)
                allowed = conversation is not None and conversation.assignee_id in (None, session.user_id)
        if not allowed and customer_conversation_id is not None:
            allowed = kind == "conversation" and target == customer_conversation_id
        if not allowed:
            logger.warning(
                "Denied subscription to %s (agent=%s, conversation=%s)",
                channel_name,
                session.user_id if session else None,
                customer_conversation_id,
            )
            raise Forbidden()

        try:
            return self.channels.authorize(socket_id, channel_name)
        except ValueError as e:
            raise InvalidArgument(str(e)) from e


def deactivate_stale_conversations(db: Session, cutoff: datetime) -> int:
    with transaction(db):
        count = (
            db.query(models.Conversation)
            .filter(
                models.Conversation.updated_at < cutoff,
                models.Conversation.is_active == True,  # noqa: E712
            )
            .update({models.Conversation.is_active: False}, synchronize_session=False)
        )
    if count:
        logger.info("Deactivated %d stale conversations", count)
    return count
