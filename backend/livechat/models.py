# backend/livechat/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .database import Base

DEFAULT_WELCOME_MESSAGE = "Hi there! How can we help you today?"
DEFAULT_OFFLINE_MESSAGE = "We're offline right now, but leave a message and we'll get back to you soon."
DEFAULT_PRIMARY_COLOR = "#3F51B5"
DEFAULT_BACKGROUND_COLOR = "#F0F2F5"


def utcnow() -> datetime:
    # naive UTC, so values compare equal after a round trip through SQLite
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255))
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    settings = relationship(
        "WorkspaceSettings", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    quick_replies = relationship("QuickReply", back_populates="user", cascade="all, delete-orphan")


class WorkspaceSettings(Base):
    __tablename__ = "settings"
    # doubles as the public appId the widget uses
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    welcome_message = Column(Text, default=DEFAULT_WELCOME_MESSAGE)
    offline_message = Column(Text, default=DEFAULT_OFFLINE_MESSAGE)
    auto_open_widget = Column(Boolean, default=True)
    allow_customer_image_upload = Column(Boolean, default=True)
    allow_agent_image_upload = Column(Boolean, default=True)
    brand_logo_url = Column(Text)
    primary_color = Column(String(7), default=DEFAULT_PRIMARY_COLOR)
    background_color = Column(String(7), default=DEFAULT_BACKGROUND_COLOR)
    workspace_name = Column(String(255))
    workspace_domain = Column(String(255))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="settings")


class Conversation(Base):
    __tablename__ = "conversations"
    id = Column(String(36), primary_key=True, default=new_id)
    customer_name = Column(String(255))
    assignee_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    messages = relationship("Message", back_populates="conversation", order_by="Message.timestamp")


class Message(Base):
    __tablename__ = "messages"
    id = Column(String(36), primary_key=True, default=new_id)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), nullable=False, index=True)
    text = Column(Text, nullable=True)
    sender = Column(String(50), nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    meta = Column("metadata", JSON, nullable=True)

    conversation = relationship("Conversation", back_populates="messages")


class QuickReply(Base):
    __tablename__ = "quick_replies"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="quick_replies")
