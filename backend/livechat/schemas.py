from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

Sender = Literal["agent", "customer"]
HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


class CamelModel(BaseModel):
    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class MessageMetadata(CamelModel):
    image_url: Optional[str] = None


class MessageCreate(CamelModel):
    text: Optional[str] = None
    conversation_id: Optional[str] = None
    sender: Sender
    sender_name: Optional[str] = None
    metadata: Optional[MessageMetadata] = None


class MessageOut(CamelModel):
    id: str
    conversation_id: str
    text: Optional[str]
    sender: Sender
    timestamp: datetime
    meta: Optional[dict] = Field(default=None, alias="metadata", validation_alias="meta")


class SubmitResult(CamelModel):
    success: bool = True
    conversation_id: str
    customer_token: Optional[str] = None


class ConversationOut(CamelModel):
    id: str
    name: Optional[str]
    is_active: bool
    messages: List[MessageOut]


class ConversationSummary(CamelModel):
    id: str
    name: Optional[str]
    messages: List[MessageOut] = []
    is_active: bool
    unread: int = 0
    updated_at: datetime


class NewConversationEvent(CamelModel):
    id: str
    name: Optional[str]
    message: MessageOut
    created_at: datetime
    is_active: bool


class PublicSettingsOut(CamelModel):
    id: str
    welcome_message: Optional[str]
    offline_message: Optional[str]
    auto_open_widget: Optional[bool]
    brand_logo_url: Optional[str]
    primary_color: Optional[str]
    background_color: Optional[str]
    workspace_name: Optional[str]
    allow_customer_image_upload: Optional[bool]


class SettingsOut(PublicSettingsOut):
    user_id: str
    allow_agent_image_upload: Optional[bool]
    workspace_domain: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SettingsUpdate(CamelModel):
    welcome_message: Optional[str] = None
    offline_message: Optional[str] = None
    auto_open_widget: Optional[bool] = None
    allow_customer_image_upload: Optional[bool] = None
    allow_agent_image_upload: Optional[bool] = None
    brand_logo_url: Optional[str] = None
    primary_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    workspace_name: Optional[str] = None
    workspace_domain: Optional[str] = None
    # profile
    name: Optional[str] = Field(default=None, min_length=2)

    @field_validator("brand_logo_url")
    @classmethod
    def logo_is_url_or_empty(cls, value):
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("must be a URL or empty")
        return value


class UserOut(CamelModel):
    id: str
    name: Optional[str]
    email: str
    created_at: datetime


class UserUpdate(CamelModel):
    id: str
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def blank_or_long_enough(cls, value):
        # the dashboard form sends "" to keep the current password
        if value and len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value or None


class SignupIn(CamelModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SessionOut(CamelModel):
    user_id: str
    email: str
    name: Optional[str]
    expires_at: datetime


class QuickReplyIn(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1)


class QuickReplyUpdate(QuickReplyIn):
    id: str


class QuickReplyOut(CamelModel):
    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


class OnlineStatus(CamelModel):
    customer_online: bool
    agent_online: bool
