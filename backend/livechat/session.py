# backend/livechat/session.py
"""Signed session cookies for agents and conversation tokens for customers.

Both are HS256 JWTs signed with ``SESSION_SECRET``. They carry different
audiences so a customer token can never be replayed as an agent session.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Response
from fastapi.security import APIKeyCookie, APIKeyHeader
from sqlalchemy.orm import Session

from . import config, models
from .database import get_db
from .errors import Unauthorized

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
SESSION_AUDIENCE = "livechat:session"
CONVERSATION_AUDIENCE = "livechat:conversation"

session_cookie = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)
conversation_token_header = APIKeyHeader(name="X-Conversation-Token", auto_error=False)


@dataclass
class SessionData:
    user_id: str
    email: str
    name: Optional[str]
    expires_at: datetime


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
    except ValueError:
        logger.warning("Malformed password hash in store")
        return False


def encode_session(user: models.User) -> tuple[str, datetime]:
    expires_at = datetime.now(tz=timezone.utc) + timedelta(hours=config.SESSION_TTL_HOURS)
    token = jwt.encode(
        {
            "userId": user.id,
            "email": user.email,
            "name": user.name,
            "exp": expires_at,
            "aud": SESSION_AUDIENCE,
        },
        config.SESSION_SECRET,
        algorithm="HS256",
    )
    return token, expires_at


def decode_session(token: Optional[str]) -> Optional[SessionData]:
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            config.SESSION_SECRET,
            audience=SESSION_AUDIENCE,
            algorithms=["HS256"],
            options={"require": ["exp"]},
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected session token: %s", e)
        return None
    return SessionData(
        user_id=payload["userId"],
        email=payload["email"],
        name=payload.get("name"),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def set_session_cookie(response: Response, user: models.User):
    token, expires_at = encode_session(user)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        expires=expires_at,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(SESSION_COOKIE, path="/")


def encode_conversation_token(conversation_id: str) -> str:
    # no expiry: the widget keeps it for as long as it keeps the conversation id
    return jwt.encode(
        {"cid": conversation_id, "aud": CONVERSATION_AUDIENCE},
        config.SESSION_SECRET,
        algorithm="HS256",
    )


def decode_conversation_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, config.SESSION_SECRET, audience=CONVERSATION_AUDIENCE, algorithms=["HS256"])
    except jwt.PyJWTError as e:
        logger.info("Rejected conversation token: %s", e)
        return None
    return payload.get("cid")


def optional_session(token: Optional[str] = Depends(session_cookie)) -> Optional[SessionData]:
    return decode_session(token)


def require_session(session: Optional[SessionData] = Depends(optional_session)) -> SessionData:
    if session is None:
        raise Unauthorized()
    return session


def current_user(
        session: SessionData = Depends(require_session),
        db: Session = Depends(get_db),
) -> models.User:
    user = db.get(models.User, session.user_id)
    if user is None:
        # account was deleted after the cookie was issued
        raise Unauthorized()
    return user
