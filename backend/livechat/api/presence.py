# backend/livechat/api/presence.py
import json
from datetime import datetime, timezone

import redis
from fastapi import APIRouter, Depends

from .. import schemas
from .deps import get_redis

TYPING_TTL = 3
HEARTBEAT_TTL = 35
ONLINE_WINDOW = 30

router = APIRouter()


def typing_key(conversation_id: str, viewer: str) -> str:
    """Flag shown to `viewer` while the other party types."""
    return f"typing:{viewer}:{conversation_id}"


def other_party(role: str) -> str:
    return "agent" if role == "customer" else "customer"


def online_key(conversation_id: str, role: str) -> str:
    return f"online:{role}:{conversation_id}"


@router.post("/conversations/{conversation_id}/typing")
def set_typing(
        conversation_id: str,
        role: schemas.Sender = "customer",
        is_typing: bool = True,
        redis_client: redis.Redis = Depends(get_redis),
):
    # role is the typist; the flag is for whoever reads the other side
    key = typing_key(conversation_id, other_party(role))
    if is_typing:
        redis_client.setex(key, TYPING_TTL, "1")
    else:
        redis_client.delete(key)
    return {"status": "ok"}


@router.get("/conversations/{conversation_id}/typing")
def get_typing(
        conversation_id: str,
        role: schemas.Sender = "customer",
        redis_client: redis.Redis = Depends(get_redis),
):
    return {"isTyping": bool(redis_client.exists(typing_key(conversation_id, role)))}


@router.post("/conversations/{conversation_id}/heartbeat")
def heartbeat(
        conversation_id: str,
        role: schemas.Sender = "customer",
        redis_client: redis.Redis = Depends(get_redis),
):
    status = {"role": role, "last_seen": datetime.now(timezone.utc).isoformat()}
    redis_client.setex(online_key(conversation_id, role), HEARTBEAT_TTL, json.dumps(status))
    return {"status": "ok"}


def _is_online(redis_client: redis.Redis, conversation_id: str, role: str) -> bool:
    data = redis_client.get(online_key(conversation_id, role))
    if not data:
        return False
    last_seen = datetime.fromisoformat(json.loads(data)["last_seen"])
    return (datetime.now(timezone.utc) - last_seen).total_seconds() < ONLINE_WINDOW


@router.get("/conversations/{conversation_id}/online", response_model=schemas.OnlineStatus)
def get_online_status(conversation_id: str, redis_client: redis.Redis = Depends(get_redis)):
    return schemas.OnlineStatus(
        customer_online=_is_online(redis_client, conversation_id, "customer"),
        agent_online=_is_online(redis_client, conversation_id, "agent"),
    )
