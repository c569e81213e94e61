# backend/livechat/api/messages.py
import logging
from typing import Optional

import redis
from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..relay import RelayService
from ..session import SessionData, optional_session
from .deps import get_redis, get_relay
from .presence import other_party, typing_key

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/messages", response_model=schemas.SubmitResult, response_model_exclude_none=True)
def submit_message(
        data: schemas.MessageCreate,
        relay: RelayService = Depends(get_relay),
        session: Optional[SessionData] = Depends(optional_session),
        redis_client: redis.Redis = Depends(get_redis),
):
    result = relay.submit_message(data, session)

    # the sender has stopped typing
    try:
        redis_client.delete(typing_key(result.conversation_id, other_party(data.sender)))
    except redis.RedisError:
        logger.warning("Could not clear typing flag for conversation %s", result.conversation_id)
    return result


@router.get("/messages", response_model=schemas.ConversationOut)
def get_conversation(
        conversation_id: Optional[str] = Query(None, alias="conversationId"),
        relay: RelayService = Depends(get_relay),
):
    return relay.get_conversation(conversation_id)
