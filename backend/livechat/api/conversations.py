# backend/livechat/api/conversations.py
from typing import List

from fastapi import APIRouter, Depends

from .. import schemas
from ..relay import RelayService
from ..session import current_user
from .deps import get_relay

router = APIRouter()


@router.get(
    "/conversations",
    response_model=List[schemas.ConversationSummary],
    dependencies=[Depends(current_user)],
)
def list_conversations(relay: RelayService = Depends(get_relay)):
    return relay.list_conversations()
