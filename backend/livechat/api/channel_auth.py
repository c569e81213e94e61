# backend/livechat/api/channel_auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Form

from ..relay import RelayService
from ..session import SessionData, conversation_token_header, decode_conversation_token, optional_session
from .deps import get_relay

router = APIRouter()


@router.post("/channel-auth")
def authorize_channel(
        socket_id: str = Form(None),
        channel_name: str = Form(None),
        relay: RelayService = Depends(get_relay),
        session: Optional[SessionData] = Depends(optional_session),
        conversation_token: Optional[str] = Depends(conversation_token_header),
):
    # the channel-service client library posts form fields and reads the JSON grant back
    return relay.authorize_channel(
        socket_id,
        channel_name,
        session=session,
        customer_conversation_id=decode_conversation_token(conversation_token),
    )
