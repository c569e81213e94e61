# backend/livechat/api/deps.py
from functools import lru_cache

import redis
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .. import config
from ..channels import ChannelService
from ..database import get_db
from ..relay import RelayService
from ..routing import AgentSelector


@lru_cache
def get_redis() -> redis.Redis:
    return redis.from_url(config.REDIS_URL, decode_responses=True)


def get_channels(request: Request) -> ChannelService:
    return request.app.state.channels


def get_agent_selector(request: Request) -> AgentSelector:
    return request.app.state.agent_selector


def get_relay(
        db: Session = Depends(get_db),
        channels: ChannelService = Depends(get_channels),
        agent_selector: AgentSelector = Depends(get_agent_selector),
) -> RelayService:
    return RelayService(db, channels, agent_selector)
