# backend/livechat/api/quick_replies.py
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db, transaction
from ..errors import InvalidArgument, NotFound
from ..session import current_user

router = APIRouter()


def _owned_reply(db: Session, reply_id: str, user: models.User) -> models.QuickReply:
    reply = (
        db.query(models.QuickReply)
        .filter(models.QuickReply.id == reply_id, models.QuickReply.user_id == user.id)
        .first()
    )
    if reply is None:
        raise NotFound("Quick reply not found")
    return reply


@router.get("/quick-replies", response_model=List[schemas.QuickReplyOut])
def list_quick_replies(user: models.User = Depends(current_user), db: Session = Depends(get_db)):
    return (
        db.query(models.QuickReply)
        .filter(models.QuickReply.user_id == user.id)
        .order_by(models.QuickReply.created_at.desc())
        .all()
    )


@router.post("/quick-replies", response_model=schemas.QuickReplyOut, status_code=status.HTTP_201_CREATED)
def create_quick_reply(
        data: schemas.QuickReplyIn,
        user: models.User = Depends(current_user),
        db: Session = Depends(get_db),
):
    reply = models.QuickReply(user_id=user.id, title=data.title, content=data.content)
    with transaction(db):
        db.add(reply)
    db.refresh(reply)
    return reply


@router.put("/quick-replies", response_model=schemas.QuickReplyOut)
def update_quick_reply(
        data: schemas.QuickReplyUpdate,
        user: models.User = Depends(current_user),
        db: Session = Depends(get_db),
):
    reply = _owned_reply(db, data.id, user)
    with transaction(db):
        reply.title = data.title
        reply.content = data.content
    db.refresh(reply)
    return reply


@router.delete("/quick-replies")
def delete_quick_reply(
        id: Optional[str] = None,
        user: models.User = Depends(current_user),
        db: Session = Depends(get_db),
):
    if not id:
        raise InvalidArgument("ID is required")
    reply = _owned_reply(db, id, user)
    with transaction(db):
        db.delete(reply)
    return {"success": True, "id": id}
