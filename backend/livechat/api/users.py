# backend/livechat/api/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db, transaction
from ..errors import Conflict, InvalidArgument, NotFound
from ..session import current_user, hash_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=List[schemas.UserOut], dependencies=[Depends(current_user)])
def list_users(db: Session = Depends(get_db)):
    return db.query(models.User).order_by(models.User.created_at.desc()).all()


@router.put("/users", response_model=schemas.UserOut, dependencies=[Depends(current_user)])
def update_user(data: schemas.UserUpdate, db: Session = Depends(get_db)):
    user = db.get(models.User, data.id)
    if user is None:
        raise NotFound("User not found")

    if data.email and data.email != user.email:
        taken = db.query(models.User).filter(models.User.email == data.email).first()
        if taken is not None:
            raise Conflict("Email already registered", details={"email": ["This email is already registered"]})

    with transaction(db):
        if data.name:
            user.name = data.name
        if data.email:
            user.email = data.email
        if data.password:
            user.password_hash = hash_password(data.password)
    db.refresh(user)
    return user


@router.delete("/users/{user_id}")
def delete_user(
        user_id: str,
        me: models.User = Depends(current_user),
        db: Session = Depends(get_db),
):
    if user_id == me.id:
        raise InvalidArgument("You cannot delete your own account")
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFound("User not found")

    with transaction(db):
        # count under the same transaction as the delete
        if db.query(models.User).count() <= 1:
            raise InvalidArgument("At least one user must remain")
        db.query(models.Conversation).filter(models.Conversation.assignee_id == user_id).update(
            {models.Conversation.assignee_id: None}, synchronize_session=False
        )
        db.delete(user)
    logger.info("User %s deleted by %s", user_id, me.id)
    return {"success": True, "id": user_id}
