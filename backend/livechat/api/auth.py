# backend/livechat/api/auth.py
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db, transaction
from ..errors import Conflict, Unauthorized
from ..session import (
    SessionData,
    clear_session_cookie,
    hash_password,
    require_session,
    set_session_cookie,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(data: schemas.SignupIn, response: Response, db: Session = Depends(get_db)):
    if db.query(models.User).filter(models.User.email == data.email).first():
        raise Conflict("Email already registered", details={"email": ["This email is already registered"]})

    user = models.User(name=data.name, email=data.email, password_hash=hash_password(data.password))
    with transaction(db):
        db.add(user)
    db.refresh(user)
    logger.info("New account %s", user.id)

    set_session_cookie(response, user)
    return {"id": user.id, "name": user.name, "email": user.email}


@router.post("/login")
def login(data: schemas.LoginIn, response: Response, db: Session = Depends(get_db)):
    user = db.query(models.User).filter(models.User.email == data.email).first()
    if user is None or not verify_password(data.password, user.password_hash):
        raise Unauthorized("Invalid email or password")

    set_session_cookie(response, user)
    return {"message": "Logged in"}


@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"success": True}


@router.get("/session")
def get_session(session: SessionData = Depends(require_session)):
    return {"session": schemas.SessionOut.model_validate(session).model_dump(mode="json", by_alias=True)}
