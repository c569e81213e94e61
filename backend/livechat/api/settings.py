# backend/livechat/api/settings.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db, transaction
from ..errors import NotFound
from ..session import SessionData, current_user, optional_session

logger = logging.getLogger(__name__)

router = APIRouter()

FALLBACK_SETTINGS = {
    "id": "default-fallback-id",
    "welcomeMessage": models.DEFAULT_WELCOME_MESSAGE,
    "offlineMessage": models.DEFAULT_OFFLINE_MESSAGE,
    "autoOpenWidget": True,
    "brandLogoUrl": "",
    "primaryColor": models.DEFAULT_PRIMARY_COLOR,
    "backgroundColor": models.DEFAULT_BACKGROUND_COLOR,
    "workspaceName": "Live Chat",
    "allowCustomerImageUpload": True,
}


def _dump(model: schemas.CamelModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)


@router.get("/settings")
def get_settings(
        app_id: Optional[str] = Query(None, alias="appId"),
        db: Session = Depends(get_db),
        session: Optional[SessionData] = Depends(optional_session),
):
    # public widget lookup
    if app_id:
        row = db.get(models.WorkspaceSettings, app_id)
        if row is None:
            raise NotFound("Settings not found")
        return _dump(schemas.PublicSettingsOut.model_validate(row))

    user = db.get(models.User, session.user_id) if session else None
    if user is not None:
        if user.settings is None:
            try:
                with transaction(db):
                    db.add(models.WorkspaceSettings(user_id=user.id, workspace_name=user.name or "My Company"))
                logger.info("Created default settings for user %s", user.id)
            except IntegrityError:
                # a concurrent first read created them
                logger.info("Settings for user %s already exist", user.id)
            db.refresh(user)
        return _dump(schemas.SettingsOut.model_validate(user.settings))

    # guest on the landing page: any workspace will do
    row = db.query(models.WorkspaceSettings).order_by(models.WorkspaceSettings.created_at.asc()).first()
    if row is None:
        return FALLBACK_SETTINGS
    return _dump(schemas.PublicSettingsOut.model_validate(row))


@router.post("/settings")
def update_settings(
        data: schemas.SettingsUpdate,
        user: models.User = Depends(current_user),
        db: Session = Depends(get_db),
):
    row = user.settings
    if row is None:
        raise NotFound("Settings not found for user")

    changes = data.model_dump(exclude_unset=True)
    name = changes.pop("name", None)
    with transaction(db):
        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_at = models.utcnow()
        if name:
            user.name = name
    db.refresh(row)
    return _dump(schemas.SettingsOut.model_validate(row))
