# backend/livechat/main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.responses import FileResponse

from . import config, models
from .api import auth, channel_auth, conversations, messages, presence, quick_replies, settings, users
from .channels import ChannelService
from .database import SessionLocal, init_db
from .errors import RelayError
from .relay import deactivate_stale_conversations
from .routing import selector_from_config

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


async def cleanup_inactive_conversations():
    while True:
        await asyncio.sleep(3600)
        cutoff = models.utcnow() - timedelta(days=config.CONVERSATION_INACTIVE_DAYS)
        try:
            with SessionLocal() as db:
                deactivate_stale_conversations(db, cutoff)
        except SQLAlchemyError:
            logger.exception("Stale conversation sweep failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    tasks = [asyncio.create_task(cleanup_inactive_conversations())]
    yield
    for t in tasks:
        t.cancel()


app = FastAPI(lifespan=lifespan)
app.state.channels = ChannelService()
app.state.agent_selector = selector_from_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RelayError)
async def handle_relay_error(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = {}
    for error in exc.errors():
        # ("body", "email") -> "email"
        field = ".".join(str(p) for p in error["loc"] if p not in ("body", "query", "path")) or "form"
        details.setdefault(field, []).append(error["msg"])
    return JSONResponse(status_code=400, content={"error": "Invalid data", "details": details})


@app.exception_handler(IntegrityError)
async def handle_integrity_error(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"error": "Conflict"})


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# API
for module in (messages, conversations, presence, channel_auth, settings, users, auth, quick_replies):
    app.include_router(module.router, prefix="/api")


@app.get("/widget.js")
async def widget_js():
    return FileResponse(STATIC_DIR / "widget.js", media_type="application/javascript")
