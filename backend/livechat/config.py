# backend/livechat/config.py
import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./livechat.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

PUSHER_APP_ID = os.getenv("PUSHER_APP_ID", "")
PUSHER_KEY = os.getenv("PUSHER_KEY", "")
PUSHER_SECRET = os.getenv("PUSHER_SECRET", "")
PUSHER_CLUSTER = os.getenv("PUSHER_CLUSTER", "mt1")

SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-session-secret-change-me")
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", "24"))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() in ("true", "on", "1")

# "admin" notifies one designated agent, "broadcast" notifies every agent
NEW_CONVERSATION_ROUTING = os.getenv("NEW_CONVERSATION_ROUTING", "admin")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")

CONVERSATION_INACTIVE_DAYS = int(os.getenv("CONVERSATION_INACTIVE_DAYS", "3"))

CORS_ORIGINS = [o for o in os.getenv("CORS_ORIGINS", "").split(",") if o]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
