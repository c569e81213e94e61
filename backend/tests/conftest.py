import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from livechat import models  # noqa: E402
from livechat.api.deps import get_redis  # noqa: E402
from livechat.channels import ChannelService  # noqa: E402
from livechat.database import Base, get_db  # noqa: E402
from livechat.main import app  # noqa: E402
from livechat.routing import DesignatedAgentSelector  # noqa: E402
from livechat.session import encode_conversation_token, encode_session, hash_password  # noqa: E402


class FakePusher:
    """Records what would have been sent to the channel service."""

    def __init__(self):
        self.triggered = []
        self.fail = False

    def trigger(self, channel, event, data):
        if self.fail:
            raise RuntimeError("channel service unavailable")
        self.triggered.append((channel, event, data))

    def authenticate(self, channel, socket_id, custom_data=None):
        if "." not in socket_id:
            raise ValueError("Invalid socket ID %s" % socket_id)
        return {"auth": f"test-key:{channel}:{socket_id}"}

    def events(self, name):
        return [(channel, data) for channel, event, data in self.triggered if event == name]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_pusher():
    return FakePusher()


@pytest.fixture
def channels(fake_pusher):
    return ChannelService(client_factory=lambda: fake_pusher)


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def client(session_factory, channels, fake_redis):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.state.channels = channels
    app.state.agent_selector = DesignatedAgentSelector()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def make(name="Agent", email="agent@acme.io", password="secret123"):
        user = models.User(name=name, email=email, password_hash=hash_password(password))
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return make


@pytest.fixture
def login(client):
    def do_login(user):
        token, _ = encode_session(user)
        client.cookies.set("session", token)
        return client

    return do_login


@pytest.fixture
def customer_token():
    return encode_conversation_token
