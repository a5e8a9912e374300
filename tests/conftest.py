import os

# Configure before any voyage module builds its settings singleton
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["REDIS_URL"] = ""
os.environ["SECRET_KEY"] = "test-secret"
os.environ["AMADEUS_DISABLE"] = "true"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import voyage.models  # noqa: F401
from voyage.database import Base, get_db
from voyage.main import app
import voyage.services.cache_service as cache_module
from voyage.services.cache_service import MemoryStore


class FakeClock:
    """Manually advanced clock for TTL and token-expiry tests."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAmadeus:
    """Records calls and answers from a path → response, exception or callable(params) table."""

    def __init__(self, responses: dict | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, str, dict | None]] = []

    def _answer(self, path: str, params: dict | None):
        answer = self.responses.get(path, {"data": []})
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(params)
        return answer

    async def get(self, path: str, params: dict | None = None) -> dict:
        self.calls.append(("GET", path, params))
        return self._answer(path, params)

    async def post(self, path: str, body: dict | None = None) -> dict:
        self.calls.append(("POST", path, body))
        return self._answer(path, body)

    def count(self, path: str) -> int:
        return sum(1 for _, p, _ in self.calls if p == path)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def fresh_cache(monkeypatch):
    """Each test starts with an empty in-memory cache singleton."""
    monkeypatch.setattr(cache_module.cache_service, "memory", MemoryStore())


@pytest.fixture
def client(tmp_path):
    db_path = tmp_path / "voyage-test.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan (Redis, scheduler, table creation) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client: TestClient, email: str = "asha@example.com", name: str = "Asha") -> dict:
    resp = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": "s3cret-pass"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def auth_headers(client):
    token = register(client)["token"]
    return {"Authorization": f"Bearer {token}"}
