import httpx
import pytest
from httpx import ASGITransport

RETELL_BASE_URL = "https://api.retellai.com"
MAKE_HOOK_URL = "https://hook.make.test/abc123"


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("RETELL_API_KEY", "test-retell-key")
    monkeypatch.setenv("RETELL_AGENT_ID", "agent-test")
    monkeypatch.setenv("RETELL_FROM_NUMBER", "+13137662804")
    monkeypatch.setenv("RETELL_API_BASE_URL", RETELL_BASE_URL)
    monkeypatch.setenv("MAKE_HOOK_URL", MAKE_HOOK_URL)
    monkeypatch.setenv("DEBUG_WEBHOOK", "true")
    monkeypatch.setenv("NODE_ENV", "test")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c


@pytest.fixture
async def client_without_sink(mock_env, monkeypatch):
    monkeypatch.setenv("MAKE_HOOK_URL", "")
    from app.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
