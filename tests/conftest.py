import os
import tempfile

# Environment must be in place before discount_lock.core.config is imported
_DB_DIR = tempfile.mkdtemp(prefix="discount-lock-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.sqlite')}"
os.environ["SESSION_SECRET_KEY"] = "test-session-secret"
os.environ["SHOPIFY_API_KEY"] = "test-api-key"
os.environ["SHOPIFY_API_SECRET"] = "test-api-secret"
os.environ["HOST"] = "https://app.example.com"
os.environ["ENVIRONMENT"] = "development"
os.environ["OPENTELEMETRY_ENABLED"] = "false"
os.environ["HEALTH_RATE_LIMIT"] = "1000/minute"
os.environ["AUTH_RATE_LIMIT"] = "1000/minute"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

TEST_API_KEY = "test-api-key"
TEST_API_SECRET = "test-api-secret"


@pytest.fixture
def shop_domain() -> str:
    """Provides a consistent shop domain for tests."""
    return "test-shop.myshopify.com"


@pytest_asyncio.fixture
async def app():
    """The FastAPI app with a fresh schema; overrides are cleared afterwards."""
    from discount_lock.database import Base, async_engine, init_models
    from discount_lock.main import app as fastapi_app

    await init_models()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections are bound to this test's event loop
    await async_engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
