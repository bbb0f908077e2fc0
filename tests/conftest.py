import asyncio
import os
import tempfile

# Settings are read at import time, so the test database and upload tree
# must be configured before anything from hoarding_api is imported.
_TEST_ROOT = tempfile.mkdtemp(prefix="hoarding-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.sqlite3"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_ON_STARTUP"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from hoarding_api.main import app  # noqa: E402
from hoarding_api.seed import SEED_PASSWORD  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    from hoarding_api.database import async_session, create_tables, drop_tables, engine
    from hoarding_api.seed import seed_data
    from hoarding_api.services.storage import init_storage_dirs

    async def _reset():
        await drop_tables()
        await create_tables()
        init_storage_dirs()
        async with async_session() as session:
            await seed_data(session)
        await engine.dispose()

    asyncio.run(_reset())


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def login(client: AsyncClient, email: str, password: str = SEED_PASSWORD) -> dict:
    response = await client.post("/api/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def auth():
    """Returns ``await auth(client, email)`` -> Authorization headers for a seeded user."""
    return login
