"""HTTP-test fixtures.

Each test gets a fresh engine container with a settable clock, swapped in
through FastAPI dependency overrides. Callers authenticate with tokens
minted directly by the JWT handler.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.bm_auction.application.container import Container, build_container, get_container
from src.bm_gateway.auth.jwt_handler import create_access_token
from src.main import app

T0 = 1_700_000_000


class MutableClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(T0)


@pytest.fixture
def container(clock: MutableClock) -> Container:
    return build_container(settings, clock=clock)


@pytest_asyncio.fixture
async def client(container: Container) -> AsyncClient:
    app.dependency_overrides[get_container] = lambda: container
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _bearer(subject: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject)}"}


@pytest.fixture
def owner() -> dict[str, str]:
    return _bearer("owner")


@pytest.fixture
def teller() -> dict[str, str]:
    return _bearer(settings.TELLER_ID)


@pytest.fixture
def admin() -> dict[str, str]:
    return _bearer(settings.ADMIN_IDS[0])
