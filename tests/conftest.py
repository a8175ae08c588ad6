import os

# Settings are read at import time; point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["API_BASE_URL"] = "https://api.test/api"

import httpx
import pytest

from llnd_portal.clients.portal_api import PortalApiClient
from llnd_portal.quiz.catalog import get_catalog
from llnd_portal.services.quiz_flow import Declare

from helpers import FakeEnrollmentApi


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def declare():
    return Declare(honest=True, understand=True, name="Jane Citizen")


@pytest.fixture
def fake_api():
    return FakeEnrollmentApi()


@pytest.fixture
async def portal_client(fake_api):
    client = PortalApiClient(token="t0k3n", base_url="https://api.test/api", transport=httpx.MockTransport(fake_api))
    yield client
    await client.aclose()


@pytest.fixture
def api_app(fake_api):
    """The FastAPI app with the enrollment API replaced by ``fake_api``."""
    from fastapi import Depends
    from fastapi.testclient import TestClient

    from llnd_portal.api.deps import get_optional_user, get_portal_client
    from llnd_portal.main import app

    async def fake_portal_client(current_user=Depends(get_optional_user)):
        client = PortalApiClient(
            token=current_user.token if current_user else None,
            base_url="https://api.test/api",
            transport=httpx.MockTransport(fake_api),
        )
        try:
            yield client
        finally:
            await client.aclose()

    app.dependency_overrides[get_portal_client] = fake_portal_client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
