import pytest

from helpers import BASE_URL, HOME_PAGE, FakeSession, RecordingNavigator
from todo_portal.api.client import ApiClient
from todo_portal.api.endpoints import Endpoints
from todo_portal.config import ApiSettings, SessionSettings, Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api=ApiSettings(base_url=BASE_URL, home_page=HOME_PAGE),
        session=SessionSettings(refresh_interval_seconds=0.05),
    )


@pytest.fixture
def endpoints(settings) -> Endpoints:
    return Endpoints.from_settings(settings)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_session, settings) -> ApiClient:
    return ApiClient(session=fake_session, security=settings.security)


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()
