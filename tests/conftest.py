import pytest

from availabot.integrations.auth_flow import AuthFlowController
from availabot.integrations.session_store import InMemorySessionStore

from tests.fakes import FakeProvider


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def controller(store, provider):
    return AuthFlowController(store, provider)
