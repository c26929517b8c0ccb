"""Test-specific fixtures."""

from urllib.parse import urlencode
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request

from authflow.db import Database
from authflow.models import User
from authflow.user_store import UserDAO


@pytest.fixture(autouse=True)
def _lock_test_env(monkeypatch):
    """Keep settings deterministic regardless of the developer's shell."""
    for name in (
        "AUTHFLOW_REDIRECT_ALLOWED_HOSTS",
        "AUTHFLOW_ANALYTICS_URL",
        "AUTHFLOW_DATABASE_URL",
        "AUTHFLOW_DEFAULT_REDIRECT_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


def make_request(
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    user_id: str | None = None,
    session_id: str | None = None,
) -> Request:
    """Build a bare Starlette request as seen by the success handler."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "scheme": "https",
        "path": "/login/success",
        "raw_path": b"/login/success",
        "root_path": "",
        "query_string": urlencode(params or {}).encode("latin-1"),
        "headers": [
            (k.lower().encode("latin-1"), v.encode("latin-1"))
            for k, v in (headers or {}).items()
        ],
        "server": ("api.example.com", 443),
        "client": ("127.0.0.1", 50000),
        "state": {},
    }
    request = Request(scope)
    if user_id is not None:
        request.state.user_id = user_id
    if session_id is not None:
        request.state.session_id = session_id
    return request


@pytest.fixture
def request_factory():
    return make_request


@pytest.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'authflow.db'}")
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
def user_store(db):
    return UserDAO(db)


@pytest.fixture
def first_login_user():
    return User(id="u1")


@pytest.fixture
def returning_user():
    return User(id="u2", example_workspace_id="ws-existing", release_notes_viewed_version="1")


@pytest.fixture
def analytics_mock():
    analytics = AsyncMock()
    analytics.send_object_event = AsyncMock(return_value=None)
    return analytics


@pytest.fixture
def cloner_mock():
    cloner = AsyncMock()

    async def _clone(user):
        user.example_workspace_id = "ws-new"
        return "ws-new"

    cloner.clone_examples_workspace = AsyncMock(side_effect=_clone)
    return cloner
