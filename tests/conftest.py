"""
Pytest fixtures for SubBill tests
"""

import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from subbill.core.dependencies import get_request_supabase, get_session
from subbill.database.supabase_client import get_auth_supabase
from subbill.modules.auth.schemas import Session, SessionUser
from subbill.modules.auth.service import clear_auth_cache
from subbill.modules.services.cache import PopularServicesCache
from subbill.modules.services.routes import get_popular_cache


class FakeQuery:
    """Records chained query-builder calls and returns canned data on execute()"""

    def __init__(self, name, data=None, error=None):
        self.name = name
        self.data = data
        self.error = error
        self.calls = []

    def __getattr__(self, method):
        def record(*args, **kwargs):
            self.calls.append((method, args, kwargs))
            return self
        return record

    def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.data)


class FakeSupabase:
    """Stand-in for supabase.Client covering table(), rpc(), auth and storage"""

    def __init__(self):
        self.tables = {}
        self.table_errors = {}
        self.rpc_results = {}
        self.rpc_errors = {}
        self.queries = []
        self.rpc_calls = []
        self.auth = MagicMock()
        self.storage = MagicMock()

    def set_table(self, name, *results):
        """Each table() call consumes the next result; the last one repeats"""
        self.tables[name] = list(results)

    def table(self, name):
        results = self.tables.get(name, [[]])
        data = results.pop(0) if len(results) > 1 else results[0]
        query = FakeQuery(name, data, self.table_errors.get(name))
        self.queries.append(query)
        return query

    def rpc(self, name, params=None):
        self.rpc_calls.append((name, params))
        return FakeQuery(name, self.rpc_results.get(name), self.rpc_errors.get(name))

    def calls_to(self, method):
        return [(q.name, args) for q in self.queries for (m, args, _) in q.calls if m == method]


def make_service(**overrides):
    row = {
        "id": "svc-1",
        "title": "Netflix",
        "slug": "netflix",
        "category": "media",
        "subcategory": "streaming",
        "description": "Movies and series.",
        "features": ["4K", "Offline downloads"],
        "price": "$15.49/month",
        "website": "https://www.netflix.com",
        "rating": 4.5,
        "likes": 3,
        "dislikes": 2,
        "views": 10,
        "is_active": True,
    }
    row.update(overrides)
    return row


ANONYMOUS = Session()
USER = Session(user=SessionUser(id="user-1", email="user@example.com"), access_token="user-token")
ADMIN = Session(
    user=SessionUser(id="admin-1", email="admin@example.com", is_admin=True),
    access_token="admin-token"
)


@pytest.fixture(autouse=True)
def reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def popular_cache(tmp_path):
    return PopularServicesCache(str(tmp_path / "popular_services.json"))


@pytest.fixture
def app(fake_supabase, popular_cache):
    from subbill.main import app, limiter
    limiter.reset()
    app.dependency_overrides[get_request_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_auth_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_popular_cache] = lambda: popular_cache
    app.dependency_overrides[get_session] = lambda: ANONYMOUS
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def login_as(app):
    """Swap the session every route sees"""
    def _login(session):
        app.dependency_overrides[get_session] = lambda: session
    return _login
