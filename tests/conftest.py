import itertools
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from storefront.api.deps import get_db, get_google_client
from storefront.core.config import Settings, get_settings
from storefront.core.security import hash_password
from storefront.main import app
from storefront.services import auth_service, users_service

ADMIN_EMAIL = "admin@shop.test"
WEBHOOK_SECRET = "whsec-test"


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = None


class FakeQuery:
    """The slice of the PostgREST query builder the services use."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def _matches(self, row):
        return all(f(row) for f in self.filters)

    def execute(self):
        if (self.table, self.action) in self.db.failures:
            raise APIError({"message": f"{self.action} on {self.table} failed", "code": "500", "hint": None, "details": None})
        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = {"id": str(uuid.uuid4()), "created_at": self.db.now(), **item}
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)
        matched = [row for row in rows if self._matches(row)]
        if self.action == "update":
            for row in matched:
                row.update(self.payload)
        elif self.action == "delete":
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        return FakeResponse([dict(row) for row in matched])


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if any(marker in path for marker in self.storage.fail_markers):
            raise RuntimeError(f"upload of {path} rejected")
        self.storage.objects[path] = file
        return {"Key": path}

    def get_public_url(self, path):
        return f"https://cdn.shop.test/{self.name}/{path}"

    def remove(self, paths):
        for path in paths:
            self.storage.objects.pop(path, None)
        self.storage.removed.extend(paths)


class FakeStorage:
    def __init__(self):
        self.objects = {}
        self.removed = []
        self.fail_markers = set()

    def from_(self, bucket):
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.storage = FakeStorage()
        self.failures = set()
        self._clock = itertools.count()

    def table(self, name):
        return FakeQuery(self, name)

    def now(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return (start + timedelta(seconds=next(self._clock))).isoformat()

    def fail(self, table, action):
        self.failures.add((table, action))

    def rows(self, table):
        return [dict(row) for row in self.tables.get(table, [])]


class FakeGoogle:
    def __init__(self, profile):
        self.profile = profile
        self.codes = []

    def fetch_profile(self, code):
        self.codes.append(code)
        return self.profile


@pytest.fixture()
def settings():
    return Settings(
        secret_key="test-secret",
        admin_emails=(ADMIN_EMAIL, "owner@shop.test"),
        payment_webhook_secret=WEBHOOK_SECRET,
        google_client_id="client-id",
        google_client_secret="client-secret",
        storage_bucket="images",
    )


@pytest.fixture()
def db():
    return FakeSupabase()


@pytest.fixture()
def google():
    return FakeGoogle({"email": "g@shop.test", "name": "Gina", "picture": "https://img.test/g.png"})


@pytest.fixture()
def client(db, settings, google):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_google_client] = lambda: google
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make(email, name="Someone", password=None, role="user", address=True):
        res = db.table("users").insert({
            "email": email,
            "name": name,
            "password": hash_password(password) if password else "",
            "role": role,
            "image": None,
        }).execute()
        user = res.data[0]
        if address:
            db.table("addresses").insert({"user_id": user["id"], "name": name, "city": "Recife"}).execute()
        return user

    return _make


@pytest.fixture()
def session_for(settings):
    """Materialized session for a stored user, as the routes would see it."""

    def _session(user):
        return auth_service.sign_in(users_service.public_user(user), settings)["session"]

    return _session


@pytest.fixture()
def auth_headers(settings):
    def _headers(user):
        token = auth_service.sign_in(users_service.public_user(user), settings)["token"]
        return {"Authorization": f"Bearer {token}"}

    return _headers
