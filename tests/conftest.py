"""
Pytest configuration and fixtures
"""
import io
import base64
import copy
import pytest
import sys
from pathlib import Path

from PIL import Image
from postgrest.exceptions import APIError

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


class FakeResult:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable stand-in for a postgrest query builder"""

    def __init__(self, table, op, payload=None):
        self.table = table
        self.op = op
        self.payload = payload
        self.filters = []
        self._order = None
        self._range = None

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def execute(self):
        self.table.executed.append(self)
        if self.table.error is not None:
            raise self.table.error

        if self.op == "insert":
            if any(r["report_id"] == self.payload["report_id"] for r in self.table.rows):
                raise APIError({
                    "message": "duplicate key value violates unique constraint",
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })
            self.table.rows.append(copy.deepcopy(self.payload))
            return FakeResult([copy.deepcopy(self.payload)])

        rows = [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]

        if self.op == "update":
            for row in rows:
                row.update(self.payload)
            return FakeResult([copy.deepcopy(r) for r in rows])

        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda r: r.get(column) or "", reverse=desc)
        if self._range:
            start, end = self._range
            rows = rows[start:end + 1]
        return FakeResult([copy.deepcopy(r) for r in rows])


class FakeTable:
    def __init__(self):
        self.rows = []
        self.executed = []
        self.error = None

    def select(self, *columns, **kwargs):
        return FakeQuery(self, "select")

    def insert(self, row):
        return FakeQuery(self, "insert", row)

    def update(self, values):
        return FakeQuery(self, "update", values)


class FakeBucket:
    def __init__(self, name):
        self.name = name
        self.uploads = {}
        self.error = None

    def upload(self, path, file, file_options=None):
        if self.error is not None:
            raise self.error
        self.uploads[path] = file
        return {"Key": f"{self.name}/{path}"}

    def get_public_url(self, path):
        return f"https://example.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self):
        self.buckets = {}

    def from_(self, name):
        return self.buckets.setdefault(name, FakeBucket(name))


class FakeSupabase:
    """In-memory stand-in for the parts of the Supabase client the services use"""

    def __init__(self):
        self.tables = {}
        self.storage = FakeStorage()

    def table(self, name):
        return self.tables.setdefault(name, FakeTable())


class FakeCache:
    """Dict-backed CacheService replacement"""

    def __init__(self):
        self.store = {}
        self.enabled = True

    async def get(self, key):
        return copy.deepcopy(self.store.get(key))

    async def set(self, key, value, ttl=None):
        self.store[key] = copy.deepcopy(value)
        return True

    async def delete(self, key):
        self.store.pop(key, None)
        return True


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def png_bytes():
    """A tiny valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(255, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_url(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def report_payload():
    """A complete report submission body."""
    return {
        "reportId": "a1b2c3d4e5f60718",
        "reportType": "EMERGENCY",
        "incidentType": "Fire Outbreak",
        "location": "221B Baker Street, London",
        "latitude": 51.5237,
        "longitude": -0.1585,
        "title": "Fire",
        "description": "Smoke coming from the second floor",
        "image": None,
        "status": "PENDING",
        "wantsNotifications": True,
        "email": "a@b.com",
    }
