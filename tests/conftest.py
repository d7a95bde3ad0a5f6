"""Shared pytest fixtures for the console test suite.

The backend REST API is replaced by FakeBackend, a stand-in for
requests.Session that answers from a routing table and records every call.

Fixture overview
----------------
backend        FakeBackend with no routes; tests add what they need
api_client     BackendClient bound to `backend` with a bearer token
db_session     SQLAlchemy session on a private in-memory SQLite database
console        the Flask app wired to `backend`, the in-memory archive and a tmp output dir
web            Flask test client for `console`
"""

import io
import json
import os
import sys
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at a scratch area first
_SCRATCH = Path(tempfile.mkdtemp(prefix="hr-console-tests-"))
os.environ.setdefault("OUTPUT_DIR", str(_SCRATCH / "output"))
os.environ.setdefault("DATA_DIR", str(_SCRATCH / "data"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SCRATCH / 'console.db'}")

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(ROOT / "src"))

import openpyxl
import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.client import BackendClient
from database.db import init_db

BACKEND_URL = "http://backend.test"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ── Fake backend ──────────────────────────────────────────────────────────────


def make_response(body=None, status=200, content=None, content_type="application/json"):
    """Build a real requests.Response carrying a JSON body or raw bytes"""
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if content is None:
        content = b"" if body is None else json.dumps(body).encode("utf-8")
    response._content = content
    if content_type:
        response.headers["Content-Type"] = content_type
    return response


class FakeBackend:
    """requests.Session stand-in keyed by (METHOD, path below /api)"""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, body=None, status=200, content=None, content_type="application/json"):
        self.routes[(method.upper(), path)] = make_response(body, status, content, content_type)

    def add_error(self, method, path, exc):
        self.routes[(method.upper(), path)] = exc

    def request(self, method, url, **kwargs):
        path = url.split("/api", 1)[1]
        if kwargs.get("json") is not None:
            # requests encodes json= bodies the same way before sending
            json.dumps(kwargs["json"], allow_nan=False)
        self.calls.append({"method": method, "path": path, **kwargs})
        answer = self.routes.get((method.upper(), path))
        if answer is None:
            return make_response({"success": False, "message": f"No route {method} {path}"}, status=404)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def last(self, method=None, path=None):
        """Most recent call, optionally filtered"""
        for call in reversed(self.calls):
            if (method is None or call["method"] == method) and (path is None or call["path"] == path):
                return call
        return None

    def paths(self):
        return [(c["method"], c["path"]) for c in self.calls]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api_client(backend):
    return BackendClient(base_url=BACKEND_URL, token="test-token", session=backend)


# ── Archive database ──────────────────────────────────────────────────────────


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


# ── Flask console ─────────────────────────────────────────────────────────────


@pytest.fixture
def console(backend, session_factory, tmp_path):
    import app as console_module

    flask_app = console_module.app
    saved = dict(flask_app.config)
    flask_app.config.update(
        TESTING=True,
        BACKEND_API_URL=BACKEND_URL,
        HTTP_SESSION=backend,
        DB_SESSION_FACTORY=session_factory,
        OUTPUT_DIR=tmp_path / "output",
    )
    yield flask_app
    flask_app.config.clear()
    flask_app.config.update(saved)


@pytest.fixture
def web(console):
    return console.test_client()


def login_as(web, role, **extra):
    """Put a logged-in user straight into the Flask session"""
    user = {
        "id": "7",
        "email": f"{role}@example.com",
        "name": role.title(),
        "role": role,
        "permissions": [],
        "employee_id": None,
        "site_id": "S1" if role == "supervisor" else None,
        "department": None,
        "is_active": True,
    }
    user.update(extra)
    with web.session_transaction() as sess:
        sess["token"] = "session-token"
        sess["user"] = user
    return user


# ── Spreadsheets ──────────────────────────────────────────────────────────────


def xlsx_bytes(rows):
    """First sheet filled with the given rows (first row is the header)"""
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def sheet_rows(content):
    """All rows of the first sheet as tuples"""
    wb = openpyxl.load_workbook(io.BytesIO(content))
    try:
        return [tuple(row) for row in wb.worksheets[0].iter_rows(values_only=True)]
    finally:
        wb.close()
