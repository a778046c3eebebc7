"""
Shared pytest fixtures for the record state test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test app context with table recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_document: Factory for persisted Document rows
"""

import pytest

from record_state import create_app
from record_state.models import db as _db
from record_state.models.document import Document


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield _db.session
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def make_document():
    """Return a factory that persists a Document in the requested state."""
    counter = {"n": 0}

    def _make(state="active", title=None):
        counter["n"] += 1
        doc = Document(title=title or f"Doc {counter['n']}", body="text")
        doc.save()
        if state == "archived":
            doc.set_archived()
        elif state == "removed":
            doc.set_deleted()
        elif state == "archived_removed":
            doc.set_archived()
            doc.set_deleted()
        return doc

    return _make
