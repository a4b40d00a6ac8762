# tests/conftest.py
"""
Shared fixtures: an in-memory SQLite database, a store bound to it, and a
TestClient wired to that store.
"""
import os
import time

# keep test runs from writing the app's log file into the project root
os.environ.setdefault("LOG_FILE", os.devnull)

# dates render in the server's local zone; pin it to US Central (POSIX rule,
# no tz database needed) so evening sessions fall on the previous UTC day
os.environ["TZ"] = "CST6CDT,M3.2.0,M11.1.0"
if hasattr(time, "tzset"):
    time.tzset()

import pytest
from fastapi.testclient import TestClient

from pvtracker.core.database import create_tables, make_session_factory
from pvtracker.core.dependencies import get_store
from pvtracker.services.store import PoleVaultStore


@pytest.fixture
def session_factory():
    factory = make_session_factory("sqlite://")
    create_tables(bind=factory.kw["bind"])
    return factory


@pytest.fixture
def store(session_factory):
    return PoleVaultStore.load(session_factory)


@pytest.fixture
def client(store):
    from pvtracker.main import app

    app.dependency_overrides[get_store] = lambda: store
    # no `with`: startup would load the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def one_pole():
    return [{"brand": "UCS Spirit", "length": "14'0\"", "flex": "15.2", "weight": "160"}]
