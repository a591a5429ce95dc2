# tests/conftest.py
import os

# Settings are read at import time; point them at an in-memory database
# before anything from `app` is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["PASSWORD_SCHEME"] = "pbkdf2_sha256"

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlmodel import SQLModel, Session  # noqa: E402

from app.core.security import PasswordHasher, SessionTokenCodec  # noqa: E402
from app.database import engine  # noqa: E402
from app.models import user as _user_models  # noqa: E402,F401
from app.models import vendor as _vendor_models  # noqa: E402,F401
from app.repositories.credential_store import DatabaseCredentialStore  # noqa: E402
from app.services.session_manager import SessionManager  # noqa: E402

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
TEST_SECRET = "test-session-secret"


@pytest.fixture
def tables():
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session(tables):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(db_session):
    return DatabaseCredentialStore(db_session)


@pytest.fixture
def hasher():
    return PasswordHasher()


@pytest.fixture
def codec():
    return SessionTokenCodec(TEST_SECRET)


@pytest.fixture
def manager(store, hasher, codec):
    return SessionManager(store, hasher, codec, clock=lambda: FIXED_NOW)


@pytest.fixture
def customer_payload():
    return {
        "role": "customer",
        "mobile": "9000000001",
        "password": "correct horse",
        "name": "Asha",
        "email": "asha@example.com",
        "location_lat": 12.97,
        "location_lng": 77.59,
        "location_address": "MG Road",
    }


@pytest.fixture
def vendor_payload():
    return {
        "role": "vendor",
        "mobile": "9000000002",
        "password": "fresh veggies",
        "name": "Ravi",
        "shop_name": "Test Shop",
        "category": "Grocery",
        "description": "Daily vegetables",
    }
