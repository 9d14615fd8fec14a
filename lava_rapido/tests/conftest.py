from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root (which exposes the ``lava_rapido`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lava_rapido.app import models, schemas
from lava_rapido.app.clock import FixedClock, get_clock
from lava_rapido.app.database import Base, enable_sqlite_savepoints, get_db
from lava_rapido.app.main import app
from lava_rapido.app.security import create_access_token
from lava_rapido.app.services import BusinessService

OWNER_USER_ID = "user-owner"
PARTNER_USER_ID = "user-partner"
TODAY = date(2024, 3, 12)


@pytest.fixture(scope="session", autouse=True)
def security_settings() -> dict:
    os.environ["AUTH_JWT_SECRET"] = "test-secret-for-lava-rapido-tokens"
    os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
    os.environ["RUN_DATABASE_MIGRATIONS"] = "0"
    os.environ["ENABLE_EXPENSE_REMINDERS"] = "0"
    os.environ.pop("AUTH_JWT_AUDIENCE", None)
    return {"secret": os.environ["AUTH_JWT_SECRET"]}


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
TestingSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    join_transaction_mode="create_savepoint",
)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def business(db_session: Session) -> models.Business:
    return BusinessService.create_business(
        db_session,
        user_id=OWNER_USER_ID,
        data=schemas.BusinessCreate(name="Lava Rápido Inglaterra", display_name="Marcos"),
    )


@pytest.fixture
def owner(db_session: Session, business: models.Business) -> models.BusinessMember:
    return BusinessService.get_member_by_user(db_session, OWNER_USER_ID)


@pytest.fixture
def partner(db_session: Session, business: models.Business) -> models.BusinessMember:
    BusinessService.join_business(
        db_session,
        user_id=PARTNER_USER_ID,
        data=schemas.BusinessJoin(code=business.code, display_name="Paulo"),
    )
    return BusinessService.get_member_by_user(db_session, PARTNER_USER_ID)


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest.fixture
def api(db_session: Session, clock: FixedClock) -> Generator[TestClient, None, None]:
    """Unauthenticated client sharing the test session and the fixed clock."""

    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def client(api: TestClient, owner: models.BusinessMember, auth_headers) -> TestClient:
    """Client authenticated as the business owner."""

    api.headers.update(auth_headers(OWNER_USER_ID))
    return api


@pytest.fixture
def partner_client(api: TestClient, partner: models.BusinessMember, auth_headers) -> TestClient:
    api.headers.update(auth_headers(PARTNER_USER_ID))
    return api
