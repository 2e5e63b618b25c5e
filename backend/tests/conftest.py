"""Pytest configuration and fixtures."""

import os

# Keep the application engine off the on-disk dev database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from canteen.core.clock import store_tz
from canteen.core.rbac import TokenData, UserRole
from canteen.core.security import create_access_token, get_password_hash
from canteen.db.base import Base
from canteen.db.session import enable_sqlite_foreign_keys, get_db
from canteen.main import app
# Import all models to ensure they're registered with Base.metadata
from canteen.models import *  # noqa: F401,F403
from canteen.models.menu import DailyMenu, MealSession, MenuItem
from canteen.models.user import User

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# A fixed store-local moment inside every test session's ordering window
LUNCH_TIME = datetime(2026, 3, 10, 12, 0, tzinfo=store_tz())


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable rate limiting during tests to avoid flaky failures
    from canteen.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def freeze_lunch_time(monkeypatch):
    """Pin every store-clock lookup used by placement and windows to LUNCH_TIME."""
    monkeypatch.setattr("canteen.services.order_placement.local_now", lambda: LUNCH_TIME)
    monkeypatch.setattr("canteen.api.routes.sessions.local_now", lambda: LUNCH_TIME)
    monkeypatch.setattr("canteen.services.order_lifecycle.local_today", lambda: LUNCH_TIME.date())
    return LUNCH_TIME


def _make_user(db_session: Session, email: str, role: UserRole, full_name: str, employee_id: str) -> User:
    user = User(
        email=email,
        password_hash=get_password_hash("testpass123"),
        role=role,
        full_name=full_name,
        employee_id=employee_id,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session: Session) -> User:
    """Create a canteen administrator."""
    return _make_user(db_session, "admin@canteen.io", UserRole.ADMIN, "Asha Admin", "ADM001")


@pytest.fixture
def employee_user(db_session: Session) -> User:
    """Create a regular employee."""
    return _make_user(db_session, "ravi@canteen.io", UserRole.EMPLOYEE, "Ravi Kumar", "EMP100")


@pytest.fixture
def other_employee(db_session: Session) -> User:
    return _make_user(db_session, "meera@canteen.io", UserRole.EMPLOYEE, "Meera Nair", "EMP200")


def _token_for(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return {"Authorization": f"Bearer {_token_for(admin_user)}"}


@pytest.fixture
def employee_headers(employee_user: User) -> dict:
    return {"Authorization": f"Bearer {_token_for(employee_user)}"}


@pytest.fixture
def admin_actor(admin_user: User) -> TokenData:
    """The admin as an authenticated actor, for calling services directly."""
    return TokenData(
        user_id=admin_user.id, email=admin_user.email, role=UserRole.ADMIN,
        full_name=admin_user.full_name, employee_id=admin_user.employee_id,
    )


@pytest.fixture
def employee_actor(employee_user: User) -> TokenData:
    return TokenData(
        user_id=employee_user.id, email=employee_user.email, role=UserRole.EMPLOYEE,
        full_name=employee_user.full_name, employee_id=employee_user.employee_id,
    )


@pytest.fixture
def lunch_session(db_session: Session) -> MealSession:
    """Lunch served 11:00-14:30, orders close 30 minutes before the end."""
    session = MealSession(
        name="Lunch",
        description="Main lunch service",
        start_time="11:00",
        end_time="14:30",
        order_cutoff_minutes_before=30,
    )
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session


@pytest.fixture
def menu_items(db_session: Session, lunch_session: MealSession) -> list:
    """Two lunch dishes on today's (LUNCH_TIME's) menu, plus one unavailable dish."""
    thali = MenuItem(name="Veg Thali", category="Mains", price=Decimal("80.00"), available=True)
    biryani = MenuItem(name="Chicken Biryani", category="Mains", price=Decimal("120.00"), available=True)
    soup = MenuItem(name="Tomato Soup", category="Starters", price=Decimal("40.00"), available=False)
    db_session.add_all([thali, biryani, soup])
    db_session.flush()
    for item in (thali, biryani, soup):
        db_session.add(DailyMenu(
            menu_date=LUNCH_TIME.date(), session_id=lunch_session.id, menu_item_id=item.id,
        ))
    db_session.commit()
    for item in (thali, biryani, soup):
        db_session.refresh(item)
    return [thali, biryani, soup]


@pytest.fixture
def other_headers(other_employee: User) -> dict:
    return {"Authorization": f"Bearer {_token_for(other_employee)}"}
