"""
Pytest configuration and fixtures for backend tests.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.config.constants import Roles
from shared.infrastructure.db import enable_sqlite_foreign_keys, get_db
from shared.security.auth import CallerIdentity, sign_identity_token
from rest_api.main import app
from rest_api.models import Area, Base, Profile, Vendor
from rest_api.services.permissions import PermissionContext


# Use SQLite in-memory for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def caller_for(profile: Profile) -> PermissionContext:
    """Permission context for an identity that owns ``profile``."""
    identity = CallerIdentity(id=profile.user_id, full_name=profile.full_name)
    return PermissionContext(identity, profile)


def auth_headers_for(user_id: str, full_name: str | None = None) -> dict[str, str]:
    """Bearer headers carrying a freshly signed identity token."""
    token = sign_identity_token(user_id, full_name=full_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.

    The lifespan (schema creation and seeding against the configured
    database) is not run; tables come from ``db_session``.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def area(db_session):
    """A seeded area."""
    area = Area(name="Benz Circle", district="NTR", pincode="520010")
    db_session.add(area)
    db_session.commit()
    return area


@pytest.fixture
def other_area(db_session):
    area = Area(name="Beach Road", district="Visakhapatnam", pincode="530017")
    db_session.add(area)
    db_session.commit()
    return area


@pytest.fixture
def make_profile(db_session):
    """Factory creating a committed profile with the given role."""

    def _make(role: str = Roles.CONSUMER, full_name: str = "Test User", user_id: str | None = None) -> Profile:
        profile = Profile(
            user_id=user_id or f"identity-{uuid.uuid4()}",
            full_name=full_name,
            role=role,
        )
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make


@pytest.fixture
def consumer(make_profile):
    return make_profile(Roles.CONSUMER, "Asha Consumer")


@pytest.fixture
def other_consumer(make_profile):
    return make_profile(Roles.CONSUMER, "Ravi Consumer")


@pytest.fixture
def vendor_owner(make_profile):
    return make_profile(Roles.VENDOR, "Lakshmi Vendor")


@pytest.fixture
def authority(make_profile):
    return make_profile(Roles.AUTHORITY, "Municipal Inspector")


@pytest.fixture
def admin(make_profile):
    return make_profile(Roles.ADMIN, "Portal Admin")


@pytest.fixture
def make_vendor(db_session, vendor_owner, area):
    """Factory creating a committed vendor (owned by ``vendor_owner`` unless given)."""

    def _make(business_name: str = "Lakshmi Tiffins", owner: Profile | None = None, food_types=None) -> Vendor:
        vendor = Vendor(
            profile_id=(owner or vendor_owner).id,
            business_name=business_name,
            food_types=food_types if food_types is not None else ["idli", "dosa"],
            location_description="Opposite the bus stand",
            area_id=area.id,
        )
        db_session.add(vendor)
        db_session.commit()
        return vendor

    return _make


@pytest.fixture
def vendor(make_vendor):
    return make_vendor()
