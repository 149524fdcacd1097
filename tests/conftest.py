"""Shared test fixtures for SolarLead API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
Settings are pinned through the environment before the app is imported.
"""

import os

TEST_JWT_KEY = "test-signing-key"

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH_JWT_KEY"] = TEST_JWT_KEY
os.environ["AUTH_JWT_ALGORITHM"] = "HS256"
os.environ["AUTH_JWT_ISSUER"] = ""
os.environ["AUTH_JWT_AUDIENCE"] = ""
os.environ["KEY_VAULT_NAME"] = ""
for _name in (
    "SENDGRID_API_KEY",
    "TWILIO_ACCOUNT_SID",
    "AZURE_BLOB_CONNECTION_STRING",
    "ENPHASE_API_KEY",
    "GOOGLE_SOLAR_API_KEY",
    "FACEBOOK_ACCESS_TOKEN",
    "GA4_API_SECRET",
):
    os.environ[_name] = ""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, get_db
from app.main import app

# Import all models to ensure they're registered with Base.metadata
from app.models.splash_lead import SplashLead  # noqa: F401
from app.models.contact import ContactSubmission, LeadStatusRecord  # noqa: F401
from app.models.appointment import AppointmentPreference  # noqa: F401
from app.models.upload import BillUpload, PhotoSubmission, PhotoRecord  # noqa: F401
from app.models.project import Project, ProjectStageHistory  # noqa: F401
from app.models.candidate import JobApplication, CandidateStatus  # noqa: F401


# Use aiosqlite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(TEST_DATABASE_URL, echo=False)
TestSession = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with TestSession() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db():
    """Direct DB session for test setup/assertions."""
    async with TestSession() as session:
        yield session


@pytest.fixture
def auth_headers():
    """Bearer token as issued by the identity provider for a CRM user."""
    token = jwt.encode({"sub": "user_crm_1", "email": "crm@quantumsolar.us"}, TEST_JWT_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"
