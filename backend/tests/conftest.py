"""Pytest configuration and fixtures for Brymar tests.

Tests run against an in-memory SQLite database (aiosqlite) with the
Redis cache disabled, so no external services are needed.
"""

import os
import tempfile
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("AI_API_KEY", "")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="brymar-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.auth.jwt import create_access_token
from app.auth.password import hash_password
from app.auth.permissions import resolve_permissions
from app.models.user import User, UserRole
from app.utils.cache import flush_stale


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose requests share `db_session` (commit / rollback as in prod)."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        await flush_stale(db_session)

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

async def _make_user(db: AsyncSession, email: str, role: UserRole, **extra) -> User:
    user = User(
        email=email,
        full_name=extra.pop("full_name", "Test User"),
        hashed_password=hash_password("testpassword123"),
        role=role,
        is_active=True,
        **extra,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Plain registered user (no listing permissions)."""
    return await _make_user(db_session, "test@example.com", UserRole.USER)


@pytest_asyncio.fixture
async def agent_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "agent@example.com", UserRole.AGENT, full_name="Agent Smith")


@pytest_asyncio.fixture
async def other_agent(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "other.agent@example.com", UserRole.AGENT)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin@example.com", UserRole.ADMIN)


def token_for(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        role=user.role.value,
        permissions=resolve_permissions(user.role.value, user.custom_permissions),
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return {"Authorization": f"Bearer {token_for(test_user)}"}


@pytest.fixture
def agent_headers(agent_user: User) -> dict:
    return {"Authorization": f"Bearer {token_for(agent_user)}"}


@pytest.fixture
def other_agent_headers(other_agent: User) -> dict:
    return {"Authorization": f"Bearer {token_for(other_agent)}"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return {"Authorization": f"Bearer {token_for(admin_user)}"}


# ── Wizard form data ─────────────────────────────────────────────

def _image(n: int = 1) -> dict:
    return {
        "id": f"img-{n}",
        "url": f"http://localhost:8000/media/images/img-{n}.jpg",
        "filename": f"foto-{n}.jpg",
        "size": 204800,
        "content_type": "image/jpeg",
        "display_order": n - 1,
    }


@pytest.fixture
def property_form() -> dict:
    """Property wizard data that passes every step."""
    return {
        "title": "Casa en la playa con piscina",
        "description": (
            "Hermosa casa frente al mar con piscina privada, terraza amplia "
            "y acceso directo a la playa de arena blanca."
        ),
        "price": 350000,
        "surface": 220,
        "property_type": "house",
        "bedrooms": 3,
        "bathrooms": 2,
        "characteristics": [
            {"id": "pool", "name": "Piscina", "category": "amenity", "selected": True},
        ],
        "coordinates": {"latitude": 19.2056, "longitude": -69.3361},
        "address": {
            "street": "Calle Principal 45",
            "city": "Las Terrenas",
            "province": "Samaná",
        },
        "images": [_image(1), _image(2)],
        "status": "published",
        "language": "es",
    }


@pytest.fixture
def land_form() -> dict:
    return {
        "name": "Terreno residencial en Jarabacoa",
        "description": (
            "Terreno con vista a las montañas, acceso asfaltado, agua y "
            "electricidad disponibles, ideal para proyecto residencial."
        ),
        "price": 95000,
        "surface": 5000,
        "land_type": "residential",
        "characteristics": [
            {"id": "power", "name": "Electricidad", "category": "utilities", "selected": True},
        ],
        "location": "Jarabacoa, La Vega",
        "images": [_image(1)],
        "tags": ["montaña", "residencial"],
    }


@pytest.fixture
def blog_form() -> dict:
    return {
        "title": "Guía para comprar tu primera casa",
        "content": (
            "Comprar tu primera casa es una decisión importante. En esta guía "
            "repasamos financiamiento, impuestos y trámites legales paso a paso."
        ),
        "category": "investment-tips",
        "status": "published",
    }


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "wizard: Listing wizard tests")
    config.addinivalue_line("markers", "cache: Cache tests")
