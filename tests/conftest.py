import asyncio
import os

# the app builds its engine at import time; point it somewhere harmless
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.database import Base, get_session
from app.main import app
from app.store import DataStore


@pytest.fixture
def engine(tmp_path):
    # file database + NullPool: every event loop (TestClient's, pytest-asyncio's)
    # opens its own connections
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}", poolclass=NullPool)


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def override_session(session_maker):
    async def _get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield
    app.dependency_overrides.pop(get_session, None)


@pytest.fixture
def client(engine, override_session):
    asyncio.run(create_tables(engine))
    return TestClient(app)


@pytest_asyncio.fixture
async def store(engine, session_maker):
    await create_tables(engine)
    async with session_maker() as session:
        yield DataStore(session)


def product_data(name="Desk Lamp", price=19.99, category="Home", seller_id="seller-1"):
    return {
        "name": name,
        "description": f"{name} description",
        "price": price,
        "image_url": f"https://img.example.org/{name.lower().replace(' ', '-')}.png",
        "category": category,
        "seller_id": seller_id,
    }


SELLER_SIGNUP = {
    "name": "Priya Shah",
    "store_name": "Shah Electronics",
    "gst_number": "27ABCDE1234F1Z5",
    "business_type": "Retail",
    "business_address": "12 Station Road, Pune",
    "email": "priya@shahelectronics.com",
    "phone": "9876543210",
    "password": "Secret123",
    "confirm_password": "Secret123",
}

BUYER_SIGNUP = {
    "name": "Tom Baker",
    "email": "tom@bakersmail.com",
    "password": "Secret123",
    "confirm_password": "Secret123",
}
