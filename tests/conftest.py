import os
from decimal import Decimal
from typing import AsyncGenerator, Callable, Dict, Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from schoolhub.auth.models import User
from schoolhub.auth.security import create_access_token
from schoolhub.core.enums import Role
from schoolhub.core.events import EventBus
from schoolhub.core.models import FeeStructure, Student
from schoolhub.db.session import Base, get_db
from schoolhub.main import create_app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def app(db_session: AsyncSession, event_bus: EventBus):
    app = create_app(event_bus=event_bus)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db_session: AsyncSession) -> Callable:
    counter = {"n": 0}

    async def _make(role: Role = Role.ADMIN, status: str = "ACTIVE") -> User:
        counter["n"] += 1
        user = User(
            full_name=f"{role.value.title()} {counter['n']}",
            email=f"{role.value.lower()}{counter['n']}@school.test",
            role=role.value,
            status=status,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for(make_user: Callable) -> Callable:
    async def _headers(role: Role) -> Dict[str, str]:
        return auth_headers(await make_user(role))

    return _headers


@pytest.fixture()
def make_student(db_session: AsyncSession) -> Callable:
    async def _make(
        first_name: str = "Ana",
        last_name: str = "Santos",
        user_id=None,
        parent_user_id=None,
    ) -> Student:
        student = Student(
            first_name=first_name,
            last_name=last_name,
            user_id=user_id,
            parent_user_id=parent_user_id,
        )
        db_session.add(student)
        await db_session.commit()
        await db_session.refresh(student)
        return student

    return _make


@pytest.fixture()
def make_fee(db_session: AsyncSession) -> Callable:
    async def _make(name: str = "Tuition", amount="500", academic_year_id=None) -> FeeStructure:
        fee = FeeStructure(name=name, amount=Decimal(str(amount)), academic_year_id=academic_year_id)
        db_session.add(fee)
        await db_session.commit()
        await db_session.refresh(fee)
        return fee

    return _make


@pytest.fixture()
def headers_of() -> Callable:
    return auth_headers
