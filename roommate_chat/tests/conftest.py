# roommate_chat/tests/conftest.py

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from roommate_chat.api import dependencies
from roommate_chat.config import AppConfig
from roommate_chat.infrastructure import models
from roommate_chat.infrastructure.database import Base, Database
from roommate_chat.infrastructure.security import SecurityService
from roommate_chat.infrastructure.uow import UnitOfWork
from roommate_chat.main import Application


@pytest.fixture(scope="function")
def app_config():
    return AppConfig(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REDIS_URL=None,
        SECRET_KEY="test_secret_key",
        PROJECT_NAME="Test Roommate Chat API",
        PROJECT_VERSION="1.0.0",
        PROJECT_DESCRIPTION="Test Roommate Chat API",
        API_PREFIX="/api",
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
        MAX_PAGE_LIMIT=200,
    )


@pytest.fixture(scope="function")
async def engine(app_config):
    """In-memory SQLite shared by every session of a test."""
    engine = create_async_engine(
        app_config.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def database(engine):
    return Database(engine)


@pytest.fixture(scope="function")
async def db_session(engine):
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )
    session = session_factory()
    yield session
    await session.close()


@pytest.fixture(scope="function")
async def uow():
    return UnitOfWork()


@pytest.fixture(scope="function")
def security_service(app_config):
    return SecurityService(app_config)


@pytest.fixture(scope="function")
def override_get_db(db_session):
    async def _override_get_db():
        yield db_session

    return _override_get_db


@pytest.fixture(scope="function")
def application(app_config, database):
    application = Application(config=app_config)
    application.database = database
    application.realtime_gateway.database = database
    return application


@pytest.fixture(scope="function")
async def app(application):
    return application.create_app()


@pytest.fixture(scope="function")
async def app_with_db(app, override_get_db):
    app.dependency_overrides[dependencies.get_session] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app_with_db):
    async with AsyncClient(
        transport=ASGITransport(app=app_with_db), base_url="http://test"
    ) as ac:
        yield ac


async def _create_user(db_session, name: str, **kwargs) -> models.User:
    user = models.User(name=name, email=f"{name.lower()}@example.com", **kwargs)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture(scope="function")
async def owner(db_session):
    return await _create_user(db_session, "Olivia")


@pytest.fixture(scope="function")
async def tenant(db_session):
    return await _create_user(db_session, "Theo")


@pytest.fixture(scope="function")
async def seeker(db_session):
    return await _create_user(db_session, "Sam")


@pytest.fixture(scope="function")
async def outsider(db_session):
    return await _create_user(db_session, "Uma")


@pytest.fixture(scope="function")
async def room(db_session, owner, tenant):
    """Room owned by ``owner`` with ``tenant`` living in it."""
    room = models.Room(title="Sunny room near campus", owner_id=owner.id, capacity=2)
    room.tenants = [models.RoomTenant(user_id=tenant.id, position=0)]
    db_session.add(room)
    await db_session.commit()
    return room


def _auth_header(security_service, user) -> dict[str, str]:
    token = security_service.create_user_token(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def owner_header(security_service, owner):
    return _auth_header(security_service, owner)


@pytest.fixture(scope="function")
def tenant_header(security_service, tenant):
    return _auth_header(security_service, tenant)


@pytest.fixture(scope="function")
def seeker_header(security_service, seeker):
    return _auth_header(security_service, seeker)


@pytest.fixture(scope="function")
def outsider_header(security_service, outsider):
    return _auth_header(security_service, outsider)
