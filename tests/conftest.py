"""공통 테스트 픽스처 (인메모리 SQLite + httpx AsyncClient)"""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.models import Base, get_db
from app.models.user import ROLE_ADMIN, ROLE_MANAGER, User


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_db_session(test_engine):
    """테스트용 DB 세션"""
    session_factory = async_sessionmaker(test_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(test_db_session):
    """get_db를 테스트 세션으로 대체한 API 클라이언트"""

    async def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def manager(test_db_session):
    user = User(username="manager1", name="김매니저", role=ROLE_MANAGER)
    test_db_session.add(user)
    await test_db_session.commit()
    return user


@pytest.fixture
async def admin(test_db_session):
    user = User(username="admin1", name="관리자", role=ROLE_ADMIN)
    test_db_session.add(user)
    await test_db_session.commit()
    return user


@pytest.fixture
def manager_headers(manager):
    return {"X-User-Id": str(manager.id)}


@pytest.fixture
def admin_headers(admin):
    return {"X-User-Id": str(admin.id)}
