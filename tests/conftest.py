"""
CampusBuddy - Test Configuration and Fixtures
"""
import os
import time
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set testing environment before the app reads its settings
os.environ['ENVIRONMENT'] = 'test'
os.environ['LOG_FILE'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['AUTO_CREATE_TABLES'] = 'false'
os.environ['IDENTITY_TOKEN_SECRET'] = 'test-identity-secret-for-testing-only'
os.environ['IDENTITY_TOKEN_ALGORITHM'] = 'HS256'

from campusbuddy.main import app
from campusbuddy.core.config import settings
from campusbuddy.core.database import Base, get_db, get_session_factory
from campusbuddy.core.security import VerifiedIdentity, set_identity_verifier
from campusbuddy.core.types import now_ms
from campusbuddy.models.user import User, UserRole
from campusbuddy.services.realtime import RealtimeGateway, set_gateway

fake = Faker()


def make_token(uid: str, expires_in: int = 3600, **claims) -> str:
    """Mint a token the way the identity provider would"""
    now = int(time.time())
    payload = {'sub': uid, 'iat': now, 'exp': now + expires_in, **claims}
    return jwt.encode(payload, settings.IDENTITY_TOKEN_SECRET, algorithm=settings.IDENTITY_TOKEN_ALGORITHM)


def bearer(uid: str, **claims) -> Dict[str, str]:
    return {'Authorization': f'Bearer {make_token(uid, **claims)}'}


def make_identity(uid: str = 'caller-1', name: str = 'Test Caller') -> VerifiedIdentity:
    """Verified identity without going through the token verifier"""
    return VerifiedIdentity(uid=uid, claims={'sub': uid, 'name': name, 'email': f'{uid}@campus.test'})


# ==================== Database ====================

@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite schema per test"""
    test_engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path}/test.db', echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and assertions; each request in the app gets its own"""
    async with session_factory() as session:
        yield session


# ==================== App ====================

@pytest.fixture
def gateway() -> RealtimeGateway:
    realtime = RealtimeGateway()
    set_gateway(realtime)
    yield realtime
    set_gateway(None)


@pytest.fixture(autouse=True)
def reset_verifier():
    set_identity_verifier(None)
    yield
    set_identity_verifier(None)


@pytest.fixture
async def client(session_factory, gateway) -> AsyncGenerator[AsyncClient, None]:
    """Test client with a fresh session per request"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_session_factory():
        return session_factory

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Users ====================

async def create_user(
    session_factory,
    role: UserRole = UserRole.STUDENT,
    uid: Optional[str] = None,
    name: Optional[str] = None,
    batch: str = '22L-6619',
    points: int = 0,
    badges: Optional[List[Dict[str, Any]]] = None,
) -> User:
    async with session_factory() as session:
        user = User(
            id=uid or fake.uuid4(),
            name=name or fake.name(),
            email=fake.email(),
            batch=batch,
            role=role,
            points=points,
            badges=badges or [],
            is_online=False,
            joined_at=now_ms(),
        )
        session.add(user)
        await session.commit()
        return user


@pytest.fixture
async def student(session_factory) -> User:
    return await create_user(session_factory, UserRole.STUDENT, uid='student-1', name='Ayesha Khan')


@pytest.fixture
async def other_student(session_factory) -> User:
    return await create_user(session_factory, UserRole.STUDENT, uid='student-2', name='Bilal Ahmed', batch='23F-1042')


@pytest.fixture
async def admin(session_factory) -> User:
    return await create_user(session_factory, UserRole.ADMIN, uid='admin-1', name='Admin User', batch='')


@pytest.fixture
async def society_head(session_factory) -> User:
    return await create_user(session_factory, UserRole.SOCIETY_HEAD, uid='head-1', name='Society Head')


@pytest.fixture
def auth_headers(student) -> dict:
    return bearer(student.id, email=student.email, name=student.name)


@pytest.fixture
def other_auth_headers(other_student) -> dict:
    return bearer(other_student.id, email=other_student.email, name=other_student.name)


@pytest.fixture
def admin_auth_headers(admin) -> dict:
    return bearer(admin.id, email=admin.email, name=admin.name)


@pytest.fixture
def society_auth_headers(society_head) -> dict:
    return bearer(society_head.id, email=society_head.email, name=society_head.name)


# ==================== Doubles ====================

def store_down() -> OperationalError:
    return OperationalError('SELECT 1', {}, Exception('database is unavailable'))


class BrokenSession:
    """Session stand-in whose every store round-trip fails"""

    def add(self, instance):
        pass

    async def get(self, *args, **kwargs):
        raise store_down()

    async def execute(self, *args, **kwargs):
        raise store_down()

    async def scalar(self, *args, **kwargs):
        raise store_down()

    async def commit(self):
        raise store_down()

    async def delete(self, instance):
        raise store_down()

    async def refresh(self, *args, **kwargs):
        raise store_down()

    async def rollback(self):
        pass

    async def close(self):
        pass


@pytest.fixture
async def broken_client(gateway) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose document store is unreachable"""
    async def override_get_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


class FakeWebSocket:
    """Records frames the gateway sends"""

    def __init__(self, fail_on_send: bool = False):
        self.accepted = False
        self.sent: List[Dict[str, Any]] = []
        self.fail_on_send = fail_on_send

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail_on_send:
            raise RuntimeError('connection closed')
        self.sent.append(data)

    def events(self, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        return [f for f in self.sent if event_type is None or f['type'] == event_type]
