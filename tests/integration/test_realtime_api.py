"""
Integration Tests for the realtime handshake

Rejected handshakes close before the socket is accepted, so none of these
cases reach the document store.
"""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import make_token
from campusbuddy.main import app
from campusbuddy.core.config import settings
from campusbuddy.core.database import get_session_factory
from campusbuddy.core.security import JWTIdentityVerifier, set_identity_verifier

API = '/api/v1'


@pytest.fixture
def socket_client(gateway) -> TestClient:
    async def no_store():
        return None

    app.dependency_overrides[get_session_factory] = no_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def rejected(socket_client: TestClient, url: str, headers=None) -> WebSocketDisconnect:
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with socket_client.websocket_connect(url, headers=headers if headers is not None else {}):
            pass
    return exc_info.value


class TestHandshake:

    def test_missing_token(self, socket_client, gateway):
        """Test no token closes with 4001 missing"""
        closed = rejected(socket_client, f'{API}/ws')

        assert closed.code == 4001
        assert closed.reason == 'missing'
        assert gateway.connection_count == 0

    def test_expired_token_in_query(self, socket_client, gateway):
        """Test expired token from the query string"""
        token = make_token('student-1', expires_in=-60)

        closed = rejected(socket_client, f'{API}/ws?token={token}')

        assert closed.code == 4001
        assert closed.reason == 'expired'
        assert gateway.connection_count == 0

    def test_malformed_token_in_query(self, socket_client, gateway):
        """Test garbage token from the query string"""
        closed = rejected(socket_client, f'{API}/ws?token=not-a-token')

        assert closed.code == 4001
        assert closed.reason == 'malformed'

    def test_expired_token_in_header(self, socket_client, gateway):
        """Test the Authorization header is read when the query has no token"""
        token = make_token('student-1', expires_in=-60)

        closed = rejected(socket_client, f'{API}/ws', headers={'Authorization': f'Bearer {token}'})

        assert closed.code == 4001
        assert closed.reason == 'expired'
        assert gateway.connection_count == 0

    def test_non_bearer_header_counts_as_missing(self, socket_client, gateway):
        """Test a non-Bearer scheme is ignored"""
        closed = rejected(socket_client, f'{API}/ws', headers={'Authorization': 'Basic dXNlcjpwYXNz'})

        assert closed.reason == 'missing'

    def test_revoked_token(self, socket_client, gateway):
        """Test a revoked session is refused"""
        verifier = JWTIdentityVerifier(
            secret=settings.IDENTITY_TOKEN_SECRET,
            algorithm=settings.IDENTITY_TOKEN_ALGORITHM,
        )
        verifier.revoke('session-9')
        set_identity_verifier(verifier)
        token = make_token('student-1', jti='session-9')

        closed = rejected(socket_client, f'{API}/ws', headers={'Authorization': f'Bearer {token}'})

        assert closed.code == 4001
        assert closed.reason == 'revoked'
        assert gateway.connection_count == 0
