"""
Integration Tests for campus status board endpoints
"""
import pytest
from httpx import AsyncClient

from conftest import FakeWebSocket, make_identity

API = '/api/v1'


async def post(client, headers, **overrides):
    body = {
        'facility': 'Library',
        'status': 'busy',
        'description': 'Exam week, few seats left',
        'keywords': ['Seats', 'quiet'],
        **overrides,
    }
    response = await client.post(f'{API}/status', json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()['data']


class TestPosting:

    @pytest.mark.asyncio
    async def test_post_creates_entry(self, client: AsyncClient, auth_headers):
        """Test new facility entry and reward"""
        entry = await post(client, auth_headers)

        assert entry['facility'] == 'Library'
        assert entry['status'] == 'busy'
        assert entry['updatedBy'] == 'student-1'

        profile = (await client.get(f'{API}/users/student-1', headers=auth_headers)).json()['data']
        assert profile['points'] == 3

    @pytest.mark.asyncio
    async def test_post_replaces_existing_facility(self, client: AsyncClient, auth_headers, other_auth_headers):
        """Test one entry per facility"""
        first = await post(client, auth_headers)
        second = await post(client, other_auth_headers, facility='  Library ', status='closed',
                            description='Closed for cleaning', keywords=[])

        assert second['id'] == first['id']
        assert second['status'] == 'closed'
        assert second['updatedBy'] == 'student-2'

        board = (await client.get(f'{API}/status', headers=auth_headers)).json()['data']
        assert len(board) == 1

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient, auth_headers):
        """Test facility, status and description required"""
        response = await client.post(f'{API}/status', json={'facility': 'Gym'}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Facility, status, and description are required'

    @pytest.mark.asyncio
    async def test_invalid_status(self, client: AsyncClient, auth_headers):
        """Test status enumeration"""
        response = await client.post(
            f'{API}/status', json={'facility': 'Gym', 'status': 'packed', 'description': 'd'}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Status must be one of: available, busy, closed, maintenance'

    @pytest.mark.asyncio
    async def test_post_broadcasts(self, client: AsyncClient, auth_headers, gateway, session_factory):
        """Test connected clients receive status:update"""
        ws = FakeWebSocket()
        await gateway.connect(ws, make_identity('listener'), session_factory)

        entry = await post(client, auth_headers)

        assert ws.events('status:update')[0]['data']['id'] == entry['id']


class TestBoard:

    @pytest.mark.asyncio
    async def test_keyword_search(self, client: AsyncClient, auth_headers):
        """Test search over keywords, facility and description"""
        await post(client, auth_headers)
        await post(client, auth_headers, facility='Cafeteria', status='available',
                   description='Biryani today', keywords=['food'])

        response = await client.get(f'{API}/status/search/SEATS', headers=auth_headers)
        assert [s['facility'] for s in response.json()['data']] == ['Library']

        response = await client.get(f'{API}/status', params={'keyword': 'biryani'}, headers=auth_headers)
        assert [s['facility'] for s in response.json()['data']] == ['Cafeteria']

        response = await client.get(f'{API}/status', params={'facility': 'Cafeteria'}, headers=auth_headers)
        assert [s['facility'] for s in response.json()['data']] == ['Cafeteria']

    @pytest.mark.asyncio
    async def test_popular_keywords(self, client: AsyncClient, auth_headers):
        """Test keyword counts are case-insensitive"""
        await post(client, auth_headers, keywords=['Seats', 'quiet'])
        await post(client, auth_headers, facility='Lab 3', keywords=['seats'])

        response = await client.get(f'{API}/status/keywords/popular', headers=auth_headers)

        assert response.json()['data'][0] == {'keyword': 'seats', 'count': 2}

    @pytest.mark.asyncio
    async def test_get_unknown(self, client: AsyncClient, auth_headers):
        """Test 404 for unknown status"""
        response = await client.get(f'{API}/status/missing', headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['error'] == 'Campus status not found'


class TestUpdating:

    @pytest.mark.asyncio
    async def test_partial_update(self, client: AsyncClient, auth_headers, other_auth_headers):
        """Test any user can update; untouched fields kept"""
        entry = await post(client, auth_headers)

        response = await client.put(
            f"{API}/status/{entry['id']}", json={'status': 'available'}, headers=other_auth_headers)

        data = response.json()['data']
        assert data['status'] == 'available'
        assert data['description'] == entry['description']
        assert data['updatedBy'] == 'student-2'
        assert data['lastUpdated'] >= entry['lastUpdated']

    @pytest.mark.asyncio
    async def test_delete_admin_only(self, client: AsyncClient, auth_headers, admin_auth_headers):
        """Test only admins delete"""
        entry = await post(client, auth_headers)
        url = f"{API}/status/{entry['id']}"

        response = await client.delete(url, headers=auth_headers)
        assert response.status_code == 403
        assert response.json()['error'] == 'Only admins can delete campus status'

        assert (await client.delete(url, headers=admin_auth_headers)).status_code == 200
        assert (await client.get(url, headers=auth_headers)).status_code == 404
