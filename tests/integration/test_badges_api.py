"""
Integration Tests for badges, activities and automatic awards
"""
import pytest
from httpx import AsyncClient

from conftest import FakeWebSocket, bearer, create_user, make_identity
from campusbuddy.models.badge import ActivityType, UserActivity

API = '/api/v1'


async def create_badge(client, headers, **overrides):
    body = {'name': 'Night Owl', 'description': 'Studied past midnight', 'icon': '🦉',
            'category': 'academic', **overrides}
    response = await client.post(f'{API}/badges', json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()['data']


async def log_activities(session_factory, user_id, activity_type, n):
    async with session_factory() as session:
        for _ in range(n):
            session.add(UserActivity(user_id=user_id, type=activity_type, description='seed', points=0))
        await session.commit()


class TestCatalog:

    @pytest.mark.asyncio
    async def test_admin_creates_badge(self, client: AsyncClient, admin_auth_headers, auth_headers):
        """Test catalog creation and listing"""
        badge = await create_badge(client, admin_auth_headers)

        response = await client.get(f'{API}/badges', headers=auth_headers)

        assert response.json()['data'] == [badge]
        assert badge['category'] == 'academic'

    @pytest.mark.asyncio
    async def test_student_cannot_create(self, client: AsyncClient, auth_headers):
        """Test creation is admin only"""
        response = await client.post(
            f'{API}/badges', json={'name': 'n', 'description': 'd', 'icon': 'i', 'category': 'social'},
            headers=auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_category(self, client: AsyncClient, admin_auth_headers):
        """Test category enumeration"""
        response = await client.post(
            f'{API}/badges', json={'name': 'n', 'description': 'd', 'icon': 'i', 'category': 'sports'},
            headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Category must be one of: helper, social, academic, special'

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient, admin_auth_headers):
        """Test all catalog fields required"""
        response = await client.post(f'{API}/badges', json={'name': 'n'}, headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'Name, description, icon, and category are required'


class TestAwarding:

    @pytest.mark.asyncio
    async def test_award_badge(self, client: AsyncClient, admin_auth_headers, auth_headers, student):
        """Test award copies the badge, adds points and logs activity"""
        badge = await create_badge(client, admin_auth_headers)

        response = await client.post(
            f'{API}/badges/award', json={'userId': 'student-1', 'badgeId': badge['id']},
            headers=admin_auth_headers)

        assert response.status_code == 200
        earned = response.json()['data']
        assert earned['id'] == badge['id']
        assert earned['earnedAt'] > 0

        badges = (await client.get(f'{API}/badges/user/student-1', headers=auth_headers)).json()['data']
        assert [b['name'] for b in badges] == ['Night Owl']

        profile = (await client.get(f'{API}/users/student-1', headers=auth_headers)).json()['data']
        assert profile['points'] == 20

        activities = (await client.get(f'{API}/badges/activities/student-1', headers=auth_headers)).json()['data']
        assert activities[0]['type'] == 'badge_earned'
        assert activities[0]['description'] == 'Earned badge: Night Owl'

    @pytest.mark.asyncio
    async def test_award_twice_rejected(self, client: AsyncClient, admin_auth_headers, student):
        """Test a badge is held at most once"""
        badge = await create_badge(client, admin_auth_headers)
        body = {'userId': 'student-1', 'badgeId': badge['id']}
        await client.post(f'{API}/badges/award', json=body, headers=admin_auth_headers)

        response = await client.post(f'{API}/badges/award', json=body, headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'User already has this badge'

    @pytest.mark.asyncio
    async def test_award_unknown_targets(self, client: AsyncClient, admin_auth_headers, student):
        """Test 404 for unknown user or badge"""
        badge = await create_badge(client, admin_auth_headers)

        response = await client.post(
            f'{API}/badges/award', json={'userId': 'ghost', 'badgeId': badge['id']}, headers=admin_auth_headers)
        assert response.json()['error'] == 'User not found'

        response = await client.post(
            f'{API}/badges/award', json={'userId': 'student-1', 'badgeId': 'ghost'}, headers=admin_auth_headers)
        assert response.json()['error'] == 'Badge not found'

    @pytest.mark.asyncio
    async def test_award_requires_ids(self, client: AsyncClient, admin_auth_headers):
        """Test userId and badgeId required"""
        response = await client.post(f'{API}/badges/award', json={}, headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()['error'] == 'User ID and badge ID are required'

    @pytest.mark.asyncio
    async def test_award_notifies_connected_user(self, client: AsyncClient, admin_auth_headers, student,
                                                 gateway, session_factory):
        """Test recipient gets a notification frame"""
        ws = FakeWebSocket()
        await gateway.connect(ws, make_identity('student-1'), session_factory)
        badge = await create_badge(client, admin_auth_headers)

        await client.post(
            f'{API}/badges/award', json={'userId': 'student-1', 'badgeId': badge['id']},
            headers=admin_auth_headers)

        notification = ws.events('notification')[0]['data']
        assert notification['kind'] == 'badge_earned'
        assert notification['badge']['id'] == badge['id']


class TestPrivacy:

    @pytest.mark.asyncio
    async def test_cannot_view_others_badges(self, client: AsyncClient, auth_headers, other_student):
        """Test badges are private to owner and admins"""
        response = await client.get(f'{API}/badges/user/student-2', headers=auth_headers)

        assert response.status_code == 403
        assert response.json()['error'] == 'You can only view your own badges'

    @pytest.mark.asyncio
    async def test_cannot_view_others_activities(self, client: AsyncClient, auth_headers, other_student):
        """Test activities are private to owner and admins"""
        response = await client.get(f'{API}/badges/activities/student-2', headers=auth_headers)

        assert response.status_code == 403
        assert response.json()['error'] == 'You can only view your own activities'

    @pytest.mark.asyncio
    async def test_admin_views_anyone(self, client: AsyncClient, admin_auth_headers, other_student):
        """Test admin bypass"""
        response = await client.get(f'{API}/badges/user/student-2', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['data'] == []


class TestAutomaticAwards:

    @pytest.mark.asyncio
    async def test_first_message_badge(self, client: AsyncClient, auth_headers):
        """Test sending a message qualifies for first-message"""
        await client.post(f'{API}/chat/messages', json={'content': 'hi'}, headers=auth_headers)

        response = await client.post(f'{API}/badges/check-automatic', headers=auth_headers)

        result = response.json()['data']
        assert [b['id'] for b in result['awarded']] == ['first-message']
        assert result['totalBadges'] == 1

        response = await client.post(f'{API}/badges/check-automatic', headers=auth_headers)
        assert response.json()['data'] == {'awarded': [], 'totalBadges': 1}

    @pytest.mark.asyncio
    async def test_thresholds_from_snapshot(self, client: AsyncClient, session_factory, auth_headers, student):
        """Test several rules at once, evaluated against counts before awarding"""
        await log_activities(session_factory, 'student-1', ActivityType.LOST_FOUND, 5)
        await log_activities(session_factory, 'student-1', ActivityType.STATUS_UPDATE, 5)

        result = (await client.post(f'{API}/badges/check-automatic', headers=auth_headers)).json()['data']

        assert [b['id'] for b in result['awarded']] == ['helpful-finder', 'status-updater']
        profile = (await client.get(f'{API}/users/student-1', headers=auth_headers)).json()['data']
        assert profile['points'] == 40

    @pytest.mark.asyncio
    async def test_points_rule(self, client: AsyncClient, session_factory):
        """Test point thresholds"""
        await create_user(session_factory, uid='veteran', points=120)
        headers = bearer('veteran')

        result = (await client.post(f'{API}/badges/check-automatic', headers=headers)).json()['data']

        assert [b['id'] for b in result['awarded']] == ['point-collector']

    @pytest.mark.asyncio
    async def test_rule_badges_appear_in_catalog(self, client: AsyncClient, auth_headers):
        """Test rule badges are created in the catalog on first award"""
        await client.post(f'{API}/chat/messages', json={'content': 'hi'}, headers=auth_headers)
        await client.post(f'{API}/badges/check-automatic', headers=auth_headers)

        catalog = (await client.get(f'{API}/badges', headers=auth_headers)).json()['data']

        assert [b['id'] for b in catalog] == ['first-message']
