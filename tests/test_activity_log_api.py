"""Tests for the admin activity log endpoint."""

from datetime import datetime, timedelta, timezone

import pytest

from portfolio_api.models import AdminActivityLog

ACTIVITY_URL = "/api/admin/activity-log"


@pytest.fixture
def base_time() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestActivityLog:
    @pytest.mark.asyncio
    async def test_newest_first(self, client, admin_headers, db_session, base_time):
        db_session.add_all(
            [
                AdminActivityLog(
                    action_type="DATA_DELETION_SUCCESS",
                    description=f"entry {i}",
                    timestamp=base_time + timedelta(minutes=i),
                )
                for i in range(3)
            ]
        )
        await db_session.commit()

        response = await client.get(ACTIVITY_URL, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [entry["description"] for entry in data["entries"]] == [
            "entry 2",
            "entry 1",
            "entry 0",
        ]
        assert data["entries"][0]["actionType"] == "DATA_DELETION_SUCCESS"

    @pytest.mark.asyncio
    async def test_filter_and_limit(self, client, admin_headers, db_session, base_time):
        db_session.add_all(
            [
                AdminActivityLog(
                    action_type="DATA_DELETION_BLOCKED" if i % 2 else "DATA_DELETION_SUCCESS",
                    description=f"entry {i}",
                    timestamp=base_time + timedelta(minutes=i),
                )
                for i in range(6)
            ]
        )
        await db_session.commit()

        response = await client.get(
            ACTIVITY_URL,
            params={"action_type": "DATA_DELETION_BLOCKED", "limit": 2},
            headers=admin_headers,
        )

        data = response.json()
        assert data["count"] == 2
        assert [entry["description"] for entry in data["entries"]] == ["entry 5", "entry 3"]

    @pytest.mark.asyncio
    async def test_limit_bounds(self, client, admin_headers):
        response = await client.get(ACTIVITY_URL, params={"limit": 500}, headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_admin(self, client, non_admin_headers):
        response = await client.get(ACTIVITY_URL, headers=non_admin_headers)

        assert response.status_code == 403
