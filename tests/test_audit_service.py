"""Tests for admin activity logging."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from portfolio_api.models import AdminActivityLog
from portfolio_api.services.audit_service import ActivityAction, log_activity


class TestLogActivity:
    @pytest.mark.asyncio
    async def test_adds_and_commits_entry(self):
        mock_db = AsyncMock()
        mock_db.add = lambda entry: setattr(mock_db, "added", entry)

        written = await log_activity(
            mock_db,
            action_type=ActivityAction.DATA_DELETION_SUCCESS,
            description="Admin deleted data for sections: Visitor Analytics Data.",
            user_identifier="user-1",
            details={"requested_section_keys": ["visitor_analytics"]},
        )

        assert written is True
        entry = mock_db.added
        assert entry.action_type == "DATA_DELETION_SUCCESS"
        assert entry.user_identifier == "user-1"
        assert entry.details == {"requested_section_keys": ["visitor_analytics"]}
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_commit_failure_is_swallowed(self):
        """A failed audit write is logged and rolled back, never raised."""
        mock_db = AsyncMock()
        mock_db.add = lambda entry: None
        mock_db.commit.side_effect = RuntimeError("database is locked")

        written = await log_activity(
            mock_db,
            action_type=ActivityAction.DATA_DELETION_ERROR,
            description="aborted",
        )

        assert written is False
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rollback_failure_is_swallowed(self):
        mock_db = AsyncMock()
        mock_db.add = lambda entry: None
        mock_db.commit.side_effect = RuntimeError("connection lost")
        mock_db.rollback.side_effect = RuntimeError("connection lost")

        assert await log_activity(mock_db, "DATA_DELETION_ERROR", "aborted") is False

    @pytest.mark.asyncio
    async def test_persists_row(self, db_session, session_maker):
        await log_activity(
            db_session,
            action_type=ActivityAction.DATA_DELETION_BLOCKED,
            description="blocked",
        )

        async with session_maker() as session:
            entries = (await session.execute(select(AdminActivityLog))).scalars().all()
        assert len(entries) == 1
        assert entries[0].action_type == "DATA_DELETION_BLOCKED"
        assert entries[0].details is None
        assert entries[0].timestamp is not None
