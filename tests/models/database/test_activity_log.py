"""Tests for the ActivityLogEntry database model."""

import pytest
from sqlalchemy import select

from vibeship.models.database import ActivityActor, ActivityLogEntry


@pytest.mark.unit
class TestActivityLogEntryModel:
    """Test cases for ActivityLogEntry."""

    @pytest.mark.asyncio
    async def test_create_entry(self, db_session, make_project):
        project = await make_project()
        entry = ActivityLogEntry(
            project_id=project.id,
            action="update_status",
            details={"values": {"status": "paused"}},
            ip_address="10.0.0.1",
            user_agent="curl/8.0",
            actor=ActivityActor.api,
        )
        db_session.add(entry)
        await db_session.commit()
        await db_session.refresh(entry)

        assert len(entry.id) == 36
        assert entry.details == {"values": {"status": "paused"}}
        assert entry.actor == ActivityActor.api
        assert entry.created_at is not None

    @pytest.mark.asyncio
    async def test_entries_deleted_with_project(self, db_session, make_project):
        project = await make_project()
        db_session.add(ActivityLogEntry(project_id=project.id, action="read", actor=ActivityActor.api))
        await db_session.commit()

        await db_session.delete(project)
        await db_session.commit()

        result = await db_session.execute(select(ActivityLogEntry))
        assert result.scalars().all() == []
