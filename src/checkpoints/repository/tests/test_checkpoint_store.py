"""Tests for SqlCheckpointStore on SQLite."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from src.checkpoints.repository.checkpoint_store import SqlCheckpointStore
from src.checkpoints.repository.orm_models import Checkpoint
from src.guests.dtos import RsvpResponse
from src.models.event import Event

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


async def seed_checkpoints(db_session):
    event = Event(title="Wedding")
    db_session.add(event)
    await db_session.flush()
    block_id, question_id = uuid4(), uuid4()
    due = Checkpoint(
        event_id=event.uuid,
        name="RSVP deadline",
        trigger_at=NOW - timedelta(hours=1),
        applicable_block_ids=[str(block_id)],
        required_question_ids=[str(question_id)],
        auto_resolve_to=RsvpResponse.OUT,
    )
    future = Checkpoint(event_id=event.uuid, trigger_at=NOW + timedelta(days=1))
    done = Checkpoint(event_id=event.uuid, trigger_at=NOW - timedelta(days=1), executed=True)
    db_session.add_all([due, future, done])
    await db_session.flush()
    return due, block_id, question_id


async def test_find_due_unexecuted(db_session):
    due, block_id, question_id = await seed_checkpoints(db_session)
    store = SqlCheckpointStore(session_overwrite=db_session)

    checkpoints = await store.find_due_unexecuted(NOW)

    assert [c.id for c in checkpoints] == [due.uuid]
    checkpoint = checkpoints[0]
    assert checkpoint.applicable_block_ids == (block_id,)
    assert checkpoint.required_question_ids == (question_id,)
    assert checkpoint.auto_resolve_to == RsvpResponse.OUT


async def test_mark_executed_only_once(db_session):
    due, _, _ = await seed_checkpoints(db_session)
    store = SqlCheckpointStore(session_overwrite=db_session)

    assert await store.mark_executed(due.uuid) is True
    assert await store.mark_executed(due.uuid) is False
    assert (await store.get_checkpoint(due.uuid)).executed is True
    assert await store.find_due_unexecuted(NOW) == []


async def test_missing_checkpoint(db_session):
    store = SqlCheckpointStore(session_overwrite=db_session)

    assert await store.get_checkpoint(uuid4()) is None
    assert await store.mark_executed(uuid4()) is False
