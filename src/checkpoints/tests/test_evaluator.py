"""Tests for CheckpointEvaluator using in-memory stores."""

import asyncio
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.checkpoints.dtos import (
    CheckpointDTO,
    PendingOnly,
    RequiresAnswers,
    RequiresBlockResponses,
)
from src.checkpoints.evaluator import CheckpointEvaluator, build_nudge_message
from src.events.dtos import EventDTO
from src.guests.dtos import GuestStatus, RsvpResponse
from src.guests.repository.tests.inmemory_models import (
    InMemoryGuestDirectory,
    InMemoryScheduleStore,
    make_guest,
)
from src.nudges.dtos import NudgeStatus
from src.nudges.gateway import NudgeGateway
from src.nudges.tests.inmemory_models import (
    InMemoryEventStore,
    InMemoryMessagingService,
    InMemoryNudgeStore,
    SenderSettings,
)


@pytest.fixture
def event():
    return EventDTO(id=uuid4(), title="Jess & Tom's Wedding")


@pytest.fixture
def guests():
    return InMemoryGuestDirectory()


@pytest.fixture
def schedule():
    return InMemoryScheduleStore()


@pytest.fixture
def nudges():
    return InMemoryNudgeStore()


@pytest.fixture
def messaging():
    return InMemoryMessagingService()


@pytest.fixture
def evaluator(guests, schedule, nudges, messaging, event):
    gateway = NudgeGateway(
        guests=guests,
        nudges=nudges,
        events=InMemoryEventStore([event]),
        messaging_service=messaging,
        config=SenderSettings(),
    )
    return CheckpointEvaluator(guests, schedule, gateway, timeout_seconds=0.5)


def make_checkpoint(event: EventDTO, **kwargs) -> CheckpointDTO:
    return CheckpointDTO(id=uuid4(), event_id=event.id, trigger_at=datetime.now(UTC), **kwargs)


def test_completion_policy_prefers_questions(event):
    question_id, block_id = uuid4(), uuid4()

    assert make_checkpoint(
        event, required_question_ids=(question_id,), applicable_block_ids=(block_id,)
    ).completion_policy == RequiresAnswers((question_id,))
    assert make_checkpoint(event, applicable_block_ids=(block_id,)).completion_policy == (
        RequiresBlockResponses((block_id,))
    )
    assert make_checkpoint(event).completion_policy == PendingOnly()


def test_message_uses_default_reminder(event):
    guest = make_guest(event.id, name="Priya")

    assert build_nudge_message(make_checkpoint(event), event, guest) == (
        "Hey Priya! Reminder: We need your response for Jess & Tom's Wedding. "
        "Please check your RSVP link."
    )
    assert build_nudge_message(make_checkpoint(event, message="Dinner?"), event, guest) == (
        "Hey Priya! Dinner?"
    )


async def test_block_checkpoint_nudges_and_auto_resolves(
    evaluator, guests, schedule, messaging, event
):
    """Three guests, one responded to both blocks: two nudges, two auto-resolved."""
    block_1, block_2 = uuid4(), uuid4()
    responded = guests.add(make_guest(event.id, name="A", phone="+61400000001"))
    missing_one = guests.add(make_guest(event.id, name="B", phone="+61400000002"))
    missing_all = guests.add(make_guest(event.id, name="C", phone="+61400000003"))
    schedule.respond(responded.id, block_1, RsvpResponse.IN)
    schedule.respond(responded.id, block_2, RsvpResponse.IN)
    schedule.respond(missing_one.id, block_1, RsvpResponse.MAYBE)
    checkpoint = make_checkpoint(
        event, applicable_block_ids=(block_1, block_2), auto_resolve_to=RsvpResponse.OUT
    )

    sent = await evaluator.evaluate(checkpoint, event)

    assert sent == 2
    assert sorted(m["to"] for m in messaging.sent) == ["+61400000002", "+61400000003"]
    # Existing responses are kept, only the gaps are filled
    assert schedule.responses[(missing_one.id, block_1)] == RsvpResponse.MAYBE
    assert schedule.responses[(missing_one.id, block_2)] == RsvpResponse.OUT
    assert schedule.responses[(missing_all.id, block_1)] == RsvpResponse.OUT
    assert schedule.responses[(missing_all.id, block_2)] == RsvpResponse.OUT
    assert guests.guests[missing_one.id].status == GuestStatus.RESPONDED
    assert guests.guests[missing_all.id].status == GuestStatus.RESPONDED
    assert guests.guests[responded.id].status == GuestStatus.PENDING


async def test_question_checkpoint_skips_guests_without_phone(
    evaluator, guests, schedule, messaging, nudges, event
):
    question_id = uuid4()
    answered = guests.add(make_guest(event.id, phone="+61400000001"))
    guests.add(make_guest(event.id, phone=None))
    unanswered = guests.add(make_guest(event.id, phone="+61400000003"))
    schedule.answer(answered.id, question_id)
    checkpoint = make_checkpoint(event, required_question_ids=(question_id,))

    sent = await evaluator.evaluate(checkpoint, event)

    assert sent == 1
    assert [m["to"] for m in messaging.sent] == ["+61400000003"]
    assert [n.guest_id for n in nudges.nudges.values()] == [unanswered.id]


async def test_partially_answered_questions_count_as_missing(evaluator, guests, schedule, event):
    question_1, question_2 = uuid4(), uuid4()
    guest = guests.add(make_guest(event.id))
    schedule.answer(guest.id, question_1)

    sent = await evaluator.evaluate(
        make_checkpoint(event, required_question_ids=(question_1, question_2)), event
    )

    assert sent == 1


async def test_reminder_mode_nudges_pending_guests_only(evaluator, guests, messaging, event):
    guests.add(make_guest(event.id, phone="+61400000001"))
    guests.add(make_guest(event.id, phone="+61400000002", status=GuestStatus.RESPONDED))
    guests.add(make_guest(event.id, phone="+61400000003", status=GuestStatus.OPTED_OUT))
    guests.add(make_guest(event.id, phone=""))

    sent = await evaluator.evaluate(make_checkpoint(event), event)

    assert sent == 1
    assert [m["to"] for m in messaging.sent] == ["+61400000001"]


async def test_auto_resolve_keeps_responded_status(
    evaluator, guests, schedule, event
):
    block_id = uuid4()
    responded = guests.add(make_guest(event.id, status=GuestStatus.RESPONDED))
    checkpoint = make_checkpoint(
        event, applicable_block_ids=(block_id,), auto_resolve_to=RsvpResponse.IN
    )

    await evaluator.evaluate(checkpoint, event)

    # Filled in, but the status compare-and-set only applies to pending guests
    assert schedule.responses[(responded.id, block_id)] == RsvpResponse.IN
    assert guests.guests[responded.id].status == GuestStatus.RESPONDED


async def test_provider_failure_is_isolated_per_guest(evaluator, guests, messaging, event):
    guests.add(make_guest(event.id, name="A", phone="+61400000001"))
    guests.add(make_guest(event.id, name="B", phone="+61400000002"))
    guests.add(make_guest(event.id, name="C", phone="+61400000003"))
    messaging.fail_for.add("+61400000002")

    sent = await evaluator.evaluate(make_checkpoint(event), event)

    assert sent == 2
    assert sorted(m["to"] for m in messaging.sent) == ["+61400000001", "+61400000003"]


async def test_stuck_send_times_out_and_batch_continues(
    evaluator, guests, nudges, messaging, event
):
    stuck = guests.add(make_guest(event.id, phone="+61400000001"))
    guests.add(make_guest(event.id, phone="+61400000002"))
    messaging.hang_for.add("+61400000001")

    sent = await asyncio.wait_for(evaluator.evaluate(make_checkpoint(event), event), 5)

    assert sent == 1
    assert [m["to"] for m in messaging.sent] == ["+61400000002"]
    # The abandoned send is recorded as failed, not left pending
    statuses = {n.guest_id: n.status for n in nudges.nudges.values()}
    assert statuses[stuck.id] == NudgeStatus.FAILED
    assert set(statuses.values()) == {NudgeStatus.FAILED, NudgeStatus.SENT}


async def test_lookup_failure_is_isolated_per_guest(evaluator, guests, messaging, event):
    broken = guests.add(make_guest(event.id, phone="+61400000001"))
    guests.add(make_guest(event.id, phone="+61400000002"))
    guests.fail_for.add(broken.id)

    sent = await evaluator.evaluate(make_checkpoint(event), event)

    assert sent == 1
    assert [m["to"] for m in messaging.sent] == ["+61400000002"]


async def test_already_sent_nudges_are_not_counted_again(evaluator, guests, messaging, event):
    guests.add(make_guest(event.id))
    checkpoint = make_checkpoint(event)

    assert await evaluator.evaluate(checkpoint, event) == 1
    assert await evaluator.evaluate(checkpoint, event) == 0
    assert len(messaging.sent) == 1


async def test_opt_out_during_auto_resolve_is_kept(evaluator, guests, schedule, event):
    block_id = uuid4()
    guest = guests.add(make_guest(event.id, phone="+61400000001"))
    checkpoint = make_checkpoint(
        event, applicable_block_ids=(block_id,), auto_resolve_to=RsvpResponse.OUT
    )

    async def reply_stop(guest_id):
        # The guest texts STOP after the nudge but before their status is resolved
        await guests.update_guest_status(guest_id, GuestStatus.OPTED_OUT)

    schedule.before_insert = reply_stop

    sent = await evaluator.evaluate(checkpoint, event)

    assert sent == 1
    assert schedule.responses[(guest.id, block_id)] == RsvpResponse.OUT
    assert guests.guests[guest.id].status == GuestStatus.OPTED_OUT
    assert guests.guests[guest.id].opted_out_at is not None
