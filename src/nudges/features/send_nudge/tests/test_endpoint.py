from uuid import UUID, uuid4

import pytest

from src.events.dtos import EventDTO
from src.guests.dtos import GuestStatus
from src.guests.repository.tests.inmemory_models import InMemoryGuestDirectory, make_guest
from src.messaging.base import MessagingNotConfiguredError
from src.nudges import get_nudge_gateway
from src.nudges.dtos import NudgeStatus
from src.nudges.gateway import NudgeGateway
from src.nudges.tests.inmemory_models import (
    InMemoryEventStore,
    InMemoryMessagingService,
    InMemoryNudgeStore,
    SenderSettings,
)
from src.nudges.urls import SEND_NUDGE_URL


class GatewayHarness:
    def __init__(self):
        self.event = EventDTO(id=uuid4(), title="Reunion")
        self.guests = InMemoryGuestDirectory()
        self.nudges = InMemoryNudgeStore()
        self.messaging = InMemoryMessagingService()
        self.gateway = NudgeGateway(
            guests=self.guests,
            nudges=self.nudges,
            events=InMemoryEventStore([self.event]),
            messaging_service=self.messaging,
            config=SenderSettings(),
        )

    def payload(self, guest_id, **kwargs) -> dict:
        return {
            "guestId": str(guest_id),
            "eventId": str(self.event.id),
            "channel": "sms",
            "message": "Are you coming?",
            **kwargs,
        }


@pytest.fixture
def harness():
    return GatewayHarness()


@pytest.mark.asyncio
async def test_send_nudge_success(client_factory, harness):
    guest = harness.guests.add(make_guest(harness.event.id))

    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(guest.id))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["messageSid"].startswith("SM")
    nudge = await harness.nudges.get_nudge(UUID(data["nudgeId"]))
    assert nudge.status == NudgeStatus.SENT


@pytest.mark.asyncio
async def test_send_nudge_twice_returns_existing_id(client_factory, harness):
    guest = harness.guests.add(make_guest(harness.event.id))

    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        first = await client.post(SEND_NUDGE_URL, json=harness.payload(guest.id))
        second = await client.post(SEND_NUDGE_URL, json=harness.payload(guest.id))

    assert second.status_code == 200
    assert second.json() == {"error": "Nudge already sent", "nudgeId": first.json()["nudgeId"]}
    assert len(harness.messaging.sent) == 1


@pytest.mark.asyncio
async def test_send_nudge_unknown_guest(client_factory, harness):
    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(uuid4()))

    assert response.status_code == 404
    assert response.json() == {"error": "Guest not found"}


@pytest.mark.asyncio
async def test_send_nudge_opted_out_guest(client_factory, harness):
    guest = harness.guests.add(make_guest(harness.event.id, status=GuestStatus.OPTED_OUT))

    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(guest.id))

    assert response.status_code == 400
    assert response.json() == {"error": "Guest has opted out of messages"}


@pytest.mark.asyncio
async def test_send_nudge_guest_without_phone(client_factory, harness):
    guest = harness.guests.add(make_guest(harness.event.id, phone=None))

    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(guest.id))

    assert response.status_code == 400
    assert response.json() == {"error": "Guest has no phone number"}


@pytest.mark.asyncio
async def test_send_nudge_provider_failure(client_factory, harness):
    guest = harness.guests.add(make_guest(harness.event.id, phone="+61400000009"))
    harness.messaging.fail_for.add("+61400000009")

    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(guest.id))

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to send message",
        "details": "Invalid 'To' Phone Number",
    }


@pytest.mark.asyncio
async def test_send_nudge_without_credentials(client_factory, harness):
    def not_configured():
        raise MessagingNotConfiguredError()

    async with client_factory({get_nudge_gateway: not_configured}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(uuid4()))

    assert response.status_code == 500
    assert response.json() == {"error": "Twilio credentials not configured"}


@pytest.mark.asyncio
async def test_send_nudge_rejects_empty_message(client_factory, harness):
    async with client_factory({get_nudge_gateway: lambda: harness.gateway}) as client:
        response = await client.post(SEND_NUDGE_URL, json=harness.payload(uuid4(), message=""))

    assert response.status_code == 422
