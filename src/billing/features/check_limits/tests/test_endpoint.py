from uuid import uuid4

import pytest

from src.billing import get_usage_limit_service
from src.billing.dtos import EventTierDTO
from src.billing.limits import UsageLimitService
from src.billing.tests.inmemory_models import InMemoryUsageReadModel
from src.billing.tiers import PricingTier
from src.billing.urls import CAN_CREATE_EVENT_URL, CHECK_LIMIT_URL, EVENT_USAGE_URL


@pytest.fixture
def read_model():
    return InMemoryUsageReadModel()


@pytest.fixture
def overrides(read_model):
    return {get_usage_limit_service: lambda: UsageLimitService(read_model)}


@pytest.mark.asyncio
async def test_nudge_limit_reached(client_factory, overrides, read_model):
    event_id, user_id = uuid4(), uuid4()
    read_model.nudges_sent[event_id] = 3

    async with client_factory(overrides) as client:
        response = await client.get(
            CHECK_LIMIT_URL.format(event_id=event_id, limit_type="nudges"),
            params={"user_id": str(user_id)},
        )

    assert response.status_code == 200
    assert response.json() == {
        "allowed": False,
        "remaining": 0,
        "limit": 3,
        "used": 3,
        "upgradeRequired": True,
        "suggestedTier": "pro",
    }


@pytest.mark.asyncio
async def test_unlimited_remaining_is_null(client_factory, overrides, read_model):
    event_id, user_id = uuid4(), uuid4()
    read_model.purchases[event_id] = EventTierDTO(tier=PricingTier.BUSINESS)

    async with client_factory(overrides) as client:
        response = await client.get(
            CHECK_LIMIT_URL.format(event_id=event_id, limit_type="nudges"),
            params={"user_id": str(user_id)},
        )

    data = response.json()
    assert data["allowed"] is True
    assert data["remaining"] is None
    assert data["limit"] == -1


@pytest.mark.asyncio
async def test_unknown_limit_type(client_factory, overrides):
    async with client_factory(overrides) as client:
        response = await client.get(
            CHECK_LIMIT_URL.format(event_id=uuid4(), limit_type="events"),
            params={"user_id": str(uuid4())},
        )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_event_usage(client_factory, overrides, read_model):
    event_id, user_id = uuid4(), uuid4()
    read_model.guest_counts[event_id] = 4

    async with client_factory(overrides) as client:
        response = await client.get(
            EVENT_USAGE_URL.format(event_id=event_id), params={"user_id": str(user_id)}
        )

    assert response.status_code == 200
    data = response.json()
    assert data["eventId"] == str(event_id)
    assert data["tier"] == "free"
    assert data["guestsUsed"] == 4
    assert data["guestsLimit"] == 15
    assert data["nudgesUsed"] == 0


@pytest.mark.asyncio
async def test_can_create_event_blocked(client_factory, overrides, read_model):
    user_id = uuid4()
    read_model.event_counts[user_id] = 3

    async with client_factory(overrides) as client:
        response = await client.get(CAN_CREATE_EVENT_URL.format(user_id=user_id))

    data = response.json()
    assert data["allowed"] is False
    assert data["eventsUsed"] == 3
    assert data["eventsLimit"] == 3
