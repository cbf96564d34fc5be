import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from src.billing import get_usage_limit_service
from src.billing.dtos import LimitType
from src.billing.limits import UsageLimitService
from src.billing.tiers import PricingTier
from src.billing.urls import CAN_CREATE_EVENT_URL, CHECK_LIMIT_URL, EVENT_USAGE_URL

logger = logging.getLogger(__name__)

router = APIRouter()


class EventUsageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: UUID = Field(alias="eventId")
    tier: PricingTier
    guests_used: int = Field(alias="guestsUsed")
    guests_limit: int = Field(alias="guestsLimit")
    nudges_used: int = Field(alias="nudgesUsed")
    nudges_limit: int = Field(alias="nudgesLimit")
    addons: list[str] = []


class LimitCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    allowed: bool
    # null when the tier is unlimited
    remaining: int | None
    limit: int
    used: int
    upgrade_required: bool = Field(alias="upgradeRequired")
    suggested_tier: PricingTier | None = Field(default=None, alias="suggestedTier")


class EventCreationCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    allowed: bool
    reason: str | None = None
    events_used: int | None = Field(default=None, alias="eventsUsed")
    events_limit: int | None = Field(default=None, alias="eventsLimit")


@router.get(EVENT_USAGE_URL, response_model=EventUsageResponse)
async def get_event_usage(
    event_id: UUID,
    user_id: UUID,
    service: UsageLimitService = Depends(get_usage_limit_service),
):
    usage = await service.get_event_usage(event_id, user_id)
    return EventUsageResponse(
        event_id=usage.event_id,
        tier=usage.tier,
        guests_used=usage.guests_used,
        guests_limit=usage.guests_limit,
        nudges_used=usage.nudges_used,
        nudges_limit=usage.nudges_limit,
        addons=usage.addons,
    )


@router.get(CHECK_LIMIT_URL, response_model=LimitCheckResponse)
async def check_limit(
    event_id: UUID,
    limit_type: LimitType,
    user_id: UUID,
    service: UsageLimitService = Depends(get_usage_limit_service),
):
    """Check whether the event may add another guest or send another nudge."""
    result = await service.check_limit(event_id, user_id, limit_type)
    return LimitCheckResponse(
        allowed=result.allowed,
        remaining=None if result.is_unlimited else int(result.remaining),
        limit=result.limit,
        used=result.used,
        upgrade_required=result.upgrade_required,
        suggested_tier=result.suggested_tier,
    )


@router.get(CAN_CREATE_EVENT_URL, response_model=EventCreationCheckResponse)
async def can_create_event(
    user_id: UUID,
    service: UsageLimitService = Depends(get_usage_limit_service),
):
    result = await service.can_create_event(user_id)
    return EventCreationCheckResponse(
        allowed=result.allowed,
        reason=result.reason,
        events_used=result.events_used,
        events_limit=result.events_limit,
    )
