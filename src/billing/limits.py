"""
Usage/limit tracker - resolves the plan in force for an event and compares
usage counters against its quotas.

Consulted by the API before organiser-triggered actions. Checkpoint runs are
system-triggered and never consult it.
"""

import logging
import math
from uuid import UUID

from src.billing.dtos import (
    EventCreationCheckDTO,
    EventTierDTO,
    EventUsageDTO,
    LimitCheckDTO,
    LimitType,
    SubscriptionDTO,
)
from src.billing.repository.read_models import UsageReadModel
from src.billing.tiers import UNLIMITED, UPGRADE_PATH, PricingTier

logger = logging.getLogger(__name__)


class UsageLimitService:
    def __init__(self, read_model: UsageReadModel):
        self._read_model = read_model

    async def get_subscription(self, user_id: UUID) -> SubscriptionDTO:
        subscription = await self._read_model.get_subscription(user_id)
        return subscription or SubscriptionDTO(tier=PricingTier.FREE)

    async def get_event_tier(self, event_id: UUID, user_id: UUID) -> EventTierDTO:
        """
        Effective plan for an event.

        A completed purchase for the event wins. Otherwise an annual
        subscription covers every event of the user. Per-event tiers held as
        a subscription do not carry over to other events. Anything else is free.
        """
        purchase = await self._read_model.get_completed_purchase(event_id)
        if purchase is not None:
            return purchase

        subscription = await self.get_subscription(user_id)
        if subscription.is_annual:
            return EventTierDTO(tier=subscription.tier)

        return EventTierDTO(tier=PricingTier.FREE)

    async def get_event_usage(self, event_id: UUID, user_id: UUID) -> EventUsageDTO:
        tier = await self.get_event_tier(event_id, user_id)
        return EventUsageDTO(
            event_id=event_id,
            tier=tier.tier,
            guests_used=await self._read_model.count_guests(event_id),
            guests_limit=tier.limits.guests,
            nudges_used=await self._read_model.get_nudges_sent(event_id),
            nudges_limit=tier.limits.nudges,
            addons=tier.addons,
        )

    async def check_limit(self, event_id: UUID, user_id: UUID, limit_type: LimitType) -> LimitCheckDTO:
        usage = await self.get_event_usage(event_id, user_id)

        if limit_type == LimitType.GUESTS:
            used, limit = usage.guests_used, usage.guests_limit
        else:
            used, limit = usage.nudges_used, usage.nudges_limit

        if limit == UNLIMITED:
            return LimitCheckDTO(
                allowed=True, remaining=math.inf, limit=UNLIMITED, used=used, upgrade_required=False
            )

        allowed = used < limit
        suggested_tier = None if allowed else UPGRADE_PATH.get(usage.tier)
        if not allowed:
            logger.info(
                f"Event {event_id} hit its {limit_type.value} limit ({used}/{limit}) on {usage.tier.value}"
            )

        return LimitCheckDTO(
            allowed=allowed,
            remaining=max(0, limit - used),
            limit=limit,
            used=used,
            upgrade_required=not allowed,
            suggested_tier=suggested_tier,
        )

    async def can_send_nudge(self, event_id: UUID, user_id: UUID) -> LimitCheckDTO:
        return await self.check_limit(event_id, user_id, LimitType.NUDGES)

    async def can_add_guest(self, event_id: UUID, user_id: UUID) -> LimitCheckDTO:
        return await self.check_limit(event_id, user_id, LimitType.GUESTS)

    async def can_create_event(self, user_id: UUID) -> EventCreationCheckDTO:
        limits = (await self.get_subscription(user_id)).limits
        if limits.events_limit == UNLIMITED or limits.unlimited_events:
            return EventCreationCheckDTO(allowed=True)

        events_used = await self._read_model.count_events(user_id)
        if events_used >= limits.events_limit:
            return EventCreationCheckDTO(
                allowed=False,
                reason=(
                    f"You've reached your limit of {limits.events_limit} events. "
                    "Upgrade to Pro for unlimited events."
                ),
                events_used=events_used,
                events_limit=limits.events_limit,
            )

        return EventCreationCheckDTO(
            allowed=True, events_used=events_used, events_limit=limits.events_limit
        )
