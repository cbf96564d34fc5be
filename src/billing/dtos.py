import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from src.billing.tiers import TIER_LIMITS, PricingTier, TierLimits


class LimitType(str, Enum):
    GUESTS = "guests"
    NUDGES = "nudges"


@dataclass(frozen=True)
class SubscriptionDTO:
    tier: PricingTier
    stripe_customer_id: str | None = None
    expires_at: datetime | None = None

    @property
    def is_annual(self) -> bool:
        return self.tier == PricingTier.ANNUAL_PRO

    @property
    def limits(self) -> TierLimits:
        return TIER_LIMITS[self.tier]


@dataclass(frozen=True)
class EventTierDTO:
    tier: PricingTier
    addons: list[str] = field(default_factory=list)

    @property
    def limits(self) -> TierLimits:
        return TIER_LIMITS[self.tier]


@dataclass(frozen=True)
class EventUsageDTO:
    event_id: UUID
    tier: PricingTier
    guests_used: int
    guests_limit: int
    nudges_used: int
    nudges_limit: int
    addons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LimitCheckDTO:
    """Outcome of a quota check. remaining is math.inf for unlimited tiers."""

    allowed: bool
    remaining: float
    limit: int
    used: int
    upgrade_required: bool
    suggested_tier: PricingTier | None = None

    @property
    def is_unlimited(self) -> bool:
        return math.isinf(self.remaining)


@dataclass(frozen=True)
class EventCreationCheckDTO:
    allowed: bool
    reason: str | None = None
    events_used: int | None = None
    events_limit: int | None = None
