"""Pricing tiers, their quotas and display metadata."""

from dataclasses import dataclass
from enum import Enum

UNLIMITED = -1


class PricingTier(str, Enum):
    FREE = "free"
    PRO = "pro"
    WEDDING = "wedding"
    BUSINESS = "business"
    ANNUAL_PRO = "annual_pro"


@dataclass(frozen=True)
class TierLimits:
    guests: int
    nudges: int
    events_limit: int
    ai_summaries: bool = False
    whatsapp: bool = False
    export: bool = False
    priority_ai: bool = False
    analytics: bool = False
    team_access: bool = False
    unlimited_events: bool = False


@dataclass(frozen=True)
class TierPricing:
    price: int
    label: str
    description: str


@dataclass(frozen=True)
class TierInfo:
    name: str
    price: str
    features: list[str]


TIER_LIMITS: dict[PricingTier, TierLimits] = {
    PricingTier.FREE: TierLimits(guests=15, nudges=3, events_limit=3),
    PricingTier.PRO: TierLimits(
        guests=75,
        nudges=20,
        events_limit=UNLIMITED,
        ai_summaries=True,
        whatsapp=True,
        unlimited_events=True,
    ),
    PricingTier.WEDDING: TierLimits(
        guests=150,
        nudges=UNLIMITED,
        events_limit=UNLIMITED,
        ai_summaries=True,
        whatsapp=True,
        export=True,
        priority_ai=True,
        unlimited_events=True,
    ),
    PricingTier.BUSINESS: TierLimits(
        guests=200,
        nudges=UNLIMITED,
        events_limit=UNLIMITED,
        ai_summaries=True,
        whatsapp=True,
        export=True,
        priority_ai=True,
        analytics=True,
        team_access=True,
        unlimited_events=True,
    ),
    PricingTier.ANNUAL_PRO: TierLimits(
        guests=75,
        nudges=20,
        events_limit=UNLIMITED,
        ai_summaries=True,
        whatsapp=True,
        unlimited_events=True,
    ),
}

TIER_PRICING: dict[PricingTier, TierPricing] = {
    PricingTier.FREE: TierPricing(0, "Free", "Perfect for small gatherings"),
    PricingTier.PRO: TierPricing(29, "Pro", "For bucks, hens, birthdays & trips"),
    PricingTier.WEDDING: TierPricing(49, "Wedding", "For wedding weekends"),
    PricingTier.BUSINESS: TierPricing(99, "Business", "For corporate offsites & retreats"),
    PricingTier.ANNUAL_PRO: TierPricing(149, "Annual Pro", "Unlimited events, billed yearly"),
}

# Suggested tier when a quota is hit; business is the top
UPGRADE_PATH: dict[PricingTier, PricingTier] = {
    PricingTier.FREE: PricingTier.PRO,
    PricingTier.PRO: PricingTier.WEDDING,
    PricingTier.WEDDING: PricingTier.BUSINESS,
    PricingTier.ANNUAL_PRO: PricingTier.WEDDING,
}


def parse_tier(value: str | None) -> PricingTier:
    """Unknown or empty tiers fall back to free."""
    try:
        return PricingTier(value)
    except ValueError:
        return PricingTier.FREE


def get_recommended_tier(event_type: str) -> PricingTier:
    event_type = event_type.lower()
    if any(word in event_type for word in ("offsite", "retreat", "corporate")):
        return PricingTier.BUSINESS
    if "wedding" in event_type:
        return PricingTier.WEDDING
    return PricingTier.PRO


def get_tier_info(tier: PricingTier) -> TierInfo:
    pricing = TIER_PRICING[tier]
    limits = TIER_LIMITS[tier]

    features = [
        "Unlimited guests" if limits.guests == UNLIMITED else f"Up to {limits.guests} guests",
        "Unlimited nudges" if limits.nudges == UNLIMITED else f"{limits.nudges} nudges",
    ]
    flags = [
        (limits.ai_summaries, "AI summaries"),
        (limits.whatsapp, "WhatsApp messaging"),
        (limits.export, "CSV export"),
        (limits.priority_ai, "Priority AI"),
        (limits.analytics, "Analytics"),
        (limits.team_access, "Team access"),
        (limits.unlimited_events, "Unlimited events"),
    ]
    features.extend(label for enabled, label in flags if enabled)

    if tier == PricingTier.FREE:
        price = "Free"
    elif tier == PricingTier.ANNUAL_PRO:
        price = f"${pricing.price}/year"
    else:
        price = f"${pricing.price}/event"

    return TierInfo(name=pricing.label, price=price, features=features)
