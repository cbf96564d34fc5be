import abc
from functools import partial
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.billing.dtos import EventTierDTO, SubscriptionDTO
from src.billing.repository.orm_models import EventPurchase, Subscription
from src.billing.tiers import parse_tier
from src.config.database import async_session_manager
from src.guests.repository.orm_models import Guest
from src.models.event import Event

ACTIVE_SUBSCRIPTION_STATUS = "active"
COMPLETED_PURCHASE_STATUS = "completed"


class UsageReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_subscription(self, user_id: UUID) -> SubscriptionDTO | None:
        """The user's active subscription, or None."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_completed_purchase(self, event_id: UUID) -> EventTierDTO | None:
        """The event's completed one-off purchase, or None."""
        raise NotImplementedError

    @abc.abstractmethod
    async def count_guests(self, event_id: UUID) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_nudges_sent(self, event_id: UUID) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def count_events(self, organiser_id: UUID) -> int:
        raise NotImplementedError


class SqlUsageReadModel(UsageReadModel):
    """SQL implementation of the usage read model."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def get_subscription(self, user_id: UUID) -> SubscriptionDTO | None:
        stmt = select(Subscription).where(
            Subscription.user_id == user_id,
            # Rows written before status tracking have no status
            or_(
                Subscription.status == ACTIVE_SUBSCRIPTION_STATUS,
                Subscription.status.is_(None),
            ),
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            subscription = (await session.execute(stmt)).scalar_one_or_none()
            if subscription is None:
                return None
            return SubscriptionDTO(
                tier=parse_tier(subscription.tier),
                stripe_customer_id=subscription.stripe_customer_id,
                expires_at=subscription.current_period_end,
            )

    async def get_completed_purchase(self, event_id: UUID) -> EventTierDTO | None:
        stmt = (
            select(EventPurchase)
            .where(
                EventPurchase.event_id == event_id,
                EventPurchase.status == COMPLETED_PURCHASE_STATUS,
            )
            .order_by(EventPurchase.created_at.desc())
            .limit(1)
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            purchase = (await session.execute(stmt)).scalar_one_or_none()
            if purchase is None:
                return None
            return EventTierDTO(tier=parse_tier(purchase.tier), addons=list(purchase.addons or []))

    async def count_guests(self, event_id: UUID) -> int:
        stmt = select(func.count()).select_from(Guest).where(Guest.event_id == event_id)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return (await session.execute(stmt)).scalar_one()

    async def get_nudges_sent(self, event_id: UUID) -> int:
        stmt = select(Event.nudges_sent).where(Event.uuid == event_id)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return (await session.execute(stmt)).scalar_one_or_none() or 0

    async def count_events(self, organiser_id: UUID) -> int:
        stmt = select(func.count()).select_from(Event).where(Event.organiser_id == organiser_id)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            return (await session.execute(stmt)).scalar_one()
