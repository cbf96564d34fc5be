"""Nudge log - one row per outbound message attempt, unique per idempotency key."""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.nudges.dtos import Channel, NudgeClaimDTO, NudgeDTO, NudgeStatus
from src.nudges.repository.orm_models import Nudge


class NudgeStore(ABC):
    @abstractmethod
    async def claim(
        self,
        idempotency_key: str,
        guest_id: UUID,
        checkpoint_id: UUID | None,
        channel: Channel,
        message: str,
    ) -> NudgeClaimDTO:
        """
        Atomically insert a pending nudge for idempotency_key.

        Returns:
            NudgeClaimDTO with created=False and the existing nudge's id when
            the key was already taken
        """
        raise NotImplementedError

    @abstractmethod
    async def record_success(self, nudge_id: UUID, external_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def record_failure(
        self, nudge_id: UUID, error_message: str, external_id: str | None = None
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_status_by_external_id(self, external_id: str, status: NudgeStatus) -> bool:
        """
        Apply a delivery callback.

        Returns:
            True if updated, False if no nudge has this external id or the
            nudge was already delivered and the new status is not "delivered"
        """
        raise NotImplementedError

    @abstractmethod
    async def get_nudge(self, nudge_id: UUID) -> NudgeDTO | None:
        raise NotImplementedError


class SqlNudgeStore(NudgeStore):
    """SQL implementation of the nudge log."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def claim(
        self,
        idempotency_key: str,
        guest_id: UUID,
        checkpoint_id: UUID | None,
        channel: Channel,
        message: str,
    ) -> NudgeClaimDTO:
        nudge = Nudge(
            guest_id=guest_id,
            checkpoint_id=checkpoint_id,
            channel=channel,
            status=NudgeStatus.PENDING,
            idempotency_key=idempotency_key,
            message=message,
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            try:
                async with session.begin_nested():
                    session.add(nudge)
            except IntegrityError:
                result = await session.execute(
                    select(Nudge.uuid).where(Nudge.idempotency_key == idempotency_key)
                )
                return NudgeClaimDTO(nudge_id=result.scalar_one(), created=False)
            return NudgeClaimDTO(nudge_id=nudge.uuid, created=True)

    async def record_success(self, nudge_id: UUID, external_id: str) -> None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            nudge = await session.get(Nudge, nudge_id)
            if nudge:
                nudge.status = NudgeStatus.SENT
                nudge.external_id = external_id
                nudge.sent_at = datetime.now(UTC)
                await session.flush()

    async def record_failure(
        self, nudge_id: UUID, error_message: str, external_id: str | None = None
    ) -> None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            nudge = await session.get(Nudge, nudge_id)
            if nudge:
                nudge.status = NudgeStatus.FAILED
                nudge.error_message = error_message
                nudge.external_id = external_id
                nudge.sent_at = datetime.now(UTC)
                await session.flush()

    async def update_status_by_external_id(self, external_id: str, status: NudgeStatus) -> bool:
        values: dict = {"status": status}
        if status == NudgeStatus.DELIVERED:
            values["delivered_at"] = datetime.now(UTC)
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            statement = update(Nudge).where(Nudge.external_id == external_id)
            if status != NudgeStatus.DELIVERED:
                # A late "sent" callback never overrides "delivered"
                statement = statement.where(Nudge.status != NudgeStatus.DELIVERED)
            result = await session.execute(statement.values(**values))
            return result.rowcount > 0

    async def get_nudge(self, nudge_id: UUID) -> NudgeDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            nudge = await session.get(Nudge, nudge_id)
            return NudgeDTO.from_nudge(nudge) if nudge else None
