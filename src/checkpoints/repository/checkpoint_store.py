from abc import ABC, abstractmethod
from datetime import datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.checkpoints.dtos import CheckpointDTO
from src.checkpoints.repository.orm_models import Checkpoint
from src.config.database import async_session_manager


class CheckpointStore(ABC):
    @abstractmethod
    async def find_due_unexecuted(self, now: datetime) -> list[CheckpointDTO]:
        raise NotImplementedError

    @abstractmethod
    async def get_checkpoint(self, checkpoint_id: UUID) -> CheckpointDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def mark_executed(self, checkpoint_id: UUID) -> bool:
        """
        Flip executed from false to true.

        Returns:
            True for the caller that made the flip, False if the checkpoint was
            already executed (or does not exist)
        """
        raise NotImplementedError


class SqlCheckpointStore(CheckpointStore):
    """SQL implementation of the checkpoint store."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    async def find_due_unexecuted(self, now: datetime) -> list[CheckpointDTO]:
        stmt = (
            select(Checkpoint)
            .where(Checkpoint.executed.is_(False), Checkpoint.trigger_at <= now)
            .order_by(Checkpoint.trigger_at)
        )
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(stmt)
            return [CheckpointDTO.from_checkpoint(cp) for cp in result.scalars().all()]

    async def get_checkpoint(self, checkpoint_id: UUID) -> CheckpointDTO | None:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                select(Checkpoint)
                .where(Checkpoint.uuid == checkpoint_id)
                .execution_options(populate_existing=True)
            )
            checkpoint = result.scalar_one_or_none()
            return CheckpointDTO.from_checkpoint(checkpoint) if checkpoint else None

    async def mark_executed(self, checkpoint_id: UUID) -> bool:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            result = await session.execute(
                update(Checkpoint)
                .where(Checkpoint.uuid == checkpoint_id, Checkpoint.executed.is_(False))
                .values(executed=True)
            )
            return result.rowcount == 1
