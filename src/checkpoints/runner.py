"""Checkpoint runner - drives the evaluator over due checkpoints, one bounded batch per call."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID

from src.checkpoints.dtos import ProcessingResultDTO
from src.checkpoints.evaluator import CheckpointEvaluator
from src.checkpoints.repository.checkpoint_store import CheckpointStore
from src.events.repository.event_store import EventStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


class CheckpointRunner:
    def __init__(
        self,
        checkpoints: CheckpointStore,
        events: EventStore,
        evaluator: CheckpointEvaluator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._checkpoints = checkpoints
        self._events = events
        self._evaluator = evaluator
        self._clock = clock

    async def process_checkpoints(self, target_id: UUID | None = None) -> ProcessingResultDTO:
        """
        Process one checkpoint (target_id) or every due, unexecuted checkpoint.

        A checkpoint only counts towards the totals for the invocation that
        marks it executed, so concurrent runs never double count.
        """
        if target_id is not None:
            checkpoint_ids = [target_id]
        else:
            due = await self._checkpoints.find_due_unexecuted(self._clock())
            checkpoint_ids = [checkpoint.id for checkpoint in due]

        result = ProcessingResultDTO()
        if not checkpoint_ids:
            logger.info("No due checkpoints")
            return result

        for checkpoint_id in checkpoint_ids:
            try:
                nudges_sent = await self._process_one(checkpoint_id)
            except Exception:
                logger.exception(f"Failed to process checkpoint {checkpoint_id}")
                result.skipped.append(checkpoint_id)
                continue

            if nudges_sent is None:
                result.skipped.append(checkpoint_id)
                continue

            result.processed += 1
            result.nudges_sent += nudges_sent

        logger.info(
            f"Processed {result.processed} checkpoints, sent {result.nudges_sent} nudges"
        )
        return result

    async def _process_one(self, checkpoint_id: UUID) -> int | None:
        """Returns the nudges sent, or None when the checkpoint was skipped."""
        # Re-read: another runner may have executed it since the scan
        checkpoint = await self._checkpoints.get_checkpoint(checkpoint_id)
        if checkpoint is None:
            logger.error(f"Checkpoint {checkpoint_id} not found")
            return None
        if checkpoint.executed:
            logger.info(f"Checkpoint {checkpoint_id} already executed, skipping")
            return None

        event = await self._events.get_event(checkpoint.event_id)
        if event is None:
            logger.error(f"Event {checkpoint.event_id} for checkpoint {checkpoint_id} not found")
            return None

        nudges_sent = await self._evaluator.evaluate(checkpoint, event)

        if not await self._checkpoints.mark_executed(checkpoint_id):
            logger.warning(f"Checkpoint {checkpoint_id} was executed by a concurrent run")
            return None
        return nudges_sent
