"""
Checkpoint evaluator - decides who still owes an answer at a checkpoint,
nudges them, and optionally fills in their unanswered blocks.

Only guests that are not opted out and have a phone number are considered.
Failures are isolated per guest: a lookup, send or auto-resolve that errors or
times out is logged and the remaining guests are still processed.
"""

import asyncio
import logging

from src.checkpoints.dtos import (
    CheckpointDTO,
    CompletionPolicy,
    PendingOnly,
    RequiresAnswers,
    RequiresBlockResponses,
)
from src.events.dtos import EventDTO
from src.guests.dtos import GuestDTO, GuestNotFoundError, GuestStatus
from src.guests.repository.guest_directory import GuestDirectory
from src.guests.repository.schedule_store import ScheduleStore
from src.nudges.dtos import Channel, NudgeDeliveryError, NudgeRejectedError
from src.nudges.gateway import NudgeGateway

logger = logging.getLogger(__name__)

DEFAULT_REMINDER = "Reminder: We need your response for {title}. Please check your RSVP link."


def build_nudge_message(checkpoint: CheckpointDTO, event: EventDTO, guest: GuestDTO) -> str:
    reminder = checkpoint.message or DEFAULT_REMINDER.format(title=event.title)
    return f"Hey {guest.name}! {reminder}"


class CheckpointEvaluator:
    def __init__(
        self,
        guests: GuestDirectory,
        schedule: ScheduleStore,
        gateway: NudgeGateway,
        timeout_seconds: float = 15.0,
    ):
        self._guests = guests
        self._schedule = schedule
        self._gateway = gateway
        self._timeout_seconds = timeout_seconds

    async def evaluate(self, checkpoint: CheckpointDTO, event: EventDTO) -> int:
        """
        Nudge every guest missing the checkpoint's completion condition and
        auto-resolve them if the checkpoint says so.

        Returns:
            Number of nudges freshly sent for this checkpoint
        """
        guests = await self._guests.list_guests(event.id, exclude_status=GuestStatus.OPTED_OUT)
        missing = await self.find_missing_guests(checkpoint, [g for g in guests if g.is_nudgeable])
        logger.info(
            f"Checkpoint {checkpoint.id}: {len(missing)} of {len(guests)} guests need a nudge"
        )

        nudges_sent = 0
        for guest in missing:
            if await self._nudge(checkpoint, event, guest):
                nudges_sent += 1

        if checkpoint.auto_resolve_to is not None:
            for guest in missing:
                await self._auto_resolve(checkpoint, guest)

        return nudges_sent

    async def find_missing_guests(
        self, checkpoint: CheckpointDTO, guests: list[GuestDTO]
    ) -> list[GuestDTO]:
        policy = checkpoint.completion_policy
        missing = []
        for guest in guests:
            try:
                if await asyncio.wait_for(self._is_missing(policy, guest), self._timeout_seconds):
                    missing.append(guest)
            except TimeoutError:
                logger.error(f"Timed out checking guest {guest.id} for checkpoint {checkpoint.id}")
            except Exception:
                logger.exception(f"Failed to check guest {guest.id} for checkpoint {checkpoint.id}")
        return missing

    async def _is_missing(self, policy: CompletionPolicy, guest: GuestDTO) -> bool:
        if not guest.is_nudgeable:
            return False

        match policy:
            case RequiresAnswers(question_ids=question_ids):
                answered = await self._schedule.list_answered_question_ids(
                    guest.id, list(question_ids)
                )
                return any(question_id not in answered for question_id in question_ids)
            case RequiresBlockResponses(block_ids=block_ids):
                responded = await self._schedule.list_responded_block_ids(guest.id, list(block_ids))
                return any(block_id not in responded for block_id in block_ids)
            case PendingOnly():
                return guest.status == GuestStatus.PENDING
            case _:
                raise TypeError(f"Unknown completion policy {policy!r}")

    async def _nudge(self, checkpoint: CheckpointDTO, event: EventDTO, guest: GuestDTO) -> bool:
        """Returns True only for a fresh, successful send."""
        try:
            result = await asyncio.wait_for(
                self._gateway.send(
                    guest_id=guest.id,
                    checkpoint_id=checkpoint.id,
                    channel=Channel.SMS,
                    message=build_nudge_message(checkpoint, event, guest),
                    event_id=event.id,
                ),
                self._timeout_seconds,
            )
        except (GuestNotFoundError, NudgeRejectedError) as e:
            logger.warning(f"Nudge for guest {guest.id} rejected: {e}")
            return False
        except NudgeDeliveryError as e:
            logger.error(f"Nudge failed for guest {guest.id}: {e.details}")
            return False
        except TimeoutError:
            logger.error(f"Timed out nudging guest {guest.id} for checkpoint {checkpoint.id}")
            return False
        except Exception:
            logger.exception(f"Nudge failed for guest {guest.id}")
            return False

        return not result.already_sent

    async def _auto_resolve(self, checkpoint: CheckpointDTO, guest: GuestDTO) -> None:
        try:
            await asyncio.wait_for(self._resolve_guest(checkpoint, guest), self._timeout_seconds)
        except TimeoutError:
            logger.error(f"Timed out auto-resolving guest {guest.id} for checkpoint {checkpoint.id}")
        except Exception:
            logger.exception(f"Failed to auto-resolve guest {guest.id}")

    async def _resolve_guest(self, checkpoint: CheckpointDTO, guest: GuestDTO) -> None:
        for block_id in checkpoint.applicable_block_ids:
            inserted = await self._schedule.insert_response_if_absent(
                guest.id, block_id, checkpoint.auto_resolve_to
            )
            if inserted:
                logger.debug(
                    f"Auto-resolved guest {guest.id} block {block_id} to "
                    f"{checkpoint.auto_resolve_to.value}"
                )

        # An opt-out or self-response that landed meanwhile wins
        updated = await self._guests.update_guest_status(
            guest.id, GuestStatus.RESPONDED, expected_status=GuestStatus.PENDING
        )
        if updated:
            logger.info(f"Guest {guest.id} auto-resolved by checkpoint {checkpoint.id}")
