"""
Nudge gateway - sends one message to one guest over one channel.

Each logical occasion (event, checkpoint or manual, guest, channel) is sent at
most once: the nudge row is claimed under its idempotency key before the
provider is contacted, and a second attempt gets the first attempt's id back.
"""

import asyncio
import logging
from typing import Protocol
from uuid import UUID

from src.events.repository.event_store import EventStore
from src.guests.dtos import GuestNotFoundError, GuestStatus
from src.guests.repository.guest_directory import GuestDirectory
from src.messaging.base import MessagingProviderError, MessagingServiceBase
from src.nudges.dtos import (
    Channel,
    GuestHasNoPhoneError,
    GuestOptedOutError,
    NudgeDeliveryError,
    NudgeSentDTO,
    build_idempotency_key,
    format_address,
)
from src.nudges.repository.nudge_store import NudgeStore

logger = logging.getLogger(__name__)

SEND_TIMEOUT_ERROR = "Timed out waiting for the messaging provider"


class SenderConfig(Protocol):
    twilio_phone_number: str
    twilio_whatsapp_number: str


class NudgeGateway:
    def __init__(
        self,
        guests: GuestDirectory,
        nudges: NudgeStore,
        events: EventStore,
        messaging_service: MessagingServiceBase,
        config: SenderConfig,
    ):
        self._guests = guests
        self._nudges = nudges
        self._events = events
        self._messaging_service = messaging_service
        self._config = config

    def _sender_for(self, channel: Channel) -> str:
        if channel == Channel.WHATSAPP:
            return format_address(self._config.twilio_whatsapp_number, channel)
        return format_address(self._config.twilio_phone_number, channel)

    async def send(
        self,
        guest_id: UUID,
        checkpoint_id: UUID | None,
        channel: Channel,
        message: str,
        event_id: UUID,
    ) -> NudgeSentDTO:
        """
        Send a nudge to a guest.

        Raises:
            GuestNotFoundError: guest does not exist, nothing recorded
            GuestOptedOutError: guest replied STOP, nothing recorded
            GuestHasNoPhoneError: guest cannot be messaged, nothing recorded
            NudgeDeliveryError: provider failed, nudge recorded as failed
            TimeoutError, CancelledError: caller gave up mid-send, nudge recorded as failed
        """
        guest = await self._guests.get_guest(guest_id)
        if guest is None:
            raise GuestNotFoundError(guest_id)
        if guest.status == GuestStatus.OPTED_OUT:
            raise GuestOptedOutError(guest_id)
        if not guest.phone:
            raise GuestHasNoPhoneError(guest_id)

        idempotency_key = build_idempotency_key(event_id, checkpoint_id, guest_id, channel)
        claim = await self._nudges.claim(
            idempotency_key=idempotency_key,
            guest_id=guest_id,
            checkpoint_id=checkpoint_id,
            channel=channel,
            message=message,
        )
        if not claim.created:
            logger.info(f"Nudge {idempotency_key} already sent as {claim.nudge_id}, skipping")
            return NudgeSentDTO(nudge_id=claim.nudge_id, already_sent=True)

        try:
            external_id = await self._messaging_service.send(
                to=format_address(guest.phone, channel),
                from_=self._sender_for(channel),
                body=message,
            )
        except MessagingProviderError as e:
            logger.error(f"Nudge {claim.nudge_id} to guest {guest_id} failed: {e}")
            await self._nudges.record_failure(
                claim.nudge_id, error_message=str(e), external_id=e.external_id
            )
            raise NudgeDeliveryError(claim.nudge_id, str(e)) from e
        except (TimeoutError, asyncio.CancelledError):
            # The caller gave up mid-send, the row must not stay pending
            logger.error(f"Nudge {claim.nudge_id} to guest {guest_id} timed out")
            await self._nudges.record_failure(claim.nudge_id, error_message=SEND_TIMEOUT_ERROR)
            raise

        await self._nudges.record_success(claim.nudge_id, external_id=external_id)
        # Checkpoint nudges are system-triggered and don't count against the quota
        if checkpoint_id is None:
            await self._events.increment_nudges_sent(event_id)

        logger.info(f"Nudge {claim.nudge_id} sent to guest {guest_id} over {channel.value}")
        return NudgeSentDTO(nudge_id=claim.nudge_id, external_id=external_id)
