"""Handlers for Twilio callbacks: delivery receipts and STOP/START keywords."""

import logging

from src.guests.dtos import GuestStatus
from src.guests.repository.guest_directory import GuestDirectory
from src.nudges.dtos import NudgeStatus
from src.nudges.repository.nudge_store import NudgeStore

logger = logging.getLogger(__name__)

OPT_OUT_COMMANDS = {"STOP", "UNSUBSCRIBE"}
OPT_IN_COMMANDS = {"START", "SUBSCRIBE"}
HELP_COMMANDS = {"HELP", "INFO"}

OPT_OUT_REPLY = "You've been unsubscribed from Lockstep reminders. Reply START to re-subscribe."
OPT_IN_REPLY = "You've been re-subscribed to Lockstep reminders."
HELP_REPLY = "Lockstep event reminders. Reply STOP to unsubscribe, START to re-subscribe."

# Twilio MessageStatus -> nudge status; queued/sending/accepted etc. are ignored
PROVIDER_STATUS_MAP = {
    "sent": NudgeStatus.SENT,
    "delivered": NudgeStatus.DELIVERED,
    "undelivered": NudgeStatus.FAILED,
    "failed": NudgeStatus.FAILED,
}


class DeliveryStatusHandler:
    def __init__(self, nudges: NudgeStore):
        self._nudges = nudges

    async def update_status(self, message_sid: str, provider_status: str) -> bool:
        """
        Apply a delivery receipt to the nudge with this provider id.

        Returns:
            True if a nudge was updated
        """
        new_status = PROVIDER_STATUS_MAP.get(provider_status.lower())
        if new_status is None:
            logger.debug(f"Ignoring status {provider_status} for {message_sid}")
            return False

        updated = await self._nudges.update_status_by_external_id(message_sid, new_status)
        if updated:
            logger.info(f"Status update: {message_sid} -> {new_status.value}")
        else:
            logger.warning(f"Status update {message_sid} -> {new_status.value} not applied")
        return updated


class InboundMessageHandler:
    def __init__(self, guests: GuestDirectory):
        self._guests = guests

    async def handle(self, phone: str, command: str) -> str | None:
        """
        React to a keyword reply.

        Every guest row with the sender's number is updated: opting out is a
        per-number decision, not a per-event one.

        Returns:
            The reply to send back, or None for unrecognised messages
        """
        if command in OPT_OUT_COMMANDS:
            await self._set_status(phone, GuestStatus.OPTED_OUT)
            return OPT_OUT_REPLY

        if command in OPT_IN_COMMANDS:
            # Only guests that opted out go back to pending
            await self._set_status(phone, GuestStatus.PENDING, expected_status=GuestStatus.OPTED_OUT)
            return OPT_IN_REPLY

        if command in HELP_COMMANDS:
            return HELP_REPLY

        logger.info(f"Unrecognized message from {phone}: {command}")
        return None

    async def _set_status(
        self, phone: str, status: GuestStatus, expected_status: GuestStatus | None = None
    ) -> None:
        guests = await self._guests.find_guests_by_phone(phone)
        for guest in guests:
            if await self._guests.update_guest_status(guest.id, status, expected_status):
                logger.info(f"Guest {guest.id} moved to {status.value}")
        if not guests:
            logger.info(f"No guest found for {phone}")
