from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.nudges.repository.orm_models import Nudge


class NudgeRejectedError(Exception):
    """Raised when a guest cannot be messaged. Nothing is recorded."""


class GuestOptedOutError(NudgeRejectedError):
    def __init__(self, guest_id: UUID) -> None:
        self.guest_id = guest_id
        super().__init__("Guest has opted out of messages")


class GuestHasNoPhoneError(NudgeRejectedError):
    def __init__(self, guest_id: UUID) -> None:
        self.guest_id = guest_id
        super().__init__("Guest has no phone number")


class NudgeDeliveryError(Exception):
    """Raised when the provider failed; the nudge is recorded as failed."""

    def __init__(self, nudge_id: UUID, details: str) -> None:
        self.nudge_id = nudge_id
        self.details = details
        super().__init__(f"Failed to send nudge {nudge_id}: {details}")


class Channel(str, Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"


class NudgeStatus(str, Enum):
    # claimed under its idempotency key, provider not yet answered
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    DELIVERED = "delivered"


def build_idempotency_key(
    event_id: UUID, checkpoint_id: UUID | None, guest_id: UUID, channel: Channel
) -> str:
    return f"{event_id}:{checkpoint_id or 'manual'}:{guest_id}:{Channel(channel).value}"


def format_address(phone: str, channel: Channel) -> str:
    """Strip whitespace and apply the channel's address scheme."""
    number = "".join(phone.split())
    if channel == Channel.WHATSAPP:
        return f"whatsapp:{number}"
    return number


@dataclass(frozen=True)
class NudgeClaimDTO:
    nudge_id: UUID
    created: bool


@dataclass(frozen=True)
class NudgeSentDTO:
    """Outcome of a gateway send."""

    nudge_id: UUID
    external_id: str | None = None
    already_sent: bool = False


@dataclass(frozen=True)
class NudgeDTO:
    id: UUID
    guest_id: UUID | None
    checkpoint_id: UUID | None
    channel: Channel
    status: NudgeStatus
    idempotency_key: str
    message: str | None = None
    external_id: str | None = None
    sent_at: datetime | None = None
    delivered_at: datetime | None = None
    error_message: str | None = None

    @classmethod
    def from_nudge(cls, nudge: "Nudge") -> "NudgeDTO":
        return cls(
            id=nudge.uuid,
            guest_id=nudge.guest_id,
            checkpoint_id=nudge.checkpoint_id,
            channel=Channel(nudge.channel),
            status=NudgeStatus(nudge.status),
            idempotency_key=nudge.idempotency_key,
            message=nudge.message,
            external_id=nudge.external_id,
            sent_at=nudge.sent_at,
            delivered_at=nudge.delivered_at,
            error_message=nudge.error_message,
        )
