from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.guests.repository.orm_models import Guest


class GuestNotFoundError(Exception):
    """Raised when a guest id or magic token does not match any guest."""

    def __init__(self, reference: UUID | str) -> None:
        self.reference = reference
        super().__init__(f"Guest '{reference}' not found")


class GuestStatus(str, Enum):
    PENDING = "pending"
    RESPONDED = "responded"
    OPTED_OUT = "opted_out"


class RsvpResponse(str, Enum):
    IN = "in"
    MAYBE = "maybe"
    OUT = "out"


@dataclass(frozen=True)
class GuestDTO:
    """DTO for guest data."""

    id: UUID
    event_id: UUID
    name: str
    status: GuestStatus
    magic_token: str
    email: str | None = None
    phone: str | None = None
    opted_out_at: datetime | None = None

    @property
    def is_nudgeable(self) -> bool:
        return self.status != GuestStatus.OPTED_OUT and bool(self.phone)

    @classmethod
    def from_guest(cls, guest: "Guest") -> "GuestDTO":
        """Create GuestDTO from Guest ORM model."""
        return cls(
            id=guest.uuid,
            event_id=guest.event_id,
            name=guest.name,
            status=GuestStatus(guest.status),
            magic_token=guest.magic_token,
            email=guest.email,
            phone=guest.phone,
            opted_out_at=guest.opted_out_at,
        )


@dataclass(frozen=True)
class RSVPSubmissionDTO:
    """A guest's self-service submission: block responses and question answers."""

    responses: dict[UUID, RsvpResponse] = field(default_factory=dict)
    answers: dict[UUID, object] = field(default_factory=dict)


@dataclass(frozen=True)
class RSVPResultDTO:
    message: str
    status: GuestStatus
