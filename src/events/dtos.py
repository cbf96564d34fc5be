from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.models.event import Event


@dataclass(frozen=True)
class EventDTO:
    """DTO for event data."""

    id: UUID
    title: str
    organiser_id: UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    nudges_sent: int = 0

    @classmethod
    def from_event(cls, event: "Event") -> "EventDTO":
        return cls(
            id=event.uuid,
            title=event.title,
            organiser_id=event.organiser_id,
            start_date=event.start_date,
            end_date=event.end_date,
            nudges_sent=event.nudges_sent or 0,
        )
