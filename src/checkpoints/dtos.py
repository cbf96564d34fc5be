from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from src.guests.dtos import RsvpResponse

if TYPE_CHECKING:
    from src.checkpoints.repository.orm_models import Checkpoint


@dataclass(frozen=True)
class RequiresAnswers:
    """Guest is complete once every listed question has an answer."""

    question_ids: tuple[UUID, ...]


@dataclass(frozen=True)
class RequiresBlockResponses:
    """Guest is complete once every listed block has a response."""

    block_ids: tuple[UUID, ...]


@dataclass(frozen=True)
class PendingOnly:
    """Guest is complete once they are no longer pending."""


CompletionPolicy = RequiresAnswers | RequiresBlockResponses | PendingOnly


@dataclass(frozen=True)
class CheckpointDTO:
    """DTO for checkpoint data."""

    id: UUID
    event_id: UUID
    trigger_at: datetime
    executed: bool = False
    name: str | None = None
    message: str | None = None
    required_question_ids: tuple[UUID, ...] = ()
    applicable_block_ids: tuple[UUID, ...] = ()
    auto_resolve_to: RsvpResponse | None = None

    @property
    def completion_policy(self) -> CompletionPolicy:
        # Question requirements win over block requirements, they are never combined
        if self.required_question_ids:
            return RequiresAnswers(self.required_question_ids)
        if self.applicable_block_ids:
            return RequiresBlockResponses(self.applicable_block_ids)
        return PendingOnly()

    @classmethod
    def from_checkpoint(cls, checkpoint: "Checkpoint") -> "CheckpointDTO":
        return cls(
            id=checkpoint.uuid,
            event_id=checkpoint.event_id,
            trigger_at=checkpoint.trigger_at,
            executed=bool(checkpoint.executed),
            name=checkpoint.name,
            message=checkpoint.message,
            required_question_ids=tuple(UUID(str(i)) for i in checkpoint.required_question_ids or []),
            applicable_block_ids=tuple(UUID(str(i)) for i in checkpoint.applicable_block_ids or []),
            auto_resolve_to=(
                RsvpResponse(checkpoint.auto_resolve_to) if checkpoint.auto_resolve_to else None
            ),
        )


@dataclass
class ProcessingResultDTO:
    """Totals for one runner invocation."""

    processed: int = 0
    nudges_sent: int = 0
    skipped: list[UUID] = field(default_factory=list)
