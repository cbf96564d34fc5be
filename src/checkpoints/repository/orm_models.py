from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.guests.dtos import RsvpResponse
from src.models.base import Base, TimeStamp


class Checkpoint(Base, TimeStamp):
    __tablename__ = TableNames.CHECKPOINTS.value

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    trigger_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    executed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Lists of question / block uuids, stored as strings
    required_question_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    applicable_block_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    auto_resolve_to: Mapped[str | None] = mapped_column(
        Enum(RsvpResponse, name="rsvp_response_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Checkpoint {self.name or self.uuid} at {self.trigger_at} executed={self.executed}>"
