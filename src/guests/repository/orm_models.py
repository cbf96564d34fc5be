from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.guests.dtos import GuestStatus, RsvpResponse
from src.models.base import Base, TimeStamp


def generate_magic_token() -> str:
    return str(uuid4())


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # E.164, looked up by inbound messages
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    status: Mapped[str] = mapped_column(
        Enum(GuestStatus, name="guest_status_enum", values_callable=lambda x: [e.value for e in x]),
        default=GuestStatus.PENDING,
        nullable=False,
        index=True,
    )
    magic_token: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, index=True, default=generate_magic_token
    )
    opted_out_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<Guest {self.name} - {self.status}>"


class RSVP(Base, TimeStamp):
    __tablename__ = TableNames.RSVPS.value
    __table_args__ = (UniqueConstraint("guest_id", "block_id", name="uq_rsvps_guest_block"),)

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    block_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.BLOCKS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    response: Mapped[str] = mapped_column(
        Enum(RsvpResponse, name="rsvp_response_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<RSVP {self.guest_id} {self.block_id}={self.response}>"


class Answer(Base, TimeStamp):
    __tablename__ = TableNames.ANSWERS.value
    __table_args__ = (UniqueConstraint("guest_id", "question_id", name="uq_answers_guest_question"),)

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.QUESTIONS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[object] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Answer {self.guest_id} {self.question_id}>"
