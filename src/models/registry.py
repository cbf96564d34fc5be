"""Imports every ORM module so BaseModel.metadata knows all tables."""

from src.billing.repository.orm_models import EventPurchase, Subscription
from src.checkpoints.repository.orm_models import Checkpoint
from src.guests.repository.orm_models import RSVP, Answer, Guest
from src.models.base import BaseModel
from src.models.event import Block, Event, Question
from src.models.user import User
from src.nudges.repository.orm_models import Nudge

metadata = BaseModel.metadata

__all__ = [
    "metadata",
    "User",
    "Event",
    "Block",
    "Question",
    "Guest",
    "RSVP",
    "Answer",
    "Checkpoint",
    "Nudge",
    "Subscription",
    "EventPurchase",
]
