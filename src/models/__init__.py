from src.models.base import Base, BaseModel, TimeStamp
from .user import User
from .event import Block, Event, Question

__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "User",
    "Event",
    "Block",
    "Question",
]
