from src.config.settings import settings
from src.events.repository.event_store import SqlEventStore
from src.guests.repository.guest_directory import SqlGuestDirectory
from src.messaging import get_messaging_service
from src.nudges.gateway import NudgeGateway
from src.nudges.repository.nudge_store import SqlNudgeStore


def get_nudge_gateway() -> NudgeGateway:
    return NudgeGateway(
        guests=SqlGuestDirectory(),
        nudges=SqlNudgeStore(),
        events=SqlEventStore(),
        messaging_service=get_messaging_service(),
        config=settings,
    )


__all__ = [
    "NudgeGateway",
    "get_nudge_gateway",
]
