from src.checkpoints.evaluator import CheckpointEvaluator
from src.checkpoints.repository.checkpoint_store import SqlCheckpointStore
from src.checkpoints.runner import CheckpointRunner
from src.config.settings import settings
from src.events.repository.event_store import SqlEventStore
from src.guests.repository.guest_directory import SqlGuestDirectory
from src.guests.repository.schedule_store import SqlScheduleStore
from src.nudges import get_nudge_gateway


def get_checkpoint_runner() -> CheckpointRunner:
    evaluator = CheckpointEvaluator(
        guests=SqlGuestDirectory(),
        schedule=SqlScheduleStore(),
        gateway=get_nudge_gateway(),
        timeout_seconds=settings.nudge_timeout_seconds,
    )
    return CheckpointRunner(
        checkpoints=SqlCheckpointStore(),
        events=SqlEventStore(),
        evaluator=evaluator,
    )


__all__ = [
    "CheckpointRunner",
    "get_checkpoint_runner",
]
