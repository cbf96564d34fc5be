from uuid import UUID, uuid4

import pytest

from src.checkpoints import get_checkpoint_runner
from src.checkpoints.dtos import ProcessingResultDTO
from src.checkpoints.urls import PROCESS_CHECKPOINTS_URL
from src.messaging.base import MessagingNotConfiguredError


class RecordingRunner:
    """Stands in for CheckpointRunner, records the target it was given."""

    def __init__(self, result: ProcessingResultDTO | None = None):
        self.calls: list[UUID | None] = []
        self._result = result or ProcessingResultDTO(processed=2, nudges_sent=5)

    async def process_checkpoints(self, target_id: UUID | None = None) -> ProcessingResultDTO:
        self.calls.append(target_id)
        return self._result


@pytest.mark.asyncio
async def test_scan_mode_without_body(client_factory):
    runner = RecordingRunner()

    async with client_factory({get_checkpoint_runner: lambda: runner}) as client:
        response = await client.post(PROCESS_CHECKPOINTS_URL)

    assert response.status_code == 200
    assert response.json() == {"processed": 2, "nudgesSent": 5}
    assert runner.calls == [None]


@pytest.mark.asyncio
async def test_target_checkpoint(client_factory):
    runner = RecordingRunner(ProcessingResultDTO(processed=1, nudges_sent=3))
    checkpoint_id = uuid4()

    async with client_factory({get_checkpoint_runner: lambda: runner}) as client:
        response = await client.post(
            PROCESS_CHECKPOINTS_URL, json={"checkpointId": str(checkpoint_id)}
        )

    assert response.status_code == 200
    assert response.json() == {"processed": 1, "nudgesSent": 3}
    assert runner.calls == [checkpoint_id]


@pytest.mark.asyncio
async def test_malformed_body_falls_back_to_scan_mode(client_factory):
    runner = RecordingRunner()

    async with client_factory({get_checkpoint_runner: lambda: runner}) as client:
        response = await client.post(
            PROCESS_CHECKPOINTS_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 200
    assert runner.calls == [None]


@pytest.mark.asyncio
async def test_invalid_checkpoint_id(client_factory):
    runner = RecordingRunner()

    async with client_factory({get_checkpoint_runner: lambda: runner}) as client:
        response = await client.post(PROCESS_CHECKPOINTS_URL, json={"checkpointId": "nope"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid checkpointId"}
    assert runner.calls == []


@pytest.mark.asyncio
async def test_missing_credentials_is_a_configuration_error(client_factory):
    def not_configured():
        raise MessagingNotConfiguredError()

    async with client_factory({get_checkpoint_runner: not_configured}) as client:
        response = await client.post(PROCESS_CHECKPOINTS_URL)

    assert response.status_code == 500
    assert response.json() == {"error": "Twilio credentials not configured"}
