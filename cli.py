"""CLI commands for Lockstep checkpoint processing and nudges."""

import asyncio
from uuid import UUID

import typer

from src.billing import get_usage_limit_service
from src.billing.dtos import LimitType
from src.checkpoints import get_checkpoint_runner
from src.config.logging import setup_logging
from src.guests.dtos import GuestNotFoundError
from src.messaging.base import MessagingNotConfiguredError
from src.nudges import get_nudge_gateway
from src.nudges.dtos import Channel, NudgeDeliveryError, NudgeRejectedError

app = typer.Typer(help="CLI commands for Lockstep checkpoint processing and nudges")


@app.callback()
def main():
    setup_logging()


@app.command()
def process_checkpoints(
    checkpoint_id: str = typer.Option(
        None,
        "--checkpoint-id",
        "-c",
        help="Process only this checkpoint instead of every due one",
    ),
):
    """Process due checkpoints. Meant to be run from cron."""
    target_id = UUID(checkpoint_id) if checkpoint_id else None

    try:
        runner = get_checkpoint_runner()
    except MessagingNotConfiguredError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)

    # Typer doesn't support async directly, so use asyncio.run
    result = asyncio.run(runner.process_checkpoints(target_id))

    typer.secho(f"Processed {result.processed} checkpoints", fg=typer.colors.GREEN)
    typer.secho(f"Sent {result.nudges_sent} nudges", fg=typer.colors.CYAN)
    for skipped_id in result.skipped:
        typer.secho(f"  Skipped: {skipped_id}", fg=typer.colors.YELLOW)


@app.command()
def send_nudge(
    guest_id: str = typer.Option(..., "--guest-id", "-g", help="Guest UUID"),
    event_id: str = typer.Option(..., "--event-id", "-e", help="Event UUID"),
    message: str = typer.Option(..., "--message", "-m", help="Message body"),
    channel: Channel = typer.Option(Channel.SMS, "--channel", help="sms or whatsapp"),
):
    """Send a manual nudge to one guest."""
    try:
        gateway = get_nudge_gateway()
    except MessagingNotConfiguredError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        result = asyncio.run(
            gateway.send(
                guest_id=UUID(guest_id),
                checkpoint_id=None,
                channel=channel,
                message=message,
                event_id=UUID(event_id),
            )
        )
    except (GuestNotFoundError, NudgeRejectedError) as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except NudgeDeliveryError as e:
        typer.secho(f"Failed to send message: {e.details}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if result.already_sent:
        typer.secho(f"Nudge already sent: {result.nudge_id}", fg=typer.colors.YELLOW)
        return

    typer.secho("Nudge sent!", fg=typer.colors.GREEN)
    typer.secho(f"  Nudge ID: {result.nudge_id}", fg=typer.colors.CYAN)
    typer.secho(f"  Message SID: {result.external_id}", fg=typer.colors.CYAN)


@app.command()
def check_limit(
    event_id: str = typer.Option(..., "--event-id", "-e", help="Event UUID"),
    user_id: str = typer.Option(..., "--user-id", "-u", help="Organiser UUID"),
    limit_type: LimitType = typer.Option(LimitType.NUDGES, "--type", "-t", help="guests or nudges"),
):
    """Show how much of an event's guest or nudge quota is used."""
    service = get_usage_limit_service()
    result = asyncio.run(service.check_limit(UUID(event_id), UUID(user_id), limit_type))

    color = typer.colors.GREEN if result.allowed else typer.colors.RED
    typer.secho("Allowed" if result.allowed else "Limit reached", fg=color)
    if result.is_unlimited:
        typer.secho(f"  Used: {result.used} (unlimited)", fg=typer.colors.BLUE)
    else:
        typer.secho(f"  Used: {result.used} / {result.limit}", fg=typer.colors.BLUE)
        typer.secho(f"  Remaining: {int(result.remaining)}", fg=typer.colors.BLUE)
    if result.suggested_tier:
        typer.secho(f"  Upgrade to: {result.suggested_tier.value}", fg=typer.colors.MAGENTA)


if __name__ == "__main__":
    app()
