from src.config.settings import settings
from src.messaging.base import (
    MessagingNotConfiguredError,
    MessagingProviderError,
    MessagingServiceBase,
)
from src.messaging.twilio_service import TwilioMessagingService


def get_messaging_service() -> MessagingServiceBase:
    if settings.twilio_account_sid and settings.twilio_api_secret:
        return TwilioMessagingService(config=settings)
    raise MessagingNotConfiguredError()


__all__ = [
    "MessagingNotConfiguredError",
    "MessagingProviderError",
    "MessagingServiceBase",
    "get_messaging_service",
]
