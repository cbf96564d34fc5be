import logging
from typing import Protocol

import httpx

from src.messaging.base import MessagingProviderError, MessagingServiceBase

logger = logging.getLogger(__name__)


class TwilioConfig(Protocol):
    twilio_account_sid: str
    twilio_api_secret: str
    twilio_api_base_url: str


class TwilioMessagingService(MessagingServiceBase):
    def __init__(
        self,
        config: TwilioConfig,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._config = config
        self._http_client_class = http_client_class

    @property
    def messages_url(self) -> str:
        return (
            f"{self._config.twilio_api_base_url}/Accounts/"
            f"{self._config.twilio_account_sid}/Messages.json"
        )

    async def send(self, to: str, from_: str, body: str) -> str:
        """Send a message via the Twilio Messages API."""
        try:
            async with self._http_client_class() as client:
                response = await client.post(
                    self.messages_url,
                    auth=(self._config.twilio_account_sid, self._config.twilio_api_secret),
                    data={"To": to, "From": from_, "Body": body},
                )
        except httpx.HTTPError as e:
            raise MessagingProviderError(f"Twilio request failed: {e}") from e

        try:
            response_data = response.json()
        except ValueError:
            response_data = {}
        if not isinstance(response_data, dict):
            response_data = {}

        if response.status_code >= 400:
            error = response_data.get("message") or f"HTTP {response.status_code}"
            logger.warning(f"Twilio rejected message to {to}: {error}")
            raise MessagingProviderError(error, external_id=response_data.get("sid"))

        message_sid = response_data.get("sid")
        if not message_sid:
            raise MessagingProviderError("Twilio response did not include a message sid")
        return message_sid
