from abc import ABC, abstractmethod


class MessagingNotConfiguredError(Exception):
    """Raised when no messaging provider credentials are configured."""

    def __init__(self, provider: str = "Twilio") -> None:
        self.provider = provider
        super().__init__(f"{provider} credentials not configured")


class MessagingProviderError(Exception):
    """Raised when the provider refuses or fails to accept a message."""

    def __init__(self, message: str, external_id: str | None = None) -> None:
        self.external_id = external_id
        super().__init__(message)


class MessagingServiceBase(ABC):
    @abstractmethod
    async def send(self, to: str, from_: str, body: str) -> str:
        """
        Hand one message to the provider.

        Args:
            to: Recipient address, E.164 or whatsapp:E.164
            from_: Sender address in the same scheme as the recipient
            body: Message text

        Returns:
            The provider's message id

        Raises:
            MessagingProviderError: if the provider rejected the message
        """
        pass
