"""Unit tests for TwilioMessagingService, mocking the HTTP client."""

import httpx
import pytest

from src.messaging.base import MessagingProviderError
from src.messaging.twilio_service import TwilioMessagingService

# =============================================================================
# Mock HTTP infrastructure
# =============================================================================

ACCOUNT_SID = "AC00000000000000000000000000000000"
MESSAGES_URL = f"https://api.twilio.com/2010-04-01/Accounts/{ACCOUNT_SID}/Messages.json"


class MockResponse:
    def __init__(self, *, json_data=None, status_code=201):
        self._json_data = json_data
        self.status_code = status_code

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON body")
        return self._json_data


class MockHttpClient:
    """
    Replaces httpx.AsyncClient as the http_client_class.

    The service calls self._http_client_class() and uses the result as an
    async context manager, so __call__ returns self.
    """

    def __init__(self, response: MockResponse | None = None, error: Exception | None = None):
        self.post_calls: list[dict] = []
        self._response = response or MockResponse(json_data={"sid": "SM123", "status": "queued"})
        self._error = error

    async def post(self, url: str, **kwargs) -> MockResponse:
        self.post_calls.append({"url": url, **kwargs})
        if self._error:
            raise self._error
        return self._response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass

    def __call__(self):
        return self


class MockConfig:
    twilio_account_sid = ACCOUNT_SID
    twilio_api_secret = "secret"
    twilio_api_base_url = "https://api.twilio.com/2010-04-01"


# =============================================================================
# Tests
# =============================================================================


@pytest.mark.asyncio
async def test_send_posts_form_with_basic_auth():
    client = MockHttpClient()
    service = TwilioMessagingService(config=MockConfig(), http_client_class=client)

    message_sid = await service.send(to="+61400000001", from_="+15005550006", body="Hi")

    assert message_sid == "SM123"
    call = client.post_calls[0]
    assert call["url"] == MESSAGES_URL
    assert call["auth"] == (ACCOUNT_SID, "secret")
    assert call["data"] == {"To": "+61400000001", "From": "+15005550006", "Body": "Hi"}


@pytest.mark.asyncio
async def test_provider_rejection_raises_with_message():
    client = MockHttpClient(
        MockResponse(json_data={"code": 21211, "message": "Invalid 'To' Phone Number"}, status_code=400)
    )
    service = TwilioMessagingService(config=MockConfig(), http_client_class=client)

    with pytest.raises(MessagingProviderError) as exc_info:
        await service.send(to="+6140", from_="+15005550006", body="Hi")

    assert str(exc_info.value) == "Invalid 'To' Phone Number"


@pytest.mark.asyncio
async def test_provider_error_without_body_uses_status_code():
    client = MockHttpClient(MockResponse(status_code=503))
    service = TwilioMessagingService(config=MockConfig(), http_client_class=client)

    with pytest.raises(MessagingProviderError) as exc_info:
        await service.send(to="+61400000001", from_="+15005550006", body="Hi")

    assert str(exc_info.value) == "HTTP 503"


@pytest.mark.asyncio
async def test_network_error_raises_provider_error():
    client = MockHttpClient(error=httpx.ConnectError("connection refused"))
    service = TwilioMessagingService(config=MockConfig(), http_client_class=client)

    with pytest.raises(MessagingProviderError):
        await service.send(to="+61400000001", from_="+15005550006", body="Hi")


@pytest.mark.asyncio
async def test_missing_sid_raises_provider_error():
    client = MockHttpClient(MockResponse(json_data={"status": "queued"}))
    service = TwilioMessagingService(config=MockConfig(), http_client_class=client)

    with pytest.raises(MessagingProviderError):
        await service.send(to="+61400000001", from_="+15005550006", body="Hi")
