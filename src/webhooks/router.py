import base64
import hashlib
import hmac
import logging
from typing import Protocol
from urllib.parse import parse_qsl
from xml.sax.saxutils import escape

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from src.config.settings import settings
from src.guests.repository.guest_directory import SqlGuestDirectory
from src.nudges.repository.nudge_store import SqlNudgeStore
from src.webhooks import urls
from src.webhooks.handlers import DeliveryStatusHandler, InboundMessageHandler
from src.webhooks.schema import TwilioWebhookPayload

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Protocols (interfaces) for dependency injection
# =============================================================================


class WebhookVerifier(Protocol):
    """Protocol for webhook signature verification."""

    def __call__(self, url: str, params: dict[str, str], signature: str) -> None:
        """Raise if the signature does not match the request."""
        ...


# =============================================================================
# Default implementations
# =============================================================================


class VerifierConfig(Protocol):
    twilio_auth_token: str


class TwilioSignatureVerifier:
    """
    Twilio request validation: HMAC-SHA1 over the full URL followed by every
    POST parameter (sorted by name, key then value), base64 encoded.
    """

    def __init__(self, config: VerifierConfig = settings):
        self._config = config

    def compute_signature(self, url: str, params: dict[str, str]) -> str:
        data = url + "".join(f"{key}{params[key]}" for key in sorted(params))
        digest = hmac.new(
            self._config.twilio_auth_token.encode("utf-8"), data.encode("utf-8"), hashlib.sha1
        ).digest()
        return base64.b64encode(digest).decode("utf-8")

    def __call__(self, url: str, params: dict[str, str], signature: str) -> None:
        if not self._config.twilio_auth_token:
            raise ValueError("Twilio auth token not configured")

        expected = self.compute_signature(url, params)
        if not hmac.compare_digest(expected, signature):
            raise HTTPException(status_code=401, detail="Invalid signature")


def twiml(message: str | None = None) -> Response:
    if message is None:
        content = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'
    else:
        content = (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f"<Response><Message>{escape(message)}</Message></Response>"
        )
    return Response(content=content, media_type="text/xml")


# =============================================================================
# Dependency providers (can be overridden in tests)
# =============================================================================


def get_webhook_verifier() -> WebhookVerifier:
    """Factory for webhook verifier. Override in tests."""
    return TwilioSignatureVerifier(config=settings)


def get_delivery_status_handler() -> DeliveryStatusHandler:
    return DeliveryStatusHandler(SqlNudgeStore())


def get_inbound_message_handler() -> InboundMessageHandler:
    return InboundMessageHandler(SqlGuestDirectory())


# =============================================================================
# Webhook endpoint
# =============================================================================


@router.post(urls.TWILIO_WEBHOOK_URL)
async def twilio_webhook(
    request: Request,
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
    status_handler: DeliveryStatusHandler = Depends(get_delivery_status_handler),
    inbound_handler: InboundMessageHandler = Depends(get_inbound_message_handler),
) -> Response:
    """
    Handle Twilio status callbacks and inbound messages.

    Status callbacks carry MessageSid and MessageStatus; anything else is
    treated as an inbound message and checked for STOP/START/HELP keywords.
    """
    body = await request.body()
    params = dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))

    url = settings.twilio_webhook_url or str(request.url)
    try:
        verifier(url, params, request.headers.get("X-Twilio-Signature", ""))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Webhook verification error: {e}")
        raise HTTPException(status_code=401, detail="Invalid signature")

    payload = TwilioWebhookPayload.model_validate(params)

    if payload.is_status_callback:
        await status_handler.update_status(payload.message_sid, payload.message_status)
        return twiml()

    if not payload.sender_phone:
        logger.warning("Received webhook without sender")
        return twiml()

    reply = await inbound_handler.handle(payload.sender_phone, payload.command)
    return twiml(reply)
