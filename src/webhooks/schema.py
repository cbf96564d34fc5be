from pydantic import BaseModel, ConfigDict, Field, field_validator


class TwilioWebhookPayload(BaseModel):
    """Form fields Twilio posts for inbound messages and status callbacks."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_sid: str = Field(default="", alias="MessageSid")
    message_status: str = Field(default="", alias="MessageStatus")
    from_: str = Field(default="", alias="From")
    to: str = Field(default="", alias="To")
    body: str = Field(default="", alias="Body")

    @field_validator("body", mode="before")
    @classmethod
    def strip_body(cls, v: str | None) -> str:
        return (v or "").strip()

    @property
    def is_status_callback(self) -> bool:
        # Inbound messages report "received"
        return bool(self.message_sid and self.message_status) and self.message_status != "received"

    @property
    def sender_phone(self) -> str:
        """Sender number without the whatsapp: scheme."""
        return self.from_.removeprefix("whatsapp:")

    @property
    def command(self) -> str:
        return self.body.upper()
