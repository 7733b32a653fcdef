from __future__ import annotations

import logging
from dataclasses import dataclass

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from .config import Settings
from .errors import ConfigurationError, SendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmsResult:
    sid: str
    status: str


class SmsSender:
    """Outbound SMS through the Twilio REST API."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def get_twilio_client(self) -> Client:
        if not self.settings.twilio_account_sid or not self.settings.twilio_auth_token:
            raise ConfigurationError(
                "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
            )
        return Client(self.settings.twilio_account_sid, self.settings.twilio_auth_token)

    def _sender_kwargs(self) -> dict[str, str]:
        # A messaging service pool takes precedence over a fixed sender number.
        if self.settings.twilio_messaging_service_sid:
            return {"messaging_service_sid": self.settings.twilio_messaging_service_sid}
        if self.settings.twilio_from_number:
            return {"from_": self.settings.twilio_from_number}
        raise ConfigurationError(
            "TWILIO_MESSAGING_SERVICE_SID or TWILIO_FROM_NUMBER must be configured"
        )

    def send(self, to: str, body: str) -> SmsResult:
        client = self.get_twilio_client()
        sender = self._sender_kwargs()
        try:
            message = client.messages.create(to=to, body=body, **sender)
        except TwilioRestException as exc:
            logger.warning("Twilio rejected SMS to %s: %s (status %s)", to, exc.msg, exc.status)
            raise SendError(exc.msg or "SMS send failed") from exc
        except TwilioException as exc:
            raise SendError(str(exc) or "SMS send failed") from exc

        logger.info("SMS sent to %s sid=%s status=%s", to, message.sid, message.status)
        return SmsResult(sid=str(message.sid), status=str(message.status))
