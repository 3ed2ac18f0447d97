"""
Mail transports.

A transport delivers one ``OutboundEmail`` per ``send`` call and raises the
provider's own exception when delivery fails. Classifying those failures is
the dispatcher's job (see ``services.mail_dispatcher``).
"""
import asyncio
import logging
from typing import Optional, Protocol

import requests
from fastapi_mail import FastMail, MessageSchema, MessageType

from services.message_builder import OutboundEmail

logger = logging.getLogger(__name__)


def email_domain(address: Optional[str]) -> Optional[str]:
    if not address or "@" not in address:
        return None
    return address.rsplit("@", 1)[-1]


class MailTransport(Protocol):
    async def send(self, email: OutboundEmail) -> None:
        ...


class FastMailTransport:
    """SMTP delivery through fastapi-mail."""
    def __init__(self, fast_mail: FastMail):
        self.fast_mail = fast_mail

    @staticmethod
    def to_message_schema(email: OutboundEmail) -> MessageSchema:
        return MessageSchema(
            subject=email.subject,
            recipients=list(email.recipients),
            body=email.html,
            subtype=MessageType.html,
            reply_to=[email.reply_to] if email.reply_to else [],
        )

    async def send(self, email: OutboundEmail) -> None:
        message = self.to_message_schema(email)
        await self.fast_mail.send_message(message)


class HttpApiTransport:
    """Transactional email provider reached over a JSON HTTP API."""
    def __init__(
        self,
        api_url: str,
        api_key: Optional[str],
        sender: str,
        timeout: float = 30,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def build_payload(self, email: OutboundEmail) -> dict:
        payload = {
            "from": self.sender,
            "to": list(email.recipients),
            "subject": email.subject,
            "html": email.html,
        }
        if email.reply_to:
            payload["reply_to"] = email.reply_to
        return payload

    def _post(self, payload: dict) -> None:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        response = requests.post(
            self.api_url, json=payload, headers=headers, timeout=self.timeout
        )
        response.raise_for_status()

    async def send(self, email: OutboundEmail) -> None:
        await asyncio.to_thread(self._post, self.build_payload(email))


class ConsoleTransport:
    """Development transport: logs the envelope instead of delivering."""
    async def send(self, email: OutboundEmail) -> None:
        logger.info(
            "[console mail] kind=%s to_domains=%s subject=%r",
            email.kind,
            [email_domain(r) for r in email.recipients],
            email.subject,
        )
        logger.debug("[console mail] body=%s", email.html)
