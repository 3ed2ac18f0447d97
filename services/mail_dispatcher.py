"""
Mail dispatch and failure classification.

``MailDispatcher`` makes exactly one delivery attempt per message through the
configured transport. Provider exceptions are mapped onto a small taxonomy so
the request handler can pick a response status without knowing which
transport is in use:

- authentication: the provider rejected our credentials
- envelope: a sender or recipient address was refused
- connection: the provider could not be reached or timed out
- unknown: anything else

SMTP reply codes follow RFC 5321; HTTP provider errors are mapped by status.
"""
import logging
import socket
from enum import Enum
from typing import Iterator, Optional

import aiosmtplib
import requests
from fastapi import status
from fastapi_mail.errors import ConnectionErrors
from pydantic import ValidationError

from services.mail_transport import MailTransport, email_domain
from services.message_builder import OutboundEmail

logger = logging.getLogger(__name__)


class MailErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    ENVELOPE = "envelope"
    CONNECTION = "connection"
    UNKNOWN = "unknown"


STATUS_BY_KIND = {
    MailErrorKind.AUTHENTICATION: status.HTTP_503_SERVICE_UNAVAILABLE,
    MailErrorKind.CONNECTION: status.HTTP_503_SERVICE_UNAVAILABLE,
    MailErrorKind.ENVELOPE: status.HTTP_400_BAD_REQUEST,
    MailErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

CLIENT_MESSAGES = {
    MailErrorKind.AUTHENTICATION: "Email service is temporarily unavailable. Please try again later.",
    MailErrorKind.CONNECTION: "Email service is temporarily unavailable. Please try again later.",
    MailErrorKind.ENVELOPE: "Email could not be delivered to the provided address.",
    MailErrorKind.UNKNOWN: "Error sending email",
}

SMTP_AUTH_CODES = {530, 534, 535, 538}
SMTP_ENVELOPE_CODES = {501, 550, 551, 553, 555}
SMTP_CONNECTION_CODES = {421, 454}

HTTP_AUTH_CODES = {401, 403}
HTTP_ENVELOPE_CODES = {400, 422}
HTTP_CONNECTION_CODES = {408, 429, 502, 503, 504}


class MailTransportError(Exception):
    """A message could not be delivered; ``kind`` says why."""
    def __init__(self, kind: MailErrorKind, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or f"Mail delivery failed ({kind.value})")

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @property
    def client_message(self) -> str:
        return CLIENT_MESSAGES[self.kind]


class AcknowledgementError(MailTransportError):
    """The acknowledgement to the submitter failed. Never client-visible."""


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _kind_from_smtp_code(code) -> Optional[MailErrorKind]:
    if code in SMTP_AUTH_CODES:
        return MailErrorKind.AUTHENTICATION
    if code in SMTP_ENVELOPE_CODES:
        return MailErrorKind.ENVELOPE
    if code in SMTP_CONNECTION_CODES:
        return MailErrorKind.CONNECTION
    return None


def _kind_from_http_status(status_code) -> Optional[MailErrorKind]:
    if status_code in HTTP_AUTH_CODES:
        return MailErrorKind.AUTHENTICATION
    if status_code in HTTP_ENVELOPE_CODES:
        return MailErrorKind.ENVELOPE
    if status_code in HTTP_CONNECTION_CODES:
        return MailErrorKind.CONNECTION
    return None


def _classify_one(exc: BaseException) -> Optional[MailErrorKind]:
    if isinstance(exc, aiosmtplib.SMTPAuthenticationError):
        return MailErrorKind.AUTHENTICATION
    if isinstance(
        exc,
        (
            aiosmtplib.SMTPRecipientsRefused,
            aiosmtplib.SMTPRecipientRefused,
            aiosmtplib.SMTPSenderRefused,
            ValidationError,
        ),
    ):
        return MailErrorKind.ENVELOPE
    if isinstance(
        exc,
        (
            aiosmtplib.SMTPConnectError,
            aiosmtplib.SMTPTimeoutError,
            aiosmtplib.SMTPServerDisconnected,
        ),
    ):
        return MailErrorKind.CONNECTION
    if isinstance(exc, aiosmtplib.SMTPResponseException):
        return _kind_from_smtp_code(exc.code)

    if isinstance(exc, requests.HTTPError):
        response = exc.response
        return _kind_from_http_status(response.status_code) if response is not None else None
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return MailErrorKind.CONNECTION

    if isinstance(exc, (TimeoutError, ConnectionError, socket.gaierror)):
        return MailErrorKind.CONNECTION
    return None


def classify_mail_error(exc: BaseException) -> MailErrorKind:
    """Map a transport exception (and whatever it wraps) onto ``MailErrorKind``."""
    wrapped_connection_error = False
    for item in _exception_chain(exc):
        kind = _classify_one(item)
        if kind is not None:
            return kind
        if isinstance(item, ConnectionErrors):
            wrapped_connection_error = True

    # fastapi-mail raises ConnectionErrors while connecting or logging in
    if wrapped_connection_error:
        return MailErrorKind.CONNECTION
    return MailErrorKind.UNKNOWN


class MailDispatcher:
    def __init__(self, transport: MailTransport):
        self.transport = transport

    async def _dispatch(self, email: OutboundEmail, error_cls) -> None:
        try:
            await self.transport.send(email)
        except Exception as exc:
            kind = classify_mail_error(exc)
            logger.error(
                "Mail delivery failed kind=%s reason=%s to_domains=%s error=%s: %s",
                email.kind,
                kind.value,
                [email_domain(r) for r in email.recipients],
                type(exc).__name__,
                exc,
            )
            raise error_cls(kind, f"{email.kind} delivery failed ({kind.value})") from exc

        logger.info("Mail delivered kind=%s", email.kind)

    async def send_notification(self, email: OutboundEmail) -> None:
        await self._dispatch(email, MailTransportError)

    async def send_acknowledgement(self, email: OutboundEmail) -> None:
        await self._dispatch(email, AcknowledgementError)
