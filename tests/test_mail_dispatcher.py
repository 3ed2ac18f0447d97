import asyncio
import socket

import aiosmtplib
import pytest
import requests
from fastapi_mail.errors import ConnectionErrors

from conftest import RecordingTransport
from services.mail_dispatcher import (
    AcknowledgementError,
    MailDispatcher,
    MailErrorKind,
    MailTransportError,
    classify_mail_error,
)
from services.mail_transport import FastMailTransport
from services.message_builder import ACKNOWLEDGEMENT, NOTIFICATION, OutboundEmail


def _http_error(status_code):
    response = requests.Response()
    response.status_code = status_code
    return requests.HTTPError(f"{status_code} error", response=response)


def _wrapped_by_fastapi_mail(inner):
    try:
        try:
            raise inner
        except Exception as error:
            raise ConnectionErrors(
                f"Exception raised {error}, check your credentials or email service configuration"
            )
    except ConnectionErrors as wrapped:
        return wrapped


def _email(kind=NOTIFICATION):
    return OutboundEmail(
        recipients=["owner@example.com"],
        subject="New Message from Ada",
        html="<p>hi</p>",
        reply_to="ada@example.org",
        kind=kind,
    )


@pytest.mark.parametrize(
    "exc, expected",
    [
        (aiosmtplib.SMTPAuthenticationError(535, "5.7.8 Bad credentials"), MailErrorKind.AUTHENTICATION),
        (aiosmtplib.SMTPResponseException(530, "Authentication required"), MailErrorKind.AUTHENTICATION),
        (aiosmtplib.SMTPSenderRefused(553, "Sender rejected", "noreply@example.com"), MailErrorKind.ENVELOPE),
        (aiosmtplib.SMTPRecipientRefused(550, "No such user", "ghost@example.com"), MailErrorKind.ENVELOPE),
        (
            aiosmtplib.SMTPRecipientsRefused(
                [aiosmtplib.SMTPRecipientRefused(550, "No such user", "ghost@example.com")]
            ),
            MailErrorKind.ENVELOPE,
        ),
        (aiosmtplib.SMTPResponseException(501, "Bad address syntax"), MailErrorKind.ENVELOPE),
        (aiosmtplib.SMTPConnectError("Connection refused"), MailErrorKind.CONNECTION),
        (aiosmtplib.SMTPServerDisconnected("Server disconnected"), MailErrorKind.CONNECTION),
        (aiosmtplib.SMTPTimeoutError("Timed out"), MailErrorKind.CONNECTION),
        (aiosmtplib.SMTPResponseException(421, "Service not available"), MailErrorKind.CONNECTION),
        (aiosmtplib.SMTPResponseException(552, "Storage exceeded"), MailErrorKind.UNKNOWN),
        (_http_error(401), MailErrorKind.AUTHENTICATION),
        (_http_error(403), MailErrorKind.AUTHENTICATION),
        (_http_error(422), MailErrorKind.ENVELOPE),
        (_http_error(503), MailErrorKind.CONNECTION),
        (_http_error(500), MailErrorKind.UNKNOWN),
        (requests.ConnectionError("dns failure"), MailErrorKind.CONNECTION),
        (requests.Timeout("read timed out"), MailErrorKind.CONNECTION),
        (TimeoutError(), MailErrorKind.CONNECTION),
        (ConnectionRefusedError(), MailErrorKind.CONNECTION),
        (socket.gaierror(-2, "Name or service not known"), MailErrorKind.CONNECTION),
        (RuntimeError("boom"), MailErrorKind.UNKNOWN),
    ],
)
def test_classify_mail_error(exc, expected):
    assert classify_mail_error(exc) is expected


def test_classify_looks_through_fastapi_mail_wrapper():
    wrapped = _wrapped_by_fastapi_mail(aiosmtplib.SMTPAuthenticationError(535, "Bad credentials"))
    assert classify_mail_error(wrapped) is MailErrorKind.AUTHENTICATION


def test_unexplained_fastapi_mail_connection_error_is_connectivity():
    wrapped = _wrapped_by_fastapi_mail(RuntimeError("unexpected"))
    assert classify_mail_error(wrapped) is MailErrorKind.CONNECTION


def test_address_rejected_while_building_provider_message_is_envelope():
    email = OutboundEmail(recipients=["not an address"], subject="s", html="<p></p>")
    with pytest.raises(Exception) as info:
        FastMailTransport.to_message_schema(email)
    assert classify_mail_error(info.value) is MailErrorKind.ENVELOPE


def test_send_notification_delivers_once():
    transport = RecordingTransport()
    asyncio.run(MailDispatcher(transport).send_notification(_email()))
    assert transport.kinds == [NOTIFICATION]


def test_send_notification_raises_classified_error():
    cause = aiosmtplib.SMTPAuthenticationError(535, "Bad credentials")
    transport = RecordingTransport(failures={NOTIFICATION: cause})

    with pytest.raises(MailTransportError) as info:
        asyncio.run(MailDispatcher(transport).send_notification(_email()))

    assert not isinstance(info.value, AcknowledgementError)
    assert info.value.kind is MailErrorKind.AUTHENTICATION
    assert info.value.status_code == 503
    assert info.value.__cause__ is cause
    assert len(transport.attempts) == 1


def test_send_acknowledgement_raises_acknowledgement_error():
    transport = RecordingTransport(failures={ACKNOWLEDGEMENT: requests.Timeout("slow")})

    with pytest.raises(AcknowledgementError) as info:
        asyncio.run(MailDispatcher(transport).send_acknowledgement(_email(ACKNOWLEDGEMENT)))

    assert info.value.kind is MailErrorKind.CONNECTION


def test_client_message_hides_provider_details():
    transport = RecordingTransport(
        failures={NOTIFICATION: aiosmtplib.SMTPResponseException(554, "internal relay host 10.0.0.5 said no")}
    )

    with pytest.raises(MailTransportError) as info:
        asyncio.run(MailDispatcher(transport).send_notification(_email()))

    assert info.value.kind is MailErrorKind.UNKNOWN
    assert info.value.status_code == 500
    assert "10.0.0.5" not in info.value.client_message
