from fastapi_mail import ConnectionConfig, FastMail

from core.config import Settings
from services.mail_transport import (
    ConsoleTransport,
    FastMailTransport,
    HttpApiTransport,
    MailTransport,
)


def build_connection_config(settings: Settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_STARTTLS=settings.MAIL_STARTTLS,
        MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
        USE_CREDENTIALS=settings.USE_CREDENTIALS,
        VALIDATE_CERTS=settings.VALIDATE_CERTS,
        TIMEOUT=settings.MAIL_TIMEOUT,
    )


def build_mail_transport(settings: Settings) -> MailTransport:
    """Pick the transport named by MAIL_TRANSPORT."""
    if settings.MAIL_TRANSPORT == "console":
        return ConsoleTransport()

    if settings.MAIL_TRANSPORT == "api":
        return HttpApiTransport(
            api_url=settings.MAIL_API_URL,
            api_key=settings.MAIL_API_KEY,
            sender=f"{settings.MAIL_FROM_NAME} <{settings.MAIL_FROM}>",
            timeout=settings.MAIL_TIMEOUT,
        )

    return FastMailTransport(FastMail(build_connection_config(settings)))
