import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import status

from schemas.contact_us import ContactUsMessage
from services.mail_dispatcher import (
    MailDispatcher,
    MailErrorKind,
    MailTransportError,
)
from services.mail_transport import email_domain
from services.message_builder import build_acknowledgement, build_notification
from services.validator import validate_submission

logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_MESSAGE = "Emails sent successfully!"


@dataclass
class ContactOutcome:
    status_code: int
    body: dict = field(default_factory=dict)


def _submitter_domain(payload: Any) -> Optional[str]:
    if isinstance(payload, dict) and isinstance(payload.get("email"), str):
        return email_domain(payload["email"])
    return None


class ContactRequestHandler:
    """
    Validate a contact submission and relay it to the site owner.

    The notification to the owner decides the response. When enabled, an
    acknowledgement is then sent to the submitter; its failure is logged and
    otherwise ignored. Each message gets a single delivery attempt.
    """
    def __init__(
        self,
        dispatcher: MailDispatcher,
        owner_email: str,
        owner_name: str,
        send_acknowledgement: bool = True,
        success_message: str = DEFAULT_SUCCESS_MESSAGE,
    ):
        self.dispatcher = dispatcher
        self.owner_email = owner_email
        self.owner_name = owner_name
        self.send_acknowledgement = send_acknowledgement
        self.success_message = success_message

    async def handle(self, payload: Any) -> ContactOutcome:
        domain = _submitter_domain(payload)

        errors = validate_submission(payload)
        if errors:
            logger.info(
                "Contact submission rejected email_domain=%s errors=%d", domain, len(errors)
            )
            return ContactOutcome(
                status_code=status.HTTP_400_BAD_REQUEST,
                body={"success": False, "errors": errors},
            )

        submission = ContactUsMessage(
            name=payload["name"],
            email=payload["email"],
            message=payload["message"],
        )

        try:
            await self.dispatcher.send_notification(
                build_notification(submission, self.owner_email)
            )
        except MailTransportError as exc:
            logger.warning(
                "Contact notification failed email_domain=%s reason=%s", domain, exc.kind.value
            )
            return self._failure(exc)
        except Exception:
            logger.exception("Contact notification failed email_domain=%s", domain)
            return self._failure(MailTransportError(MailErrorKind.UNKNOWN))

        logger.info("Contact notification sent email_domain=%s", domain)

        if self.send_acknowledgement:
            await self._acknowledge(submission, domain)

        return ContactOutcome(
            status_code=status.HTTP_200_OK,
            body={"success": True, "message": self.success_message},
        )

    async def _acknowledge(self, submission: ContactUsMessage, domain: Optional[str]) -> None:
        try:
            await self.dispatcher.send_acknowledgement(
                build_acknowledgement(submission, self.owner_name)
            )
        except Exception as exc:
            logger.warning(
                "Contact acknowledgement failed email_domain=%s error=%s",
                domain,
                type(exc).__name__,
            )
            return

        logger.info("Contact acknowledgement sent email_domain=%s", domain)

    @staticmethod
    def _failure(error: MailTransportError) -> ContactOutcome:
        return ContactOutcome(
            status_code=error.status_code,
            body={"success": False, "error": error.client_message},
        )
