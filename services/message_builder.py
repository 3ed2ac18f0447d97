import html
import re
from dataclasses import dataclass, field
from typing import List, Optional

from schemas.contact_us import ContactUsMessage

NOTIFICATION = "notification"
ACKNOWLEDGEMENT = "acknowledgement"

_NEWLINES = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class OutboundEmail:
    """Provider-neutral email; the sender address belongs to the transport."""
    recipients: List[str]
    subject: str
    html: str
    reply_to: Optional[str] = None
    kind: str = field(default=NOTIFICATION)


def escape_text(value: str) -> str:
    return html.escape(value, quote=True)


def escape_multiline(value: str) -> str:
    # escape first so the inserted <br> tags survive
    return _NEWLINES.sub("<br>", escape_text(value))


def header_safe(value: str) -> str:
    return _NEWLINES.sub(" ", value)


def build_notification(submission: ContactUsMessage, owner_email: str) -> OutboundEmail:
    name = escape_text(submission.name)
    email = escape_text(submission.email)
    message = escape_multiline(submission.message)

    body = f"""
    <div style="font-family: Arial, sans-serif; padding: 20px; background-color: #f4f4f4; border-radius: 10px;">
        <h2 style="color: #333;">New Message from {name}</h2>
        <p><strong>Sender:</strong> {email}</p>
        <p><strong>Message:</strong></p>
        <p style="background-color: #fff; padding: 10px; border-radius: 5px; border: 1px solid #ccc;">{message}</p>
    </div>
    """

    return OutboundEmail(
        recipients=[owner_email],
        subject=header_safe(f"New Message from {submission.name}"),
        html=body,
        reply_to=submission.email,
        kind=NOTIFICATION,
    )


def build_acknowledgement(submission: ContactUsMessage, owner_name: str) -> OutboundEmail:
    name = escape_text(submission.name)
    signature = escape_text(owner_name)

    body = f"""
    <div style="font-family: Arial, sans-serif; padding: 20px; background-color: #f4f4f4;">
        <h2 style="color: #333;">Thank you for your message, {name}!</h2>
        <p>We have received your message and will get back to you shortly.</p>
        <p>Best regards,<br>{signature}</p>
    </div>
    """

    return OutboundEmail(
        recipients=[submission.email],
        subject=header_safe(f"Re: New Message from {owner_name}"),
        html=body,
        kind=ACKNOWLEDGEMENT,
    )
