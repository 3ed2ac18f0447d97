from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from api.general_api import get_contact_handler
from main import app
from services.contact_service import ContactRequestHandler
from services.mail_dispatcher import MailDispatcher
from services.message_builder import OutboundEmail

OWNER_EMAIL = "owner@example.com"
OWNER_NAME = "Jane Owner"


class RecordingTransport:
    """Fake transport that records sends and can fail per message kind."""
    __test__ = False

    def __init__(self, failures: Optional[Dict[str, Exception]] = None):
        self.failures = failures or {}
        self.attempts: List[OutboundEmail] = []

    @property
    def kinds(self) -> List[str]:
        return [email.kind for email in self.attempts]

    async def send(self, email: OutboundEmail) -> None:
        self.attempts.append(email)
        error = self.failures.get(email.kind)
        if error is not None:
            raise error


@pytest.fixture
def valid_payload():
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.org",
        "message": "Hello!\nI would like to talk about engines.",
    }


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def make_handler():
    def _make(transport, send_acknowledgement=True):
        return ContactRequestHandler(
            dispatcher=MailDispatcher(transport),
            owner_email=OWNER_EMAIL,
            owner_name=OWNER_NAME,
            send_acknowledgement=send_acknowledgement,
            success_message="Emails sent successfully!",
        )
    return _make


@pytest.fixture
def client(transport, make_handler):
    handler = make_handler(transport)
    app.dependency_overrides[get_contact_handler] = lambda: handler
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
