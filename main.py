from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from core.config import settings
from core.errors import register_exception_handlers
from core.logging import configure_logging
from core.mail import build_mail_transport
from services.contact_service import ContactRequestHandler
from services.mail_dispatcher import MailDispatcher

from api import general_api

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def build_contact_handler() -> ContactRequestHandler:
    """Wire the configured transport into a request handler"""
    transport = build_mail_transport(settings)
    return ContactRequestHandler(
        dispatcher=MailDispatcher(transport),
        owner_email=settings.OWNER_EMAIL,
        owner_name=settings.OWNER_NAME,
        send_acknowledgement=settings.SEND_ACKNOWLEDGEMENT,
        success_message=settings.CONTACT_SUCCESS_MESSAGE,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 App starting up (mail transport: %s)", settings.MAIL_TRANSPORT)
    app.state.contact_handler = build_contact_handler()
    yield
    logger.info("🛑 App shutting down...")


app = FastAPI(lifespan=lifespan, title=settings.APP_TITLE)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(general_api.router)


@app.get("/")
def read_root():
    return {"message": "Contact mailer running."}
