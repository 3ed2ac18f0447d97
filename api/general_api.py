from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from schemas.contact_us import (
    ContactErrorResponse,
    ContactSuccessResponse,
    ContactValidationErrorResponse,
)
from services.contact_service import ContactRequestHandler

router = APIRouter(tags=["contact"])


def get_contact_handler(request: Request) -> ContactRequestHandler:
    """Return the handler built for this process in the app lifespan."""
    return request.app.state.contact_handler


@router.post(
    "/send-email",
    response_model=ContactSuccessResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ContactValidationErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ContactErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ContactErrorResponse},
    },
)
async def send_email(
    payload: Any = Body(None),
    handler: ContactRequestHandler = Depends(get_contact_handler),
):
    outcome = await handler.handle(payload)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
