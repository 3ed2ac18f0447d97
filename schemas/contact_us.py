from pydantic import BaseModel, Field
from typing import List

from services.validator import EMAIL_PATTERN, MESSAGE_MAX_LENGTH, NAME_MAX_LENGTH

class ContactUsMessage(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Full name (1–100 characters)")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Submitter address, reply-to for the notification")
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH, description="Message (1–2000 characters)")


class ContactSuccessResponse(BaseModel):
    success: bool = True
    message: str


class ContactValidationErrorResponse(BaseModel):
    success: bool = False
    errors: List[str]


class ContactErrorResponse(BaseModel):
    success: bool = False
    error: str
