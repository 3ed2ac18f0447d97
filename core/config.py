from pydantic_settings import BaseSettings
from pydantic import EmailStr
from typing import List, Literal, Optional

class Settings(BaseSettings):
    # 1️⃣ App
    APP_TITLE: str = "Contact Form Mailer"
    LOG_LEVEL: str = "INFO"

    # frontend origins
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]

    # 2️⃣ Mail transport: "smtp" (fastapi-mail), "api" (HTTP provider) or "console"
    MAIL_TRANSPORT: Literal["smtp", "api", "console"] = "smtp"

    # 3️⃣ SMTP config
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: EmailStr = "noreply@example.com"
    MAIL_FROM_NAME: str = "Contact Form"
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    USE_CREDENTIALS: bool = True
    VALIDATE_CERTS: bool = True
    MAIL_TIMEOUT: int = 60

    # 4️⃣ HTTP API provider
    MAIL_API_URL: str = "https://api.resend.com/emails"
    MAIL_API_KEY: Optional[str] = None

    # 5️⃣ Contact form
    OWNER_EMAIL: EmailStr = "owner@example.com"
    OWNER_NAME: str = "Site Owner"
    SEND_ACKNOWLEDGEMENT: bool = True
    CONTACT_SUCCESS_MESSAGE: str = "Emails sent successfully!"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # optional, for safety

settings = Settings()
