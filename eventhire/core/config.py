# eventhire/core/config.py
import os
from functools import lru_cache


class Settings:
    """
    Runtime configuration read from the environment.
    EMAIL_USER / EMAIL_PASS left unset means notifications are logged and skipped.
    """

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./eventhire.db")

        self.secret_key = os.getenv("SECRET_KEY", "change-me-in-production")
        self.jwt_algorithm = "HS256"
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))

        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        self.email_host = os.getenv("EMAIL_HOST", "smtp.gmail.com")
        self.email_port = int(os.getenv("EMAIL_PORT", "587"))
        self.email_user = os.getenv("EMAIL_USER")
        self.email_pass = os.getenv("EMAIL_PASS")
        self.email_from = os.getenv("EMAIL_FROM", self.email_user or "no-reply@eventhire.local")

        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.password_reset_expire_minutes = 10

        self.admin_email = os.getenv("ADMIN_EMAIL")
        self.admin_password = os.getenv("ADMIN_PASSWORD")

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_user and self.email_pass)


@lru_cache
def get_settings() -> Settings:
    return Settings()
