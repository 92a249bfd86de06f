from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "eventdesk"
    SECRET_KEY: str = "change-me"
    SESSION_COOKIE: str = "eventdesk_session"
    SESSION_EXPIRY: int = 60 * 60 * 24 * 7  # one week
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASS: str = "admin12345"
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "Event Desk <no-reply@example.com>"
    APP_URL: str = "http://localhost:8000"
    VERCEL_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    def model_post_init(self, __context):
        if self.VERCEL_URL and self.APP_URL == "http://localhost:8000":
            self.APP_URL = f"https://{self.VERCEL_URL}"

settings = Settings()
