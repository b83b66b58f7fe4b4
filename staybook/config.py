import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "StayBook")
    # Core settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # Auth & Session (tokens are minted for principals of the identity provider)
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "staybook_session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./staybook.db")
    AUTO_CREATE_SCHEMA: bool = os.getenv("AUTO_CREATE_SCHEMA", "true").lower() == "true"

    # Money
    CURRENCY: str = os.getenv("CURRENCY", "USD").upper()

    # Mail Settings (Mailgun) used to deliver notifications
    MAIL_FROM: str = os.getenv("MAIL_FROM", "noreply@staybook.local")
    MAILGUN_API_KEY: str = os.getenv("MAILGUN_API_KEY", "")
    MAILGUN_DOMAIN: str = os.getenv("MAILGUN_DOMAIN", "")
    NOTIFICATION_EMAIL_ENABLE: bool = os.getenv("NOTIFICATION_EMAIL_ENABLE", "false").lower() == "true"
    NOTIFICATION_EMAIL_BATCH: int = int(os.getenv("NOTIFICATION_EMAIL_BATCH", "50"))

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_BOOKINGS: str = os.getenv("RATE_LIMIT_BOOKINGS", "20/minute")

settings = Settings()
