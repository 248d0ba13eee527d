"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ──────────────────────────────
    POSTGRES_USER: str = "enrollment_user"
    POSTGRES_PASSWORD: str = "enrollment_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "enrollment_db"

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for app runtime (asyncpg)."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Sync URL for Alembic migrations (psycopg2)."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ── Redis / Celery ────────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # ── SendGrid e-mail ───────────────────────
    SENDGRID_API_KEY: str = ""
    SENDGRID_API_URL: str = "https://api.sendgrid.com/v3/mail/send"
    SENDGRID_CONFIRMATION_TEMPLATE_ID: str = ""
    SENDGRID_REMINDER_TEMPLATE_ID: str = ""
    EMAIL_FROM: str = "info@loophealth.com"
    EMAIL_FROM_NAME: str = "Employee Benefits"
    EMAIL_TIMEOUT_SECONDS: float = 15.0

    # ── Enrollment defaults ───────────────────
    # Used by roster import when a row leaves the column blank (DD/MM/YYYY).
    DEFAULT_POLICY_START: str = "01/04/2024"
    DEFAULT_POLICY_END: str = "31/03/2025"
    DEFAULT_ENROLLMENT_DUE_DATE: str = "31/03/2025"
    SUM_INSURED_LAKHS: int = 10

    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    LOG_LEVEL: str = ""
    SQL_ECHO: bool = True               # only honoured in development

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
