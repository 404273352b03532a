from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "FabriFlow"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "localhost"
    APP_DATABASE_DSN: str = "sqlite:////tmp/fabriflow.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Remote FabriFlow REST backend
    API_BASE_URL: str = "https://fabriflow-be.fly.dev"
    API_TIMEOUT_SECONDS: float = 30.0

    # Session cookie
    SESSION_SECRET: str = "fabriflow-dev-session-secret-change-me-in-production"
    SESSION_COOKIE_NAME: str = "__fabriflow_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7
    SESSION_COOKIE_SECURE: bool = False

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Rate limiting
    RATE_LIMIT_LOGIN_PER_MINUTE: int = 10

    # Multi-invoice payment dialog
    PAYMENT_ALLOCATION_TOLERANCE: Decimal = Decimal("0.01")
    PAYMENT_CLOSE_POLICY: str = "always"  # "always" or "on_success"
    PAYMENT_ENFORCE_INVOICE_CAP: bool = False
    PAYMENT_DIALOG_TTL_MINUTES: int = 60

    @property
    def version(self) -> str:
        return self.APP_VERSION

    @property
    def close_on_failure(self) -> bool:
        return self.PAYMENT_CLOSE_POLICY != "on_success"


settings = Settings()
