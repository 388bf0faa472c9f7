# backend/taskboard/core/config.py
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    app_name: str = "Taskboard"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/taskboard"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"

    # Session cookie
    session_cookie_name: str = "better-auth.session_token"
    verify_cookie_signature: bool = False
    session_expire_days: int = 7
    session_store_timeout_seconds: float = 5.0

    # Edge gate
    protected_prefixes: list[str] = ["/user", "/admin", "/dev"]
    sign_in_path: str = "/auth/sign-in"
    callback_param: str = "callbackUrl"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
