"""Application configuration from environment."""
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache

# Load .env from project root (parent of app/) so env vars are available everywhere
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

_project_root = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    app_name: str = "Vivimap"
    app_env: str = "development"
    debug: bool = False
    port: int = 3001

    database_url: str = f"sqlite:///{_project_root / 'vivimap.db'}"

    # No default: the server must not boot without a signing secret.
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    @field_validator("jwt_secret_key")
    @classmethod
    def require_jwt_secret(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("FATAL: JWT_SECRET_KEY is not defined in environment variables.")
        return v

    session_cookie_name: str = "token"
    session_expire_days: int = 7
    verification_code_expire_minutes: int = 5

    mailgun_api_key: str = ""
    mailgun_domain: str = ""
    mailgun_base_url: str = "https://api.mailgun.net"
    mailgun_from_email: str = "noreply@vivimap.earth"
    mailgun_from_name: str = "Vivimap"

    @field_validator("mailgun_api_key", "mailgun_domain", "mailgun_base_url", "mailgun_from_email", mode="before")
    @classmethod
    def strip_mailgun(cls, v: str) -> str:
        return (v or "").strip()

    cors_origins: list[str] = ["http://localhost:8080"]
    static_dir: str = str(_project_root / "static")

    auth_rate_limit_max: int = 10
    auth_rate_limit_window_seconds: int = 15 * 60

    exclusivity_radius_meters: float = 10.0
    enforce_exclusivity_on_create: bool = True

    scheduler_enabled: bool = True

    nominatim_base_url: str = "https://nominatim.openstreetmap.org"

    @property
    def cookie_secure(self) -> bool:
        return self.app_env == "production"

    class Config:
        env_file = str(_env_path)
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
