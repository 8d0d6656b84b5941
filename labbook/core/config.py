# labbook/core/config.py
import logging
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = "development"
    log_level: str = Field(default="INFO", description="Root logging level")

    # Storage
    database_url: str = Field(
        default="sqlite:///./labbook.db",
        description="SQLAlchemy database URL",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for the read cache; in-process memory when unset",
    )
    booking_cache_ttl_seconds: int = Field(default=60, ge=0)

    # Scheduling
    timezone: str = Field(
        default="UTC",
        description="IANA zone used for local-day windows and weekly buckets",
    )
    edit_setup_minutes: int = Field(
        default=15,
        ge=0,
        description="Setup overhead added when deriving duration in the edit flow",
    )
    quick_setup_minutes: int = Field(
        default=0,
        ge=0,
        description="Setup overhead added when deriving duration in the quick-booking flow",
    )
    enforce_instrument_exclusivity: bool = Field(
        default=False,
        description="Reject bookings that overlap another active booking on the same instrument",
    )
    strict_versioning: bool = Field(
        default=False,
        description="Require expected_version on updates and reject stale writes",
    )
    auto_complete_enabled: bool = Field(
        default=False,
        description="Allow in-progress bookings past their end to be marked completed",
    )

    # Email
    email_enabled: bool = True
    resend_api_key: Optional[SecretStr] = None
    from_email: str = f"{BRAND_NAME} <noreply@lab.local>"
    frontend_url: str = "http://localhost:5173"

    is_testing: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def email_provider(self) -> Literal["console", "resend"]:
        if self.resend_api_key and self.resend_api_key.get_secret_value():
            return "resend"
        return "console"


settings = Settings()
