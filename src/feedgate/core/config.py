"""FeedGate settings.

Every value can be set through a `FEEDGATE_`-prefixed environment variable
or a `.env` file in the working directory. Values are read and validated once
per process; see `get_settings`.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production-use-openssl-rand-hex-32"


class Settings(BaseSettings):
    """Validated FeedGate configuration.

    List-valued settings (`cors_origins`, `previous_secret_keys`) accept
    comma-separated strings so they can come straight from the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FEEDGATE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "FeedGate"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 1

    # Credential store
    database_url: str = "sqlite+aiosqlite:///./fg_data/feedgate.db"
    db_echo: bool = False

    # Tokens and passwords
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Secret key for session token signing",
    )
    secret_key_id: str = Field(
        default="k1",
        description="Key id written into the header of newly issued tokens",
    )
    previous_secret_keys: Annotated[dict[str, str], NoDecode] = Field(
        default_factory=dict,
        description="Retired signing keys still accepted for verification, by key id",
    )
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    password_min_length: int = 5

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(default=["*"])
    cors_allow_methods: list[str] = Field(
        default=["OPTIONS", "GET", "POST", "PUT", "PATCH", "DELETE"]
    )
    cors_allow_headers: list[str] = Field(default=["Content-Type", "Authorization"])

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("previous_secret_keys", mode="before")
    @classmethod
    def parse_previous_secret_keys(cls, v: str | dict[str, str]) -> dict[str, str]:
        """Parse retired keys from a comma-separated ``kid:secret`` list or a mapping."""
        if isinstance(v, str):
            keys: dict[str, str] = {}
            for item in v.split(","):
                item = item.strip()
                if not item:
                    continue
                kid, sep, secret = item.partition(":")
                if not sep or not kid or not secret:
                    raise ValueError(f"Expected 'kid:secret', got {item!r}")
                keys[kid.strip()] = secret.strip()
            return keys
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == DEFAULT_SECRET_KEY


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, reading the environment on first call.

    `get_settings.cache_clear()` forces a re-read.
    """
    return Settings()
