"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the Favorite Countries API happen here.
No module should call os.getenv() or os.environ.get() directly -- import
get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved. Outside production a missing SECRET_KEY is generated with a
      warning; in production the process refuses to start without one.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
favorites/, or client/.
"""

import logging
import secrets
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("countries.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    environment: Literal["development", "production", "test"] = "development"
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///./countries.db"

    # ------------------------------------------------------------------
    # Session / auth
    # ------------------------------------------------------------------

    session_cookie_name: str = "countries-session"
    token_expire_seconds: int = 86400

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    client_url: str = "http://localhost:8081"
    host: str = "127.0.0.1"
    port: int = 8080

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    signin_rate_limit: str = "10/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cookie_same_site(self) -> str:
        """SameSite policy for the session cookie.

        Production serves the browser client from another origin, which needs
        SameSite=None (and therefore Secure). Everything else stays Strict.
        """
        return "none" if self.is_production else "strict"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Development/test: auto-generate a random key with a warning. Sessions
        will not survive a restart.

        Production: refuse to start if SECRET_KEY is missing.

        Both: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if not self.is_production:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production. "
                    "Set SECRET_KEY in your environment or .env file, "
                    "or set ENVIRONMENT=development for local runs."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
