"""Centralized configuration management for LedgerLink.

Settings are loaded once by an entry point (the CLI or a WSGI module) and
passed explicitly into the application factory. Nothing below the entry point
reads the process environment.
"""

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlaidConfig(BaseModel):
    """Plaid API configuration settings."""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(default="", description="Plaid client ID")
    secret: str = Field(default="", description="Plaid secret key")
    public_key: str = Field(default="", description="Plaid Link public key")
    environment: Literal["sandbox", "development", "production"] = Field(
        default="sandbox", description="Plaid environment"
    )
    days_lookback: int = Field(
        default=730,
        ge=1,
        le=730,
        description="How far back transaction listing reaches, in days",
    )
    timeout_seconds: float = Field(
        default=30.0, gt=0, le=300, description="Per-request timeout for Plaid calls"
    )

    @property
    def host(self) -> str:
        """Plaid API base URL for the configured environment."""
        if self.environment == "production":
            return "https://production.plaid.com"
        if self.environment == "development":
            return "https://development.plaid.com"
        return "https://sandbox.plaid.com"


class EnrichmentConfig(BaseModel):
    """Company lookup (Clearbit) settings."""

    model_config = ConfigDict(frozen=True)

    clearbit_key: str = Field(default="", description="Clearbit API key")
    base_url: str = Field(
        default="https://company.clearbit.com",
        description="Clearbit company API base URL",
    )
    timeout_seconds: float = Field(default=5.0, gt=0, le=60)


class ServerConfig(BaseModel):
    """HTTP server settings."""

    model_config = ConfigDict(frozen=True)

    secret_key: str | None = Field(
        default=None, description="Key used to sign the session cookie"
    )
    public_folder: Path = Field(
        default=Path("client/build"),
        description="Directory holding the built single-page frontend",
    )
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=4567, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=list)
    session_lifetime_hours: float = Field(
        default=744,
        gt=0,
        description="Lifetime of a linked session and its stored credential",
    )
    require_session_for_token_exchange: bool = Field(
        default=False,
        description="Gate /get_access_token behind an authenticated session",
    )


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    cli_format_string: str = "%(message)s"
    log_to_file: bool = Field(default=False, description="Enable file logging")
    log_file_path: Path = Field(
        default=Path("logs/ledgerlink.log"), description="Path to log file"
    )
    max_file_size_mb: int = Field(
        default=50, ge=1, le=1000, description="Maximum log file size in MB"
    )
    backup_count: int = Field(
        default=5, ge=1, le=50, description="Number of log file backups to keep"
    )
    force_reconfigure: bool = False


class GatewaySettings(BaseSettings):
    """Main application settings with environment variable integration.

    Environment variables are loaded with the LEDGERLINK_ prefix.
    For nested configs, use double underscores: LEDGERLINK_PLAID__SECRET

    The unprefixed variables PLAID_CLIENT_ID, PLAID_SECRET, PLAID_PUBLIC_KEY,
    PLAID_ENV and CLEARBIT_KEY are honored when the nested section is not
    given explicitly.
    """

    plaid: PlaidConfig = Field(default_factory=PlaidConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LEDGERLINK_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    def __init__(self, **kwargs: Any):
        """Initialize settings with legacy environment variable overrides.

        Args:
            **kwargs: Additional configuration overrides
        """
        if "plaid" not in kwargs:
            plaid_config: dict[str, Any] = {}
            for field, env_name in (
                ("client_id", "PLAID_CLIENT_ID"),
                ("secret", "PLAID_SECRET"),
                ("public_key", "PLAID_PUBLIC_KEY"),
            ):
                value = os.getenv(env_name)
                if value:
                    plaid_config[field] = value

            env = os.getenv("PLAID_ENV")
            if env in ("sandbox", "development", "production"):
                plaid_config["environment"] = env

            if plaid_config:
                kwargs["plaid"] = PlaidConfig(**plaid_config)

        if "enrichment" not in kwargs:
            clearbit_key = os.getenv("CLEARBIT_KEY")
            if clearbit_key:
                kwargs["enrichment"] = EnrichmentConfig(clearbit_key=clearbit_key)

        super().__init__(**kwargs)

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: ServerConfig) -> ServerConfig:
        """Reject an empty signing key; None means one is generated at startup."""
        if v.secret_key is not None and not v.secret_key.strip():
            raise ValueError("server.secret_key cannot be blank")
        return v

    def missing_credentials(self) -> list[str]:
        """List the credential settings that are not set.

        Missing credentials are not fatal: the provider rejects the calls that
        need them, and those rejections surface as ordinary provider faults.
        """
        missing: list[str] = []
        if not self.plaid.client_id:
            missing.append("PLAID_CLIENT_ID")
        if not self.plaid.secret:
            missing.append("PLAID_SECRET")
        if not self.plaid.public_key:
            missing.append("PLAID_PUBLIC_KEY")
        if not self.enrichment.clearbit_key:
            missing.append("CLEARBIT_KEY")
        return missing

    def masked_summary(self) -> dict[str, Any]:
        """Return the effective configuration with secrets masked."""
        data = self.model_dump(mode="json")
        for section, key in (
            ("plaid", "secret"),
            ("plaid", "client_id"),
            ("plaid", "public_key"),
            ("enrichment", "clearbit_key"),
            ("server", "secret_key"),
        ):
            value = data[section].get(key)
            if value:
                data[section][key] = f"{value[:4]}***" if len(value) > 8 else "***"
        return data


_settings: GatewaySettings | None = None


def get_settings() -> GatewaySettings:
    """Get the process-wide settings instance, loading it on first use.

    Only entry points should call this; everything else receives settings
    as an argument.

    Returns:
        GatewaySettings: The configuration instance

    Raises:
        ValueError: If the configuration is invalid
    """
    global _settings

    if _settings is not None:
        return _settings

    # Legacy unprefixed variables are read from os.environ, so load .env there too
    load_dotenv(find_dotenv(usecwd=True))

    try:
        _settings = GatewaySettings()
    except Exception as e:
        raise ValueError(f"Configuration error: {e}") from e
    return _settings


def reload_settings() -> GatewaySettings:
    """Discard cached settings and load them again from the environment."""
    clear_settings_cache()
    return get_settings()


def clear_settings_cache() -> None:
    """Forget the cached settings instance."""
    global _settings
    _settings = None
