"""Application settings and configuration.

This module defines all configuration options for the Textstore service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROGRAM_ID_BYTES = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Textstore", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./textstore.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis backs challenge replay protection when configured
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    challenge_ttl_seconds: int = Field(default=300, alias="CHALLENGE_TTL_SECONDS")

    # Program identity mixed into every derived address (hex, 32 bytes)
    program_id: str = Field(
        default="0c5e4f9b2a7d3e18b6f0a94c2d7e1b3f5a8c9d0e2f4b6a8c1d3e5f7a9b0c2d4e",
        alias="PROGRAM_ID",
    )

    # Storage deposit pricing: (overhead + space) * per-byte rate * threshold
    lamports_per_byte_year: int = Field(default=3480, alias="LAMPORTS_PER_BYTE_YEAR")
    exemption_threshold: float = Field(default=2.0, alias="EXEMPTION_THRESHOLD")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("program_id")
    @classmethod
    def _validate_program_id(cls, value: str) -> str:
        try:
            raw = bytes.fromhex(value)
        except ValueError as err:
            raise ValueError(f"PROGRAM_ID must be hex encoded: {err}") from err
        if len(raw) != PROGRAM_ID_BYTES:
            raise ValueError("PROGRAM_ID must encode exactly 32 bytes")
        return value.lower()

    @property
    def program_id_bytes(self) -> bytes:
        """Return the program identity as raw bytes."""
        return bytes.fromhex(self.program_id)


settings = Settings()  # type: ignore[call-arg]
