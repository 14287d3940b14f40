"""Application configuration using Pydantic Settings."""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are validated at startup. Invalid values cause the
    application to fail fast with clear error messages.
    """

    # API Settings
    api_title: str = Field(default="Federated Search API", description="API title")
    api_version: str = Field(default="1.0.0", description="API version")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    # Search Engine (Typesense) Settings
    typesense_host: str = Field(
        default="localhost",
        min_length=1,
        description="Search engine host name",
    )
    typesense_port: int = Field(
        default=443,
        ge=1,
        le=65535,
        description="Search engine port",
    )
    typesense_protocol: str = Field(
        default="https",
        description="Search engine protocol (http, https)",
    )
    typesense_api_key: SecretStr | None = Field(
        default=None,
        description="Search engine API key",
    )
    typesense_connection_timeout: float = Field(
        default=5.0,
        gt=0.0,
        description="Search engine connection timeout in seconds",
    )

    # Authoritative Store (Supabase REST) Settings
    supabase_url: str = Field(
        default="http://localhost:54321",
        min_length=1,
        description="Base URL of the Supabase project",
    )
    supabase_anon_key: SecretStr | None = Field(
        default=None,
        description="Anonymous (public) API key used for unauthenticated callers",
    )
    supabase_service_key: SecretStr | None = Field(
        default=None,
        description="Service role key used for service_role callers",
    )
    store_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Store request timeout in seconds",
    )

    # Authentication Settings
    jwt_secret: SecretStr | None = Field(
        default=None,
        description="Shared secret used to verify caller bearer tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_audience: str = Field(
        default="authenticated",
        description="Expected token audience (empty string disables the check)",
    )

    # Ranking Settings
    text_match_buckets: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of relevance buckets used to group near-tie text matches",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("typesense_protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Ensure the engine protocol is one httpx can speak."""
        valid_protocols = {"http", "https"}
        v_lower = v.lower()
        if v_lower not in valid_protocols:
            raise ValueError(
                f"typesense_protocol must be one of {valid_protocols}, got '{v}'"
            )
        return v_lower

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Strip trailing slashes so REST paths join cleanly."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("supabase_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"log_level must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @property
    def typesense_base_url(self) -> str:
        """Base URL of the search engine REST API."""
        return f"{self.typesense_protocol}://{self.typesense_host}:{self.typesense_port}"

    @property
    def store_rest_url(self) -> str:
        """Base URL of the store's REST interface."""
        return f"{self.supabase_url}/rest/v1"


# Global settings instance
# Initialized lazily on first access; fails fast if configuration is invalid
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings: The application settings

    Raises:
        ValueError: If settings validation fails
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# Convenience function to reload settings (useful for testing)
def reload_settings() -> Settings:
    """Reload settings from environment.

    Returns:
        Settings: The reloaded application settings
    """
    global _settings
    _settings = Settings()
    return _settings
