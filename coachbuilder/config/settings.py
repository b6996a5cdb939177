"""
Coach Builder configuration.

One Settings object, read from the environment and an optional .env file,
serves the API server, the seeding script and the command line client.

With SNOWFLAKE_MOCK_MODE=true no Snowflake account is needed.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Environment-backed settings. Names are case-insensitive.

    cors_origins is a comma-separated string; use cors_origins_list.
    """

    # API Configuration
    api_title: str = "Coach Builder API"
    api_version: str = "v1"
    admin_access_code: str = Field(
        default="ADMIN-99",
        description="Shared admin sentinel code. Compared verbatim on every admin request."
    )
    default_commission_per_workout: float = Field(
        default=2.0,
        description="Commission used when a coach record has no rate configured."
    )
    commission_override_enabled: bool = Field(
        default=False,
        description="Accept commission_amount from the request body instead of the coach's rate."
    )
    max_request_bytes: int = Field(
        default=2 * 1024 * 1024,
        description="Maximum request body size in bytes. Larger bodies are rejected with 413."
    )

    # Snowflake Configuration
    snowflake_account: str = Field(
        default="",
        description="Snowflake account identifier"
    )
    snowflake_user: str = Field(
        default="",
        description="Snowflake service account username"
    )
    snowflake_password: str = Field(
        default="",
        description="Snowflake service account password"
    )
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="Path to RSA private key file for key-pair authentication"
    )
    snowflake_private_key_base64: Optional[str] = Field(
        default=None,
        description="Base64-encoded private key (for deployment, alternative to file path)"
    )
    snowflake_database: str = Field(
        default="COACHBUILDER",
        description="Snowflake database name"
    )
    snowflake_schema: str = Field(
        default="PUBLIC",
        description="Snowflake schema name"
    )
    snowflake_warehouse: str = Field(
        default="COMPUTE_WH",
        description="Snowflake warehouse for query execution"
    )
    snowflake_role: Optional[str] = Field(
        default=None,
        description="Snowflake role to use (optional)"
    )
    snowflake_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real Snowflake connection. Enables local dev without DB."
    )

    # Client Configuration
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL the command line client talks to"
    )
    client_state_path: Path = Field(
        default=Path.home() / ".coachbuilder" / "state.json",
        description="Where the client keeps its session and custom exercises"
    )
    pdf_output_dir: Path = Field(
        default=Path("."),
        description="Directory exported PDFs are written to"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Names of settings that must be set before the server can run.

        Snowflake credentials are only required outside mock mode, which
        is why this is not a field validator.
        """
        missing = []

        if not self.admin_access_code.strip():
            missing.append("ADMIN_ACCESS_CODE")

        # Snowflake only required if not in mock mode
        if not self.snowflake_mock_mode:
            if not self.snowflake_account:
                missing.append("SNOWFLAKE_ACCOUNT")
            if not self.snowflake_user:
                missing.append("SNOWFLAKE_USER")
            # Need either password or private key
            has_key = self.snowflake_private_key_path or self.snowflake_private_key_base64
            if not self.snowflake_password and not has_key:
                missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings, read once.

    Tests change the environment and then call get_settings.cache_clear().
    """
    return Settings()
