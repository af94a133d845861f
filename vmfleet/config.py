"""Configuration management for vmfleet.

Loads configuration from environment variables (and an optional .env file)
with sensible defaults. Secrets are never logged or exposed.
"""

from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """vmfleet configuration settings.

    All settings can be overridden via environment variables.
    Prefix: None (uses exact variable names).
    """

    # Azure authentication
    azure_tenant_id: Optional[str] = Field(default=None, description="Azure tenant ID")
    azure_client_id: Optional[str] = Field(default=None, description="Service principal client ID")
    azure_client_secret: Optional[str] = Field(default=None, description="Service principal secret (never logged)")
    azure_subscription_id: Optional[str] = Field(
        default=None,
        description="Subscription to operate on (skips the subscription prompt)"
    )

    # Run settings
    fleet_output_dir: str = Field(default=".", description="Directory for CSV, script and log artifacts")
    fleet_log_level: str = Field(default="WARNING", description="Diagnostic logging level")
    fleet_poll_timeout: int = Field(
        default=300,
        description="Seconds to wait for a stopped VM to report PowerState/stopped"
    )
    fleet_poll_interval: int = Field(default=10, description="Seconds between power state polls")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def has_service_principal(self) -> bool:
        """True when all three service principal variables are set."""
        return all([self.azure_tenant_id, self.azure_client_id, self.azure_client_secret])

    def get_safe_dict(self) -> dict:
        """Return config as dict with secrets masked.

        Use this for logging or debugging - never exposes secrets.
        """
        data = self.model_dump()
        if data.get("azure_client_secret"):
            data["azure_client_secret"] = "***MASKED***"
        return data


def validate_azure_config(settings: Settings) -> Tuple[bool, str]:
    """Validate Azure authentication configuration.

    Returns:
        Tuple of (is_valid, message)
    """
    if settings.has_service_principal:
        return True, "Service principal authentication configured"

    if any([settings.azure_tenant_id, settings.azure_client_id, settings.azure_client_secret]):
        return False, (
            "Partial service principal credentials. Need all of: "
            "AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET"
        )

    return True, "No explicit credentials. Will use DefaultAzureCredential (Azure CLI, Managed Identity, etc.)"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Creates the instance on first call, then returns cached version.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from environment.

    Useful for testing or after environment changes.
    """
    global _settings
    _settings = None
    return get_settings()
