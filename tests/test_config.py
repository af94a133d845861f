"""Tests for configuration loading."""

from vmfleet.config import Settings, get_settings, reload_settings, validate_azure_config


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Test defaults with a clean environment."""
        settings = Settings()
        assert settings.fleet_output_dir == "."
        assert settings.fleet_poll_timeout == 300
        assert settings.fleet_poll_interval == 10
        assert settings.has_service_principal is False

    def test_env_override(self, monkeypatch):
        """Test environment variables are picked up case-insensitively."""
        monkeypatch.setenv("FLEET_POLL_TIMEOUT", "60")
        monkeypatch.setenv("fleet_output_dir", "/tmp/fleet")

        settings = reload_settings()

        assert settings.fleet_poll_timeout == 60
        assert settings.fleet_output_dir == "/tmp/fleet"

    def test_safe_dict_masks_secret(self):
        """Test the client secret never appears in the safe dict."""
        settings = Settings(azure_tenant_id="t", azure_client_id="c", azure_client_secret="hunter2")
        safe = settings.get_safe_dict()
        assert safe["azure_client_secret"] == "***MASKED***"
        assert "hunter2" not in str(safe)

    def test_get_settings_cached(self):
        """Test the global instance is reused until reloaded."""
        assert get_settings() is get_settings()
        assert reload_settings() is not None


class TestValidateAzureConfig:
    """Tests for validate_azure_config."""

    def test_full_service_principal(self):
        ok, message = validate_azure_config(
            Settings(azure_tenant_id="t", azure_client_id="c", azure_client_secret="s")
        )
        assert ok
        assert "Service principal" in message

    def test_partial_service_principal(self):
        ok, message = validate_azure_config(Settings(azure_client_id="c"))
        assert not ok
        assert "Partial" in message

    def test_default_credential(self):
        ok, message = validate_azure_config(Settings())
        assert ok
        assert "DefaultAzureCredential" in message
