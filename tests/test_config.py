"""
Tests for configuration loading
"""
from ali_dev_mcp.config import Config, get_config


class TestConfig:
    """Test environment driven configuration"""

    def test_defaults(self, monkeypatch):
        for name in ("AZURE_DEVOPS_ORG", "AZURE_DEVOPS_BASE_URL", "REQUEST_TIMEOUT", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Config(_env_file=None)

        assert settings.azure_devops_org == "hexagonppmcol"
        assert settings.azure_devops_api_version == "7.0"
        assert settings.request_timeout == 30
        assert settings.mcp_server_name == "ali-dev-mcp"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("AZURE_DEVOPS_ORG", "contoso")
        monkeypatch.setenv("REQUEST_TIMEOUT", "12")
        monkeypatch.setenv("LOG_FORMAT", "console")

        settings = get_config()

        assert settings.azure_devops_org == "contoso"
        assert settings.request_timeout == 12
        assert settings.log_format == "console"

    def test_organization_url(self):
        settings = Config(azure_devops_org="contoso", azure_devops_base_url="https://dev.azure.com/")

        assert settings.organization_url == "https://dev.azure.com/contoso"

    def test_unknown_environment_keys_ignored(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("AZURE_DEVOPS_ORG=from-file\nSOMETHING_ELSE=1\n")

        settings = Config(_env_file=env_file)

        assert not hasattr(settings, "something_else")
