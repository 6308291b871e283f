"""
Configuration management for the ALI Dev MCP Server
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config(BaseSettings):
    """Application configuration"""

    # Azure DevOps Configuration
    azure_devops_org: str = Field(default="hexagonppmcol")
    azure_devops_base_url: str = Field(default="https://dev.azure.com")
    azure_devops_token_scope: str = Field(default="https://app.vssps.visualstudio.com/.default")
    azure_devops_api_version: str = Field(default="7.0")
    request_timeout: int = Field(default=30)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # MCP Server Configuration
    mcp_server_name: str = Field(default="ali-dev-mcp")
    mcp_server_version: str = Field(default="1.0.0")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def organization_url(self) -> str:
        return f"{self.azure_devops_base_url.rstrip('/')}/{self.azure_devops_org}"


def get_config() -> Config:
    """Get application configuration"""
    return Config()


# Global configuration instance
config = get_config()
