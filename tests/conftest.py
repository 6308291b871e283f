"""
Test configuration and fixtures
"""
import pytest
from unittest.mock import MagicMock

from ali_dev_mcp.azure_devops_client import AzureDevOpsClient
from ali_dev_mcp.config import Config
from ali_dev_mcp.registry import CapabilityServer


def steps_markup(*fragments: str) -> str:
    """Build a Microsoft.VSTS.TCM.Steps document with one parameterizedString per fragment"""
    strings = "".join(
        f'<parameterizedString isformatted="true">&lt;DIV&gt;&lt;P&gt;{fragment}&lt;/P&gt;&lt;/DIV&gt;</parameterizedString>'
        for fragment in fragments
    )
    return f'<steps id="0" last="{len(fragments)}"><step id="2" type="ActionStep">{strings}<description/></step></steps>'


@pytest.fixture
def mock_config():
    """Configuration for testing"""
    return Config(
        azure_devops_org="test-org",
        azure_devops_base_url="https://dev.azure.com",
        azure_devops_token_scope="https://test.scope/.default",
        azure_devops_api_version="7.0",
        request_timeout=5,
    )


@pytest.fixture
def sample_steps_markup():
    """Steps field of a two-step test case"""
    return steps_markup("Open app", "1. App opens", "Click save", "Saved")


@pytest.fixture
def mock_azure_client(mock_config):
    """Mock Azure DevOps client"""
    client = MagicMock(spec=AzureDevOpsClient)
    client.config = mock_config
    return client


@pytest.fixture
def capability_server():
    """Empty server handle"""
    return CapabilityServer("test-server", version="0.0.1")


@pytest.fixture
def make_steps_markup():
    """Factory for steps documents"""
    return steps_markup
