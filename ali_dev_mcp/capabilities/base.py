"""
Base class shared by all capability modules
"""
import functools
import json
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional

import structlog
from mcp.types import GetPromptResult, PromptMessage, TextContent

from ..azure_devops_client import AzureDevOpsClient
from ..errors import RegistrationError
from ..models import ToolResult
from ..registry import CapabilityServer

logger = structlog.get_logger(__name__)


def tool_handler(error_message: str):
    """Turn any failure inside a tool handler into an ``isError`` result.

    ``error_message`` prefixes the failure text, e.g.
    ``"Error fetching test case: Failed to get access token"``.
    """

    def decorator(func: Callable[..., Awaitable[ToolResult]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> ToolResult:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error("Tool handler failed", handler=func.__name__, error=str(e))
                return ToolResult.error(f"{error_message}: {e}")

        return wrapper

    return decorator


def json_result(payload: Any) -> ToolResult:
    """Pretty-printed JSON text result"""
    return ToolResult.text(json.dumps(payload, indent=2))


def prompt_result(description: str, text: str) -> GetPromptResult:
    """Single user message prompt"""
    return GetPromptResult(
        description=description,
        messages=[
            PromptMessage(role="user", content=TextContent(type="text", text=text))
        ],
    )


class Capability(ABC):
    """A feature module that attaches tools and prompts to the shared server"""

    def __init__(self, server: CapabilityServer, client: AzureDevOpsClient):
        self.server = server
        self.client = client
        self._registered = False

    def register(self) -> None:
        """Register tools, then prompts. Allowed once per instance."""
        if self._registered:
            raise RegistrationError(f"{type(self).__name__} is already registered")
        self._registered = True
        self.register_tools()
        self.register_prompts()
        logger.info("Registered capability", capability=type(self).__name__)

    def organization_for(self, organization: Optional[str]) -> str:
        return organization or self.client.config.azure_devops_org

    @abstractmethod
    def register_tools(self) -> None:
        """Attach this module's tools"""

    @abstractmethod
    def register_prompts(self) -> None:
        """Attach this module's prompts"""
