"""
Shared tool/prompt registry backed by the low-level MCP server
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

import pydantic
import structlog
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import GetPromptResult, Prompt, PromptArgument, TextContent, Tool

from .errors import RegistrationError, ValidationError
from .models import ToolResult

logger = structlog.get_logger(__name__)

ToolHandler = Callable[[Any], Awaitable[ToolResult]]
PromptHandler = Callable[[Any], GetPromptResult]


class ToolCallError(Exception):
    """Raised towards the MCP SDK so it answers with ``isError: true``"""


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[pydantic.BaseModel]
    handler: ToolHandler

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(by_alias=True),
        )


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    input_model: Type[pydantic.BaseModel]
    handler: PromptHandler

    def to_prompt(self) -> Prompt:
        arguments = [
            PromptArgument(
                name=field.alias or field_name,
                description=field.description,
                required=field.is_required(),
            )
            for field_name, field in self.input_model.model_fields.items()
        ]
        return Prompt(name=self.name, description=self.description, arguments=arguments)


def validate_arguments(
    kind: str,
    name: str,
    input_model: Type[pydantic.BaseModel],
    arguments: Optional[Dict[str, Any]]
) -> pydantic.BaseModel:
    """Validate raw arguments against an input model"""
    try:
        return input_model.model_validate(arguments or {})
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        )
        raise ValidationError(f"Invalid arguments for {kind} {name}: {problems}") from e


class CapabilityServer:
    """Server handle that capability modules attach tools and prompts to"""

    def __init__(self, name: str, version: Optional[str] = None):
        self.mcp_server = Server(name, version=version)
        self._tools: Dict[str, ToolSpec] = {}
        self._prompts: Dict[str, PromptSpec] = {}
        self._setup_handlers()

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    @property
    def prompt_names(self) -> List[str]:
        return list(self._prompts)

    def add_tool(
        self,
        name: str,
        description: str,
        input_model: Type[pydantic.BaseModel],
        handler: ToolHandler
    ) -> None:
        """Register a tool; names must be unique across all capability modules"""
        if name in self._tools:
            raise RegistrationError(f"Tool '{name}' is already registered")
        self._tools[name] = ToolSpec(name, description, input_model, handler)
        logger.debug("Registered tool", tool=name)

    def add_prompt(
        self,
        name: str,
        description: str,
        input_model: Type[pydantic.BaseModel],
        handler: PromptHandler
    ) -> None:
        """Register a prompt; names must be unique across all capability modules"""
        if name in self._prompts:
            raise RegistrationError(f"Prompt '{name}' is already registered")
        self._prompts[name] = PromptSpec(name, description, input_model, handler)
        logger.debug("Registered prompt", prompt=name)

    def list_tools(self) -> List[Tool]:
        return [spec.to_tool() for spec in self._tools.values()]

    def list_prompts(self) -> List[Prompt]:
        return [spec.to_prompt() for spec in self._prompts.values()]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolResult:
        """Validate arguments and dispatch to the tool handler"""
        spec = self._tools.get(name)
        if spec is None:
            return ToolResult.error(f"Unknown tool: {name}")

        try:
            validated = validate_arguments("tool", name, spec.input_model, arguments)
        except ValidationError as e:
            logger.warning("Rejected tool call", tool=name, error=str(e))
            return ToolResult.error(str(e))

        logger.info("Calling tool", tool=name)
        return await spec.handler(validated)

    def get_prompt(self, name: str, arguments: Optional[Dict[str, str]]) -> GetPromptResult:
        """Validate arguments and render the prompt"""
        spec = self._prompts.get(name)
        if spec is None:
            raise ValidationError(f"Unknown prompt: {name}")

        validated = validate_arguments("prompt", name, spec.input_model, arguments)
        logger.info("Rendering prompt", prompt=name)
        return spec.handler(validated)

    def _setup_handlers(self):
        """Setup MCP server handlers"""

        @self.mcp_server.list_tools()
        async def list_tools() -> List[Tool]:
            """List available tools"""
            return self.list_tools()

        @self.mcp_server.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Handle tool calls"""
            result = await self.call_tool(name, arguments)
            if result.is_error:
                # The SDK turns handler exceptions into an isError result
                raise ToolCallError(result.message)
            return result.content

        @self.mcp_server.list_prompts()
        async def list_prompts() -> List[Prompt]:
            """List available prompts"""
            return self.list_prompts()

        @self.mcp_server.get_prompt()
        async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> GetPromptResult:
            """Render a prompt"""
            return self.get_prompt(name, arguments)

    async def run(self):
        """Serve MCP over stdin/stdout until the client disconnects"""
        async with stdio_server() as (read_stream, write_stream):
            await self.mcp_server.run(
                read_stream,
                write_stream,
                self.mcp_server.create_initialization_options()
            )
