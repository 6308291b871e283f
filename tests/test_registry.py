"""
Tests for the tool/prompt registry
"""
import pytest
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

from mcp import types
from pydantic import Field

from ali_dev_mcp.errors import RegistrationError, ValidationError
from ali_dev_mcp.models import CamelModel, ToolResult
from ali_dev_mcp.registry import CapabilityServer


class EchoInput(CamelModel):
    work_item_id: int = Field(..., description="The work item ID")
    note: Optional[str] = Field(default=None, description="Optional note")


def render_echo(params: EchoInput) -> types.GetPromptResult:
    return types.GetPromptResult(
        description="Echo",
        messages=[
            types.PromptMessage(
                role="user",
                content=types.TextContent(type="text", text=f"item {params.work_item_id}"),
            )
        ],
    )


class TestRegistration:
    """Test tool and prompt registration"""

    def test_duplicate_tool_name(self, capability_server):
        handler = AsyncMock(return_value=ToolResult.text("ok"))
        capability_server.add_tool("echo", "Echo", EchoInput, handler)

        with pytest.raises(RegistrationError):
            capability_server.add_tool("echo", "Echo again", EchoInput, handler)

    def test_duplicate_prompt_name(self, capability_server):
        capability_server.add_prompt("echo", "Echo", EchoInput, render_echo)

        with pytest.raises(RegistrationError):
            capability_server.add_prompt("echo", "Echo again", EchoInput, render_echo)

    def test_tool_and_prompt_may_share_a_name(self, capability_server):
        capability_server.add_tool("echo", "Echo", EchoInput, AsyncMock())
        capability_server.add_prompt("echo", "Echo", EchoInput, render_echo)

        assert capability_server.tool_names == ["echo"]
        assert capability_server.prompt_names == ["echo"]

    def test_tool_schema(self, capability_server):
        capability_server.add_tool("echo", "Echo a work item", EchoInput, AsyncMock())

        tool = capability_server.list_tools()[0]

        assert tool.name == "echo"
        assert tool.description == "Echo a work item"
        assert tool.inputSchema["type"] == "object"
        assert tool.inputSchema["required"] == ["workItemId"]
        assert tool.inputSchema["properties"]["workItemId"]["type"] == "integer"
        assert tool.inputSchema["properties"]["workItemId"]["description"] == "The work item ID"
        assert tool.inputSchema["properties"]["note"]["default"] is None

    def test_prompt_arguments(self, capability_server):
        capability_server.add_prompt("echo", "Echo", EchoInput, render_echo)

        prompt = capability_server.list_prompts()[0]

        assert [(arg.name, arg.required) for arg in prompt.arguments] == [
            ("workItemId", True),
            ("note", False),
        ]
        assert prompt.arguments[0].description == "The work item ID"


class TestDispatch:
    """Test tool and prompt dispatch"""

    @pytest.mark.asyncio
    async def test_call_tool_passes_validated_input(self, capability_server):
        handler = AsyncMock(return_value=ToolResult.text("ok"))
        capability_server.add_tool("echo", "Echo", EchoInput, handler)

        result = await capability_server.call_tool("echo", {"workItemId": "42"})

        assert result.is_error is False
        assert result.message == "ok"
        params = handler.await_args.args[0]
        assert isinstance(params, EchoInput)
        assert params.work_item_id == 42

    @pytest.mark.asyncio
    async def test_unknown_tool(self, capability_server):
        result = await capability_server.call_tool("missing", {})

        assert result.is_error is True
        assert result.message == "Unknown tool: missing"

    @pytest.mark.asyncio
    async def test_invalid_arguments_never_reach_handler(self, capability_server):
        handler = AsyncMock()
        capability_server.add_tool("echo", "Echo", EchoInput, handler)

        result = await capability_server.call_tool("echo", {"workItemId": "not-a-number"})

        assert result.is_error is True
        assert result.message.startswith("Invalid arguments for tool echo: workItemId")
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_arguments(self, capability_server):
        capability_server.add_tool("echo", "Echo", EchoInput, AsyncMock())

        result = await capability_server.call_tool("echo", None)

        assert result.is_error is True
        assert "workItemId" in result.message

    def test_get_prompt(self, capability_server):
        capability_server.add_prompt("echo", "Echo", EchoInput, render_echo)

        result = capability_server.get_prompt("echo", {"workItemId": "7"})

        assert result.messages[0].content.text == "item 7"

    def test_get_prompt_missing_argument(self, capability_server):
        handler = MagicMock()
        capability_server.add_prompt("echo", "Echo", EchoInput, handler)

        with pytest.raises(ValidationError):
            capability_server.get_prompt("echo", {})

        handler.assert_not_called()

    def test_unknown_prompt(self, capability_server):
        with pytest.raises(ValidationError):
            capability_server.get_prompt("missing", {})


class TestMCPHandlers:
    """Test the handlers installed on the MCP server"""

    def test_request_handlers_installed(self, capability_server):
        handlers = capability_server.mcp_server.request_handlers

        assert types.ListToolsRequest in handlers
        assert types.CallToolRequest in handlers
        assert types.ListPromptsRequest in handlers
        assert types.GetPromptRequest in handlers

    @pytest.mark.asyncio
    async def test_failed_tool_call_is_error_result(self, capability_server):
        handler = capability_server.mcp_server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="missing", arguments={}),
        )

        response = await handler(request)

        assert response.root.isError is True
        assert response.root.content[0].text == "Unknown tool: missing"

    @pytest.mark.asyncio
    async def test_successful_tool_call(self, capability_server):
        capability_server.add_tool("echo", "Echo", EchoInput, AsyncMock(return_value=ToolResult.text("done")))
        handler = capability_server.mcp_server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="echo", arguments={"workItemId": 1}),
        )

        response = await handler(request)

        assert response.root.isError is False
        assert response.root.content[0].text == "done"

    @pytest.mark.asyncio
    async def test_numeric_string_rejected_by_input_schema(self, capability_server):
        tool_handler = AsyncMock(return_value=ToolResult.text("done"))
        capability_server.add_tool("echo", "Echo", EchoInput, tool_handler)
        handler = capability_server.mcp_server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="echo", arguments={"workItemId": "42"}),
        )

        response = await handler(request)

        assert response.root.isError is True
        tool_handler.assert_not_awaited()
