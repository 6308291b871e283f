"""
Data models for the ALI Dev MCP Server
"""
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from mcp.types import TextContent


class CamelModel(BaseModel):
    """Base model serialised with the camelCase keys Azure DevOps and MCP clients use"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TestStep(CamelModel):
    """A single action / expected result pair from a test case"""
    __test__ = False

    step: int = Field(..., ge=1)
    action: str
    expected_result: List[str] = Field(default_factory=list)


class TestCaseResult(CamelModel):
    """Structured steps of an Azure DevOps test case"""
    __test__ = False

    steps: List[TestStep] = Field(default_factory=list)


class AutomationDetails(CamelModel):
    """Automation metadata of a test case work item"""
    automated_test_id: Optional[str] = None
    automated_test_name: Optional[str] = None
    automated_test_storage: Optional[str] = None
    automated_test_type: Optional[str] = None
    automation_status: Optional[str] = None
    automation_status_custom: Optional[str] = None


class PRChangeItem(CamelModel):
    """File referenced by a pull request change entry"""
    path: str = ""
    url: str = ""


class PRFileChange(CamelModel):
    """A changed file in a pull request iteration"""
    change_type: str = "unknown"
    item: PRChangeItem = Field(default_factory=PRChangeItem)
    source_server_item: Optional[str] = None
    original_path: Optional[str] = None


class PRIterationResult(CamelModel):
    """File changes of one pull request iteration"""
    iteration_id: int
    changes: List[PRFileChange] = Field(default_factory=list)


class PRCommentThreadPosition(CamelModel):
    """Line/offset position inside a file"""
    line: int
    offset: int = 1


class PRThreadContext(CamelModel):
    """File location a comment thread is anchored to"""
    file_path: Optional[str] = None
    right_file_start: Optional[PRCommentThreadPosition] = None
    right_file_end: Optional[PRCommentThreadPosition] = None


class PRCommentThread(CamelModel):
    """Pull request comment thread"""
    id: Optional[int] = None
    published_date: Optional[str] = None
    last_updated_date: Optional[str] = None
    comments: Optional[List[Dict[str, Any]]] = None
    status: Optional[str] = None
    thread_context: Optional[PRThreadContext] = None


class ToolResult(BaseModel):
    """Outcome of a tool invocation as returned to the transport"""
    content: List[TextContent] = Field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(type="text", text=text)])

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content=[TextContent(type="text", text=message)], is_error=True)

    @property
    def message(self) -> str:
        return "\n".join(block.text for block in self.content)
