"""
Pull request file change tools and review prompts
"""
import textwrap
from typing import Optional

from pydantic import Field
from mcp.types import GetPromptResult

from ..models import CamelModel, ToolResult
from .base import Capability, json_result, prompt_result, tool_handler


class PullRequestInput(CamelModel):
    organization: Optional[str] = Field(
        default=None,
        description="Azure DevOps organization name (defaults to the configured organization)"
    )
    project: str = Field(..., description="Azure DevOps project name")
    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")


class IterationInput(PullRequestInput):
    iteration_id: int = Field(..., description="Iteration ID")


class PullRequestPromptInput(CamelModel):
    organization: str = Field(..., description="Azure DevOps organization name")
    project: str = Field(..., description="Azure DevOps project name")
    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: str = Field(..., description="Pull request ID")


class ReviewFilesPromptInput(PullRequestPromptInput):
    file_pattern: Optional[str] = Field(
        default=None,
        description="Optional file pattern to filter files (e.g., '*.cs', '*.ts')"
    )


class PRFilesCapability(Capability):
    """Pull request iteration and file change tools"""

    def register_tools(self) -> None:
        self.server.add_tool(
            "get_pr_latest_iteration",
            "Get the latest iteration ID for a pull request in Azure DevOps",
            PullRequestInput,
            self.get_pr_latest_iteration,
        )
        self.server.add_tool(
            "get_pr_iteration_changes",
            "Get file changes for a specific iteration of a pull request in Azure DevOps",
            IterationInput,
            self.get_pr_iteration_changes,
        )
        self.server.add_tool(
            "get_pr_file_changes",
            "Get file changes from the latest iteration of a pull request in Azure DevOps",
            PullRequestInput,
            self.get_pr_file_changes,
        )

    def register_prompts(self) -> None:
        self.server.add_prompt(
            "analyze-pr-changes",
            "Analyze file changes in a pull request and provide insights",
            PullRequestPromptInput,
            self.analyze_pr_changes,
        )
        self.server.add_prompt(
            "review-pr-files",
            "Review specific files changed in a pull request",
            ReviewFilesPromptInput,
            self.review_pr_files,
        )

    @tool_handler("Error getting latest iteration ID")
    async def get_pr_latest_iteration(self, params: PullRequestInput) -> ToolResult:
        iteration_id = await self.client.get_pr_latest_iteration(
            self.organization_for(params.organization),
            params.project,
            params.repository_id,
            params.pull_request_id,
        )
        return json_result({
            "pullRequestId": params.pull_request_id,
            "latestIterationId": iteration_id,
        })

    @tool_handler("Error getting iteration changes")
    async def get_pr_iteration_changes(self, params: IterationInput) -> ToolResult:
        result = await self.client.get_pr_iteration_changes(
            self.organization_for(params.organization),
            params.project,
            params.repository_id,
            params.pull_request_id,
            params.iteration_id,
        )
        return json_result(result.to_json_dict())

    @tool_handler("Error getting PR file changes")
    async def get_pr_file_changes(self, params: PullRequestInput) -> ToolResult:
        result = await self.client.get_pr_file_changes(
            self.organization_for(params.organization),
            params.project,
            params.repository_id,
            params.pull_request_id,
        )
        return json_result(result.to_json_dict())

    def analyze_pr_changes(self, params: PullRequestPromptInput) -> GetPromptResult:
        text = textwrap.dedent(f"""\
            Analyze the file changes in pull request {params.pull_request_id} for project {params.project} in organization {params.organization}, repository {params.repository_id}.

            Instructions:
            1. Use the get_pr_file_changes tool to retrieve all file changes from the latest iteration
            2. Analyze the changes and provide insights about:
               - Types of files modified (code, config, documentation, etc.)
               - Change patterns (additions, deletions, modifications, renames)
               - Potential impact areas
               - Files that might need additional review
            3. Summarize the overall scope and nature of the changes
            4. Highlight any notable patterns or concerns

            This analysis will help reviewers understand the scope and impact of the pull request changes.""")
        return prompt_result("Analyze file changes in a pull request and provide insights", text)

    def review_pr_files(self, params: ReviewFilesPromptInput) -> GetPromptResult:
        if params.file_pattern:
            scope = f"Filter files matching pattern: {params.file_pattern}"
        else:
            scope = "Review all changed files"

        text = textwrap.dedent(f"""\
            Review the files changed in pull request {params.pull_request_id} for project {params.project} in organization {params.organization}, repository {params.repository_id}.

            Instructions:
            1. Use the get_pr_file_changes tool to get all file changes
            2. {scope}
            3. For each relevant file:
               - Read the current content using appropriate tools
               - Analyze the changes in context
               - Check for potential issues, code quality concerns, or improvements
               - Verify adherence to coding standards and best practices
            4. Provide detailed feedback on:
               - Code quality and maintainability
               - Potential bugs or issues
               - Performance considerations
               - Security implications
               - Test coverage needs
            5. Summarize recommendations for the pull request

            This comprehensive review will help ensure code quality and identify areas for improvement.""")
        return prompt_result("Review specific files changed in a pull request", text)
