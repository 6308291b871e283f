"""
Pull request comment tools and review prompts
"""
import textwrap
from typing import Optional

from pydantic import Field
from mcp.types import GetPromptResult

from ..models import ToolResult
from .base import Capability, json_result, prompt_result, tool_handler
from .pr_files import PullRequestInput, PullRequestPromptInput


class AddInlineCommentInput(PullRequestInput):
    file_path: str = Field(
        ...,
        description="Path to the file in the repository (e.g., /src/Services/MyFile.cs)"
    )
    line_number: int = Field(..., ge=1, description="Line number in the file where the comment should be added")
    comment_text: str = Field(..., description="The comment text to add")


class AddReviewCommentPromptInput(PullRequestPromptInput):
    file_path: str = Field(..., description="Path to the file in the repository")
    line_number: str = Field(..., description="Line number where to add the comment")
    review_focus: Optional[str] = Field(
        default=None,
        description="Specific focus area for the review (e.g., 'security', 'performance', 'logic')"
    )


class ReviewWithCommentsPromptInput(PullRequestPromptInput):
    review_criteria: Optional[str] = Field(
        default=None,
        description="Specific review criteria (e.g., 'security-focused', 'performance', 'code-style')"
    )


class PRCommentsCapability(Capability):
    """Inline pull request comments"""

    def register_tools(self) -> None:
        self.server.add_tool(
            "add_pr_inline_comment",
            "Add an inline comment to a specific line in a file within a pull request in Azure DevOps",
            AddInlineCommentInput,
            self.add_pr_inline_comment,
        )
        self.server.add_tool(
            "get_pr_comment_threads",
            "Get all comment threads of a pull request in Azure DevOps",
            PullRequestInput,
            self.get_pr_comment_threads,
        )

    def register_prompts(self) -> None:
        self.server.add_prompt(
            "add-review-comment",
            "Add a review comment to a specific line in a pull request file",
            AddReviewCommentPromptInput,
            self.add_review_comment,
        )
        self.server.add_prompt(
            "review-pr-with-comments",
            "Perform a comprehensive review of a pull request and add inline comments where needed",
            ReviewWithCommentsPromptInput,
            self.review_pr_with_comments,
        )

    @tool_handler("Error adding PR inline comment")
    async def add_pr_inline_comment(self, params: AddInlineCommentInput) -> ToolResult:
        thread = await self.client.add_inline_comment(
            self.organization_for(params.organization),
            params.project,
            params.repository_id,
            params.pull_request_id,
            params.file_path,
            params.line_number,
            params.comment_text,
        )
        return json_result({
            "success": True,
            "threadId": thread.id,
            "filePath": params.file_path,
            "lineNumber": params.line_number,
            "commentText": params.comment_text,
            "createdDate": thread.published_date,
            "status": thread.status,
        })

    @tool_handler("Error getting PR comment threads")
    async def get_pr_comment_threads(self, params: PullRequestInput) -> ToolResult:
        threads = await self.client.list_comment_threads(
            self.organization_for(params.organization),
            params.project,
            params.repository_id,
            params.pull_request_id,
        )
        return json_result([thread.to_json_dict() for thread in threads])

    def add_review_comment(self, params: AddReviewCommentPromptInput) -> GetPromptResult:
        focus = f" with focus on: {params.review_focus}" if params.review_focus else ""
        text = textwrap.dedent(f"""\
            Add a review comment to line {params.line_number} in file {params.file_path} for pull request {params.pull_request_id} in project {params.project}, organization {params.organization}, repository {params.repository_id}.

            Instructions:
            1. First, read the content of the file at the specified line to understand the context
            2. Analyze the code around line {params.line_number} for potential issues{focus}
            3. Provide constructive feedback focusing on:
               - Code quality and best practices
               - Potential bugs or logical issues
               - Security considerations
               - Performance implications
               - Maintainability concerns
            4. Use the add_pr_inline_comment tool to add the comment with clear, actionable feedback
            5. Ensure the comment is professional, specific, and helpful for the developer

            The comment should help improve code quality and provide valuable insights for the pull request review process.""")
        return prompt_result("Add a review comment to a specific line in a pull request file", text)

    def review_pr_with_comments(self, params: ReviewWithCommentsPromptInput) -> GetPromptResult:
        criteria = params.review_criteria or "general best practices"
        text = textwrap.dedent(f"""\
            Perform a comprehensive review of pull request {params.pull_request_id} for project {params.project} in organization {params.organization}, repository {params.repository_id}.

            Instructions:
            1. Use the get_pr_file_changes tool to get all files changed in the PR
            2. For each changed file:
               - Read the file content to understand the changes
               - Analyze the code for issues based on {criteria}
               - Identify specific lines that need attention
            3. Use the add_pr_inline_comment tool to add comments for:
               - Code quality issues
               - Potential bugs or logical problems
               - Security vulnerabilities
               - Performance concerns
               - Best practice violations
               - Missing error handling
            4. Provide a summary of all comments added and overall assessment
            5. Focus on constructive, actionable feedback that helps improve the code

            This comprehensive review will help ensure high code quality and catch potential issues before merge.""")
        return prompt_result(
            "Perform a comprehensive review of a pull request and add inline comments where needed",
            text,
        )
