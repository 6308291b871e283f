"""
Azure DevOps API client for test cases, automation metadata and pull requests
"""
import asyncio
import logging
from typing import List, Optional, Dict, Any

import aiohttp
from azure.devops.connection import Connection
from azure.devops.v7_1.work_item_tracking import WorkItemTrackingClient
from azure.devops.v7_1.work_item_tracking.models import JsonPatchOperation
from azure.identity.aio import DefaultAzureCredential
from msrest.authentication import BasicTokenAuthentication

from .config import Config, config
from .errors import AuthError, NotFoundError, RemoteError, ValidationError
from .models import (
    AutomationDetails,
    PRCommentThread,
    PRCommentThreadPosition,
    PRFileChange,
    PRIterationResult,
    PRThreadContext,
    TestCaseResult,
)
from .step_parser import extract_steps

logger = logging.getLogger(__name__)

STEPS_FIELD = "Microsoft.VSTS.TCM.Steps"

# AutomationDetails attribute -> work item field reference
AUTOMATION_FIELDS = {
    "automated_test_id": "Microsoft.VSTS.TCM.AutomatedTestId",
    "automated_test_name": "Microsoft.VSTS.TCM.AutomatedTestName",
    "automated_test_storage": "Microsoft.VSTS.TCM.AutomatedTestStorage",
    "automated_test_type": "Microsoft.VSTS.TCM.AutomatedTestType",
    "automation_status": "Microsoft.VSTS.TCM.AutomationStatus",
    "automation_status_custom": "Custom.AutomationStatus",
}

NOT_AUTOMATED = "Not Automated"


class AzureDevOpsClient:
    """Azure DevOps API client for work item and pull request operations

    Nothing is cached: every call acquires a fresh token and opens its own
    connection, so concurrent tool invocations never share state.
    """

    def __init__(self, settings: Optional[Config] = None):
        self.config = settings or config

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def get_token(self, scope: Optional[str] = None) -> str:
        """Acquire a bearer token through DefaultAzureCredential"""
        scope = scope or self.config.azure_devops_token_scope
        try:
            async with DefaultAzureCredential() as credential:
                access_token = await credential.get_token(scope)
        except Exception as e:
            raise AuthError(f"Failed to get access token: {e}", cause=e) from e

        if not access_token or not access_token.token:
            raise AuthError("Failed to get access token")
        return access_token.token

    # ------------------------------------------------------------------
    # Work items
    # ------------------------------------------------------------------

    def _work_item_client(self, token: str) -> WorkItemTrackingClient:
        credentials = BasicTokenAuthentication({"access_token": token})
        connection = Connection(
            base_url=self.config.organization_url,
            creds=credentials
        )
        return connection.clients.get_work_item_tracking_client()

    async def get_work_item(self, work_item_id: int) -> Dict[str, Any]:
        """Get the field mapping of a work item"""
        wit_client = self._work_item_client(await self.get_token())
        try:
            # the SDK is synchronous; keep its HTTP round trip off the event loop
            wi = await asyncio.to_thread(wit_client.get_work_item, id=work_item_id)
        except Exception as e:
            raise RemoteError(f"Failed to get work item {work_item_id}: {e}", cause=e) from e

        return dict(wi.fields or {}) if wi is not None else {}

    async def update_work_item(
        self,
        work_item_id: int,
        patch_ops: List[Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        """Apply JSON patch operations to a work item; returns the updated fields"""
        document = [
            JsonPatchOperation(op=op["op"], path=op["path"], value=op.get("value"))
            for op in patch_ops
        ]
        wit_client = self._work_item_client(await self.get_token())
        try:
            updated = await asyncio.to_thread(
                wit_client.update_work_item, document=document, id=work_item_id
            )
        except Exception as e:
            raise RemoteError(f"Failed to update work item {work_item_id}: {e}", cause=e) from e

        if updated is None:
            return None
        return dict(updated.fields or {})

    async def get_test_case_steps(self, test_id: int) -> TestCaseResult:
        """Get the structured steps of a test case"""
        fields = await self.get_work_item(test_id)
        result = extract_steps(fields.get(STEPS_FIELD))
        logger.info(f"Retrieved {len(result.steps)} steps for test case {test_id}")
        return result

    async def get_automation_details(self, work_item_id: int) -> AutomationDetails:
        """Get automation metadata from a work item"""
        fields = await self.get_work_item(work_item_id)
        return AutomationDetails(**{
            attribute: fields.get(field_ref)
            for attribute, field_ref in AUTOMATION_FIELDS.items()
        })

    async def update_automation_details(self, work_item_id: int, updates: AutomationDetails) -> bool:
        """Replace the automation fields that are set on ``updates``"""
        patch_ops = []
        for attribute, field_ref in AUTOMATION_FIELDS.items():
            value = getattr(updates, attribute)
            if value is not None:
                patch_ops.append({"op": "replace", "path": f"/fields/{field_ref}", "value": value})

        if not patch_ops:
            raise ValidationError("No updates provided")

        updated = await self.update_work_item(work_item_id, patch_ops)
        logger.info(f"Updated {len(patch_ops)} automation fields on work item {work_item_id}")
        return updated is not None

    async def clear_automation_details(self, work_item_id: int) -> bool:
        """Remove automation metadata and mark the work item as not automated"""
        patch_ops = []
        for attribute, field_ref in AUTOMATION_FIELDS.items():
            if attribute == "automation_status":
                patch_ops.append({"op": "replace", "path": f"/fields/{field_ref}", "value": NOT_AUTOMATED})
            else:
                patch_ops.append({"op": "remove", "path": f"/fields/{field_ref}"})

        updated = await self.update_work_item(work_item_id, patch_ops)
        logger.info(f"Cleared automation details on work item {work_item_id}")
        return updated is not None

    # ------------------------------------------------------------------
    # Pull requests (REST)
    # ------------------------------------------------------------------

    def _pull_request_url(
        self,
        organization: str,
        project: str,
        repository_id: str,
        pull_request_id: int,
        suffix: str
    ) -> str:
        base_url = self.config.azure_devops_base_url.rstrip("/")
        return (
            f"{base_url}/{organization}/{project}/_apis/git/repositories/"
            f"{repository_id}/pullRequests/{pull_request_id}/{suffix}"
        )

    async def _request(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {await self.get_token()}",
            "Content-Type": "application/json",
        }
        params = {"api-version": self.config.azure_devops_api_version}
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method, url, headers=headers, params=params, json=payload
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        raise RemoteError(f"HTTP {response.status}: {response.reason} - {error_text}")
                    return await response.json(content_type=None) or {}
        except RemoteError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RemoteError(f"{method} {url} failed: {e}", cause=e) from e

    async def get_pr_latest_iteration(
        self,
        organization: str,
        project: str,
        repository_id: str,
        pull_request_id: int
    ) -> int:
        """Get the highest iteration id of a pull request"""
        url = self._pull_request_url(organization, project, repository_id, pull_request_id, "iterations")
        data = await self._request("GET", url)

        iterations = data.get("value") or []
        if not iterations:
            raise NotFoundError("No iterations found for this pull request")

        iteration_ids = [iteration["id"] for iteration in iterations if iteration.get("id")]
        if not iteration_ids:
            raise NotFoundError("Could not determine latest iteration ID")

        return max(iteration_ids)

    async def get_pr_iteration_changes(
        self,
        organization: str,
        project: str,
        repository_id: str,
        pull_request_id: int,
        iteration_id: int
    ) -> PRIterationResult:
        """Get the changed files of one pull request iteration"""
        url = self._pull_request_url(
            organization, project, repository_id, pull_request_id,
            f"iterations/{iteration_id}/changes"
        )
        data = await self._request("GET", url)

        changes = []
        for entry in data.get("changeEntries") or []:
            item = entry.get("item") or {}
            changes.append(PRFileChange(
                change_type=str(entry.get("changeType") or "unknown"),
                item={"path": item.get("path", ""), "url": item.get("url", "")},
                source_server_item=entry.get("sourceServerItem"),
                original_path=entry.get("originalPath"),
            ))

        return PRIterationResult(iteration_id=iteration_id, changes=changes)

    async def get_pr_file_changes(
        self,
        organization: str,
        project: str,
        repository_id: str,
        pull_request_id: int
    ) -> PRIterationResult:
        """Get the changed files of the latest pull request iteration"""
        iteration_id = await self.get_pr_latest_iteration(
            organization, project, repository_id, pull_request_id
        )
        return await self.get_pr_iteration_changes(
            organization, project, repository_id, pull_request_id, iteration_id
        )

    async def add_inline_comment(
        self,
        organization: str,
        project: str,
        repository_id: str,
        pull_request_id: int,
        file_path: str,
        line: int,
        text: str
    ) -> PRCommentThread:
        """Create an active comment thread anchored to a line of a file"""
        position = PRCommentThreadPosition(line=line, offset=1)
        thread_context = PRThreadContext(
            file_path=file_path,
            right_file_start=position,
            right_file_end=position,
        )
        payload = {
            "comments": [{"commentType": "text", "content": text}],
            "status": "active",
            "threadContext": thread_context.to_json_dict(),
        }

        url = self._pull_request_url(organization, project, repository_id, pull_request_id, "threads")
        created = await self._request("POST", url, payload)
        logger.info(f"Added comment thread on {file_path}:{line} in pull request {pull_request_id}")
        return self._convert_thread(created)

    async def list_comment_threads(
        self,
        organization: str,
        project: str,
        repository_id: str,
        pull_request_id: int
    ) -> List[PRCommentThread]:
        """Get all comment threads of a pull request"""
        url = self._pull_request_url(organization, project, repository_id, pull_request_id, "threads")
        data = await self._request("GET", url)
        return [self._convert_thread(thread) for thread in data.get("value") or []]

    def _convert_thread(self, thread: Dict[str, Any]) -> PRCommentThread:
        """Project a REST thread payload onto our model"""
        context = thread.get("threadContext")
        return PRCommentThread(
            id=thread.get("id"),
            published_date=thread.get("publishedDate"),
            last_updated_date=thread.get("lastUpdatedDate"),
            comments=thread.get("comments"),
            status=thread.get("status"),
            thread_context=PRThreadContext.model_validate(context) if context else None,
        )
