"""Shared formatting functions for MCP responses.

Every tool answers with a single text block. Successful payloads are rendered
as indented JSON; failures and empty results carry a readable message and set
isError.
"""
import json
import re
from html import escape
from typing import Any, Iterable, Optional

from mcp.types import CallToolResult, TextContent


# ============================================================================
# Envelopes
# ============================================================================

def json_result(payload: Any) -> CallToolResult:
    """Wrap a payload as a successful tool result."""
    text = json.dumps(payload, indent=2, default=str)
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def empty_result(message: str) -> CallToolResult:
    """Report that the call succeeded but there was nothing to return."""
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def error_result(message: str) -> CallToolResult:
    """Report a failed call."""
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def result_text(result: CallToolResult) -> str:
    """Return the text of a single-block result."""
    return result.content[0].text


# ============================================================================
# Status tables
# ============================================================================

# Pull request status values sent by repo_update_pull_request_status.
# The service's integers are not self-describing; keep this table explicit.
PULL_REQUEST_STATUS: dict[str, int] = {
    "active": 3,
    "abandoned": 2,
}
_PULL_REQUEST_STATUS_NAMES: dict[int, str] = {code: name for name, code in PULL_REQUEST_STATUS.items()}


def pull_request_status_code(name: str) -> int:
    """Map a lifecycle name ("active", "abandoned") to its integer constant."""
    try:
        return PULL_REQUEST_STATUS[name]
    except KeyError:
        raise ValueError(f"Unknown pull request status '{name}'. Valid: {', '.join(PULL_REQUEST_STATUS)}") from None


def pull_request_status_name(code: int) -> str:
    """Inverse of pull_request_status_code."""
    try:
        return _PULL_REQUEST_STATUS_NAMES[code]
    except KeyError:
        raise ValueError(f"Unknown pull request status code {code}") from None


# Comment thread status (CommentThreadStatus)
COMMENT_THREAD_STATUS: dict[str, int] = {
    "unknown": 0,
    "active": 1,
    "fixed": 2,
    "wontFix": 3,
    "closed": 4,
    "byDesign": 5,
    "pending": 6,
}
RESOLVED_THREAD_STATUS = COMMENT_THREAD_STATUS["fixed"]


# ============================================================================
# Projections
# ============================================================================

HEADS_PREFIX = "refs/heads/"


def branch_names(refs: Optional[Iterable[dict]], top: int) -> list[str]:
    """Reduce git refs to branch names.

    Keeps refs under refs/heads/, strips that prefix, then truncates to top.
    Input order is preserved.
    """
    names = [ref["name"] for ref in (refs or []) if ref.get("name")]
    heads = [name for name in names if name.startswith(HEADS_PREFIX)]
    return [name[len(HEADS_PREFIX):] for name in heads][:top]


def project_repository(repo: dict) -> dict:
    """Format a repository for list views."""
    return {
        "id": repo.get("id"),
        "name": repo.get("name"),
        "isDisabled": repo.get("isDisabled"),
        "isFork": repo.get("isFork"),
        "isInMaintenance": repo.get("isInMaintenance"),
        "webUrl": repo.get("webUrl"),
        "size": repo.get("size"),
    }


def project_pull_request(pr: dict, include_repository: bool = False) -> dict:
    """Format a pull request for list views."""
    created_by = pr.get("createdBy") or {}
    result = {
        "pullRequestId": pr.get("pullRequestId"),
        "codeReviewId": pr.get("codeReviewId"),
    }
    if include_repository:
        result["repository"] = (pr.get("repository") or {}).get("name")
    result.update({
        "status": pr.get("status"),
        "createdBy": {
            "displayName": created_by.get("displayName"),
            "uniqueName": created_by.get("uniqueName"),
        },
        "creationDate": pr.get("creationDate"),
        "title": pr.get("title"),
        "isDraft": pr.get("isDraft"),
    })
    return result


def project_work_item(wi: dict) -> dict:
    """Format a work item as a compact record."""
    fields = wi.get("fields") or {}
    assigned_to = fields.get("System.AssignedTo")
    if isinstance(assigned_to, dict):
        assigned_to = assigned_to.get("displayName")
    return {
        "id": wi.get("id"),
        "type": fields.get("System.WorkItemType"),
        "title": fields.get("System.Title"),
        "state": fields.get("System.State"),
        "assignedTo": assigned_to,
        "iterationPath": fields.get("System.IterationPath"),
    }


def project_build(build: dict) -> dict:
    """Format a build for list views."""
    definition = build.get("definition") or {}
    requested_for = build.get("requestedFor") or {}
    return {
        "id": build.get("id"),
        "buildNumber": build.get("buildNumber"),
        "status": build.get("status"),
        "result": build.get("result"),
        "definition": {"id": definition.get("id"), "name": definition.get("name")},
        "sourceBranch": build.get("sourceBranch"),
        "requestedFor": requested_for.get("displayName"),
        "queueTime": build.get("queueTime"),
        "finishTime": build.get("finishTime"),
    }


def project_release(release: dict) -> dict:
    """Format a release for list views."""
    definition = release.get("releaseDefinition") or {}
    created_by = release.get("createdBy") or {}
    return {
        "id": release.get("id"),
        "name": release.get("name"),
        "status": release.get("status"),
        "createdOn": release.get("createdOn"),
        "createdBy": created_by.get("displayName"),
        "releaseDefinition": {"id": definition.get("id"), "name": definition.get("name")},
        "description": release.get("description"),
    }


# ============================================================================
# Test case steps
# ============================================================================

# "1. " list marker; "3 failed logins" or "2.0 API" are step text.
_STEP_NUMBER = re.compile(r"^\d+\.\s+")


def format_test_steps(steps: Optional[str]) -> str:
    """Render "action|expected" lines as Microsoft.VSTS.TCM.Steps XML.

    One step per line; a leading "1. " list marker on a line is dropped.
    """
    if not steps or not steps.strip():
        return ""

    lines = [line for line in steps.strip().splitlines() if line.strip()]
    parts = [f'<steps id="0" last="{len(lines)}">']
    for idx, line in enumerate(lines, 1):
        action, _, expected = line.partition("|")
        action = _STEP_NUMBER.sub("", action.strip())
        expected = expected.strip()
        parts.append(
            f'<step id="{idx}" type="ActionStep">'
            f'<parameterizedString isformatted="true">{escape(_html_paragraph(action))}</parameterizedString>'
            f'<parameterizedString isformatted="true">{escape(_html_paragraph(expected))}</parameterizedString>'
            f'<description/></step>'
        )
    parts.append("</steps>")
    return "".join(parts)


def _html_paragraph(text: str) -> str:
    return f"<DIV><P>{escape(text)}</P></DIV>"

