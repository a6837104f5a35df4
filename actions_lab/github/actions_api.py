"""GitHub Actions REST calls used by the `runs` and `dispatch` commands.

Environment (as provided inside Actions):
- GITHUB_TOKEN: token allowed to read runs and dispatch workflows.
- GITHUB_REPOSITORY: "owner/repo".
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import GitHubApiError, NotConfiguredError


GITHUB_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_S = 30


@dataclass(frozen=True)
class WorkflowRun:
    id: int
    name: str
    status: str
    conclusion: str
    event: str
    head_branch: str
    html_url: str


def _github_api_headers(token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }


def _requests():
    # Lazy import keeps `hello` and `verify` usable without network libraries loaded.
    import requests  # pylint: disable=import-outside-toplevel

    return requests


def _api_base() -> str:
    return (os.getenv("GITHUB_API_URL") or GITHUB_API_URL).rstrip("/")


def get_repo_from_env() -> str:
    repo = (os.getenv("GITHUB_REPOSITORY") or "").strip()
    if not repo or "/" not in repo:
        raise NotConfiguredError("GITHUB_REPOSITORY must be set to 'owner/repo'")
    return repo


def get_token_from_env() -> str:
    token = (os.getenv("GITHUB_TOKEN") or "").strip()
    if not token:
        raise NotConfiguredError("GITHUB_TOKEN is not set")
    return token


def _run_from_payload(r: Dict[str, Any]) -> WorkflowRun:
    return WorkflowRun(
        id=int(r.get("id", 0)),
        name=str(r.get("name") or ""),
        status=str(r.get("status") or ""),
        conclusion=str(r.get("conclusion") or ""),
        event=str(r.get("event") or ""),
        head_branch=str(r.get("head_branch") or ""),
        html_url=str(r.get("html_url") or ""),
    )


def list_workflow_runs(
    repo: str,
    token: str,
    workflow_file: Optional[str] = None,
    per_page: int = 20,
) -> List[WorkflowRun]:
    """List recent runs, for the whole repo or for one workflow file."""
    requests = _requests()
    if workflow_file:
        url = f"{_api_base()}/repos/{repo}/actions/workflows/{workflow_file}/runs"
    else:
        url = f"{_api_base()}/repos/{repo}/actions/runs"
    r = requests.get(
        url,
        headers=_github_api_headers(token),
        params={"per_page": int(per_page)},
        timeout=DEFAULT_TIMEOUT_S,
    )
    if r.status_code != 200:
        msg = f"GitHub API error listing workflow runs: {r.status_code}: {r.text[:2000]}"
        raise GitHubApiError(msg, r.status_code)
    data = r.json() or {}
    return [_run_from_payload(x) for x in (data.get("workflow_runs") or [])]


def dispatch_workflow(
    repo: str,
    token: str,
    workflow_file: str,
    ref: str = "main",
    inputs: Optional[Dict[str, str]] = None,
) -> None:
    """Create a workflow_dispatch event. GitHub answers 204 with no body."""
    requests = _requests()
    payload: Dict[str, Any] = {"ref": ref}
    if inputs:
        payload["inputs"] = dict(inputs)
    r = requests.post(
        f"{_api_base()}/repos/{repo}/actions/workflows/{workflow_file}/dispatches",
        headers=_github_api_headers(token),
        json=payload,
        timeout=DEFAULT_TIMEOUT_S,
    )
    if r.status_code != 204:
        msg = f"GitHub API error dispatching {workflow_file}: {r.status_code}: {r.text[:2000]}"
        raise GitHubApiError(msg, r.status_code)
