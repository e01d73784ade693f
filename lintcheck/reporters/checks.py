from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from ..core.models import Annotation, CheckRunHandle, RepositoryContext, Verdict
from ..errors import CheckRunStateError, TransportError

CHECK_NAME = "Lintcheck"
API_VERSION = "2022-11-28"


class ChecksClient(Protocol):
    def create_check_run(self, owner: str, repo: str, body: dict[str, Any]) -> dict[str, Any]: ...

    def update_check_run(
        self, owner: str, repo: str, check_run_id: int, body: dict[str, Any]
    ) -> dict[str, Any]: ...


class GitHubChecksClient:
    """Minimal GitHub REST client for the check-runs endpoints."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=api_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": "lintcheck",
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubChecksClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def create_check_run(self, owner: str, repo: str, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/repos/{owner}/{repo}/check-runs", body)

    def update_check_run(
        self, owner: str, repo: str, check_run_id: int, body: dict[str, Any]
    ) -> dict[str, Any]:
        return self._request("PATCH", f"/repos/{owner}/{repo}/check-runs/{check_run_id}", body)

    def _request(self, method: str, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            raise TransportError(f"{method} {path} failed with HTTP {resp.status_code}: {_error_message(resp)}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise TransportError(f"{method} {path} returned a non-JSON response") from e
        if not isinstance(payload, dict):
            raise TransportError(f"{method} {path}: expected a JSON object, got {type(payload).__name__}")
        return payload


class CheckRunReporter:
    """Drives one check run from ``in_progress`` to ``completed``.

    ``open`` must succeed before ``close`` or ``abort``; the run is completed
    at most once.
    """

    def __init__(self, client: ChecksClient, name: str = CHECK_NAME) -> None:
        self._client = client
        self._name = name
        self._context: RepositoryContext | None = None
        self._handle: CheckRunHandle | None = None
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed

    def open(self, context: RepositoryContext) -> CheckRunHandle:
        if self._handle is not None:
            raise CheckRunStateError("check run already opened")
        created = self._client.create_check_run(context.owner, context.repo, {
            "name": self._name,
            "head_sha": context.sha,
            "status": "in_progress",
        })
        run_id = created.get("id")
        if not isinstance(run_id, int):
            raise TransportError(f"check run creation returned no id: {created!r}")
        self._context = context
        self._handle = CheckRunHandle(id=run_id)
        return self._handle

    def close(
        self,
        handle: CheckRunHandle,
        verdict: Verdict,
        annotations: Sequence[Annotation],
        text: str,
    ) -> None:
        self._complete(handle, verdict.conclusion, {
            "title": self._name,
            "summary": verdict.summary,
            "text": text,
            "annotations": [a.to_payload() for a in annotations],
        })

    def abort(self, handle: CheckRunHandle, message: str) -> None:
        """Complete the run as failed without any lint results."""
        self._complete(handle, "failure", {
            "title": self._name,
            "summary": "Lint run did not complete",
            "text": f"```\n{message}\n```",
            "annotations": [],
        })

    def _complete(self, handle: CheckRunHandle, conclusion: str, output: dict[str, Any]) -> None:
        if self._handle is None or self._context is None:
            raise CheckRunStateError("check run must be opened before it is completed")
        if handle != self._handle:
            raise CheckRunStateError(f"unknown check run {handle.id}")
        if self._completed:
            raise CheckRunStateError(f"check run {handle.id} already completed")
        # Marked before the call: a failed update is not retried.
        self._completed = True
        self._client.update_check_run(self._context.owner, self._context.repo, handle.id, {
            "name": self._name,
            "status": "completed",
            "conclusion": conclusion,
            "output": output,
        })


def render_report_text(config_document: dict | None) -> str:
    """Markdown body for the check output: the base configuration as JSON."""
    rendered = json.dumps(config_document or {}, indent=2, default=str)
    return "\n".join([
        "## Results",
        "<details>",
        "<summary>Lint configuration</summary>",
        "",
        "```json",
        rendered,
        "```",
        "</details>",
    ])


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text[:200] or "no response body"
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return str(payload)[:200]
