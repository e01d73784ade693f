"""GitHub Actions host plumbing: action inputs, repository context, failure signal."""
from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import TextIO

from ...core.models import RepositoryContext
from ...errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"

_TRUE_VALUES = {"true", "1", "yes"}


class GitHubActionsAdapter:
    """Read-only view of the GitHub Actions environment."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def get_input(self, name: str) -> str:
        """Return an action input the way the Actions toolkit does: trimmed, "" if unset."""
        key = "INPUT_" + name.replace(" ", "_").upper()
        return self._environ.get(key, "").strip()

    def get_boolean_input(self, name: str) -> bool:
        return self.get_input(name).lower() in _TRUE_VALUES

    def repository_context(self) -> RepositoryContext:
        repository = self._environ.get("GITHUB_REPOSITORY", "")
        sha = self._environ.get("GITHUB_SHA", "")

        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise ConfigurationError(
                f"lintcheck: GITHUB_REPOSITORY must be set as owner/repo (got {repository!r})"
            )
        if not sha:
            raise ConfigurationError("lintcheck: GITHUB_SHA must be set")

        api_url = self._environ.get("GITHUB_API_URL") or DEFAULT_API_URL
        return RepositoryContext(owner=owner, repo=repo, sha=sha, api_url=api_url.rstrip("/"))


def set_failed(message: str, stream: TextIO | None = None) -> None:
    """Signal failure to the host with an ``::error::`` workflow command."""
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", file=stream or sys.stdout)
