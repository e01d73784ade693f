import pytest

from lintcheck.core.models import RepositoryContext
from lintcheck.errors import TransportError


class FakeChecksClient:
    """In-memory stand-in for the check-runs API that records every call."""

    def __init__(self, run_id=42, fail_create=False, fail_update=False):
        self.run_id = run_id
        self.fail_create = fail_create
        self.fail_update = fail_update
        self.created = []
        self.updated = []

    def create_check_run(self, owner, repo, body):
        self.created.append((owner, repo, body))
        if self.fail_create:
            raise TransportError("POST /check-runs failed with HTTP 502: Bad Gateway")
        return {"id": self.run_id, "status": "in_progress"}

    def update_check_run(self, owner, repo, check_run_id, body):
        self.updated.append((owner, repo, check_run_id, body))
        if self.fail_update:
            raise TransportError("PATCH /check-runs failed with HTTP 502: Bad Gateway")
        return {"id": check_run_id, "status": "completed"}


@pytest.fixture
def checks_client():
    return FakeChecksClient()


@pytest.fixture
def repo_context():
    return RepositoryContext(owner="octo", repo="widgets", sha="abc123")
