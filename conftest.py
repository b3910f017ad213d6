import shutil
from pathlib import Path

import pytest

from aips.models import Completion
from aips.storage import Storage

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture
def storage() -> Storage:
    """Wipe and re-init data-tests/ before every test that needs storage."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    return Storage(TEST_DATA_DIR)


class StubClient:
    """Deterministic completion client for tests.

    Queue responses (Completion, str, or an exception instance to raise) with
    `queue()`; each call pops the next one. Raises if called with nothing queued.
    """

    def __init__(self) -> None:
        self._responses: list = []
        self.calls: list[tuple[str, str]] = []

    def queue(self, *responses) -> "StubClient":
        self._responses.extend(responses)
        return self

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        self.calls.append((system_prompt, user_prompt))
        if not self._responses:
            raise AssertionError(
                f"StubClient: unexpected call (no responses queued). calls so far: {len(self.calls)}"
            )
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return Completion(content=response)
        return response


@pytest.fixture
def client() -> StubClient:
    return StubClient()
