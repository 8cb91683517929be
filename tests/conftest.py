import json

import pytest

from completion import CompletionFailure


class FakeCompletionClient:
    """Replays canned completions and records every request."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def complete(self, messages, *, temperature, max_tokens=None):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


def fenced(payload: dict, prose: str = "") -> str:
    return f"{prose}```json\n{json.dumps(payload)}\n```"


@pytest.fixture
def fake_client():
    return FakeCompletionClient


@pytest.fixture
def failing_client():
    return FakeCompletionClient(error=CompletionFailure("service unavailable"))
