from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any

import pytest
from fastapi.testclient import TestClient

from push_relay.main import app


class FakeProviderError(Exception):
    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class FakeSender:
    """호출 순서(1부터)로 실패/지연을 지정할 수 있는 가짜 발송기."""

    def __init__(self, *, fail_calls: set[int] | None = None, reverse_timing: bool = False, total: int = 0):
        self.fail_calls = fail_calls or set()
        self.reverse_timing = reverse_timing
        self.total = total
        self.messages: list[dict[str, Any]] = []
        self.completed: list[int] = []
        self._per_token: dict[str, int] = defaultdict(int)

    async def send(self, message: dict[str, Any]) -> str:
        self.messages.append(message)
        call_number = len(self.messages)
        token = message["token"]
        self._per_token[token] += 1
        index = self._per_token[token]

        if self.reverse_timing:
            await asyncio.sleep((self.total - call_number + 1) * 0.01)
        else:
            await asyncio.sleep(0)

        self.completed.append(call_number)
        if call_number in self.fail_calls:
            raise FakeProviderError("Requested entity was not found.", code="NOT_FOUND")
        return f"projects/demo/messages/{token}-{index}"


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def client():
    previous = getattr(app.state, "push_sender", None)
    test_client = TestClient(app)
    yield test_client
    app.state.push_sender = previous
