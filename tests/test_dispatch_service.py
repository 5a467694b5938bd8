from __future__ import annotations

import asyncio
import logging

import pytest

from push_relay.core.errors import (
    MessageBuildError,
    ProviderNotReadyError,
    PushRelayError,
    PushRequestError,
)
from push_relay.services import dispatch_service
from push_relay.services.dispatch_service import (
    DEFAULT_MESSAGES_PER_TOKEN,
    dispatch_push,
    parse_send_request,
    resolve_messages_per_token,
)
from tests.conftest import FakeSender


def _run(sender, payload):
    return asyncio.run(dispatch_push(sender, payload))


def test_results_follow_generation_order_not_completion_order():
    sender = FakeSender(reverse_timing=True, total=6)
    report = _run(sender, {"tokens": ["a", "b"], "messagesPerToken": 3})

    # 나중에 만든 작업이 먼저 끝났어도 결과 순서는 (토큰, 회차) 순서다.
    assert sender.completed == [6, 5, 4, 3, 2, 1]
    assert [(r.token, r.message_index) for r in report.results] == [
        ("a", 1), ("a", 2), ("a", 3), ("b", 1), ("b", 2), ("b", 3),
    ]
    assert [r.message_id for r in report.results] == [
        "projects/demo/messages/a-1",
        "projects/demo/messages/a-2",
        "projects/demo/messages/a-3",
        "projects/demo/messages/b-1",
        "projects/demo/messages/b-2",
        "projects/demo/messages/b-3",
    ]


def test_single_failure_does_not_abort_batch():
    sender = FakeSender(fail_calls={4})
    report = _run(sender, {"tokens": ["a", "b"], "messagesPerToken": 3})

    summary = report.summary
    assert summary.total_tokens == 2
    assert summary.messages_per_token == 3
    assert summary.total_messages == 6
    assert summary.success_count == 5
    assert summary.failure_count == 1
    assert len(report.results) == summary.success_count + summary.failure_count

    failed = [r for r in report.results if not r.success]
    assert len(failed) == 1
    assert failed[0].token == "b"
    assert failed[0].message_index == 1
    assert failed[0].message_id is None
    assert failed[0].error.code == "NOT_FOUND"
    assert failed[0].error.message == "Requested entity was not found."
    assert all(r.error is None for r in report.results if r.success)


def test_all_operations_failing_is_still_a_report():
    sender = FakeSender(fail_calls={1, 2})
    report = _run(sender, {"tokens": ["only"], "messagesPerToken": 2})

    assert report.success is True
    assert report.summary.failure_count == 2
    assert report.summary.success_count == 0


def test_error_without_code_is_reported_as_unknown():
    class BareSender:
        async def send(self, message):
            raise RuntimeError()

    report = _run(BareSender(), {"tokens": ["a"], "messagesPerToken": 1})

    error = report.results[0].error
    assert error.code == "unknown"
    assert error.message == "Unknown error"


def test_each_message_carries_its_recipient():
    sender = FakeSender()
    _run(
        sender,
        {
            "tokens": ["a", "b"],
            "messagesPerToken": 2,
            "message": {"token": "someone-else", "tokens": ["x"], "data": {"k": "v"}},
        },
    )

    assert [m["token"] for m in sender.messages] == ["a", "a", "b", "b"]
    assert all("tokens" not in m for m in sender.messages)
    assert all(m["data"] == {"k": "v"} for m in sender.messages)


def test_override_replaces_top_level_keys_without_deep_merge():
    sender = FakeSender()
    _run(sender, {"tokens": ["a"], "messagesPerToken": 1, "message": {"notification": {"title": "X"}}})

    sent = sender.messages[0]
    assert sent["notification"] == {"title": "X"}
    assert sent["android"]["priority"] == "high"


@pytest.mark.parametrize("value", [0, -1, 101, "abc", None, True, 0.5, [3], {"n": 3}, "nan"])
def test_invalid_messages_per_token_falls_back_to_default(value):
    assert resolve_messages_per_token(value) == DEFAULT_MESSAGES_PER_TOKEN


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, 1), (100, 100), (7, 7), ("5", 5), (" 12 ", 12), (2.7, 2), (100.0, 100)],
)
def test_messages_per_token_accepts_values_in_range(value, expected):
    assert resolve_messages_per_token(value) == expected


def test_out_of_range_messages_per_token_sends_default_count():
    sender = FakeSender()
    report = _run(sender, {"tokens": ["a"], "messagesPerToken": 101})

    assert report.summary.messages_per_token == 10
    assert report.summary.total_messages == 10
    assert len(sender.messages) == 10


@pytest.mark.parametrize(
    ("payload", "fragment"),
    [
        ({}, "required"),
        (None, "required"),
        ({"tokens": None}, "required"),
        ({"tokens": ""}, "required"),
        ({"tokens": 0}, "required"),
        ({"tokens": False}, "required"),
        ([], "JSON object"),
        (["a", "b"], "JSON object"),
        ("hello", "JSON object"),
        ({"tokens": "abc"}, "must be an array"),
        ({"tokens": {"a": 1}}, "must be an array"),
        ({"tokens": []}, "empty"),
        ({"tokens": ["a", ""]}, "non-empty strings"),
        ({"tokens": ["a", 3]}, "non-empty strings"),
    ],
)
def test_invalid_tokens_are_rejected(payload, fragment):
    with pytest.raises(PushRequestError) as exc_info:
        parse_send_request(payload)

    assert fragment in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_validation_happens_before_any_send():
    sender = FakeSender()
    with pytest.raises(PushRequestError):
        _run(sender, {"tokens": []})

    assert sender.messages == []


@pytest.mark.parametrize("payload", [{"tokens": ["a"]}, {}, {"tokens": "abc"}])
def test_missing_sender_short_circuits_regardless_of_body(payload):
    with pytest.raises(ProviderNotReadyError) as exc_info:
        _run(None, payload)

    assert exc_info.value.status_code == 500
    assert "not initialized" in exc_info.value.message


def test_malformed_override_fails_whole_request():
    sender = FakeSender()
    with pytest.raises(MessageBuildError) as exc_info:
        _run(sender, {"tokens": ["a"], "message": {"android": "high"}})

    assert exc_info.value.code == "invalid-message"
    assert sender.messages == []


def test_unexpected_construction_error_keeps_provider_code(monkeypatch):
    class TemplateError(Exception):
        code = "template/broken"

    def _broken(override):
        raise TemplateError("template unavailable")

    monkeypatch.setattr(dispatch_service, "merge_message", _broken)

    with pytest.raises(PushRelayError) as exc_info:
        _run(FakeSender(), {"tokens": ["a"]})

    assert exc_info.value.message == "template unavailable"
    assert exc_info.value.code == "template/broken"
    assert exc_info.value.status_code == 500


def test_batch_completion_is_logged_once(caplog):
    sender = FakeSender(fail_calls={4})

    with caplog.at_level(logging.INFO, logger="push_relay.services.dispatch_service"):
        _run(sender, {"tokens": ["a", "b"], "messagesPerToken": 3})

    records = [r for r in caplog.records if r.name == "push_relay.services.dispatch_service"]
    assert len(records) == 1
    line = records[0].getMessage()
    assert "successCount=5" in line
    assert "failureCount=1" in line
    assert "totalMessages=6" in line
