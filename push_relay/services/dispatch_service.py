from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from push_relay.core.errors import (
    MessageBuildError,
    ProviderNotReadyError,
    PushRelayError,
    PushRequestError,
)
from push_relay.schemas.push import PushResponse, PushSummary, SendError, SendOutcome
from push_relay.services.message_template import merge_message

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES_PER_TOKEN = 10
MAX_MESSAGES_PER_TOKEN = 100
NOT_READY_MESSAGE = "FCM is not initialized. Please check your environment variables."


class MessageSender(Protocol):
    async def send(self, message: dict[str, Any]) -> str:
        """메시지 한 건을 발송하고 provider 메시지 ID 를 돌려준다."""


@dataclass
class SendRequest:
    tokens: list[str]
    messages_per_token: int = DEFAULT_MESSAGES_PER_TOKEN
    message_override: Mapping[str, Any] | None = None


@dataclass
class _SendOperation:
    token: str
    message_index: int
    message: dict[str, Any] = field(repr=False)


def resolve_messages_per_token(value: Any) -> int:
    """범위(1~100)를 벗어나거나 숫자가 아닌 값은 오류 없이 기본값 10 으로 대체한다."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_MESSAGES_PER_TOKEN
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_MESSAGES_PER_TOKEN
    if not isinstance(value, (int, float)):
        return DEFAULT_MESSAGES_PER_TOKEN
    if not 1 <= value <= MAX_MESSAGES_PER_TOKEN:
        return DEFAULT_MESSAGES_PER_TOKEN
    return int(value)


def parse_send_request(payload: Any) -> SendRequest:
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise PushRequestError("request body must be a JSON object.")
    tokens = payload.get("tokens")

    # "", 0, false 도 누락으로 본다. 빈 배열은 아래에서 별도 오류로 처리한다.
    if tokens is None or (not tokens and not isinstance(tokens, (list, dict))):
        raise PushRequestError("tokens array is required.")
    if not isinstance(tokens, list):
        raise PushRequestError("tokens must be an array.")
    if not tokens:
        raise PushRequestError("tokens array is empty.")
    if not all(isinstance(token, str) and token for token in tokens):
        raise PushRequestError("tokens must contain only non-empty strings.")

    override = payload.get("message")
    return SendRequest(
        tokens=list(tokens),
        messages_per_token=resolve_messages_per_token(payload.get("messagesPerToken")),
        message_override=override if isinstance(override, Mapping) else None,
    )


async def dispatch_push(sender: MessageSender | None, payload: Any) -> PushResponse:
    """
    토큰마다 messagesPerToken 건의 메시지를 만들어 한꺼번에 발송하고 결과를 집계한다.

    개별 발송 실패는 결과 항목으로만 기록되고 배치를 중단시키지 않는다.
    결과 순서는 완료 순서와 무관하게 (토큰, 회차) 생성 순서를 따른다.
    """
    if sender is None:
        raise ProviderNotReadyError(NOT_READY_MESSAGE)

    request = parse_send_request(payload)

    try:
        message = merge_message(request.message_override)
        operations = [
            _SendOperation(token=token, message_index=index, message={**message, "token": token})
            for token in request.tokens
            for index in range(1, request.messages_per_token + 1)
        ]

        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(_send_one(sender, operation)) for operation in operations]

        return _build_response(request, [task.result() for task in tasks])
    except PushRelayError:
        logger.exception("푸시 메시지 발송 실패")
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("푸시 메시지 발송 실패")
        raise PushRelayError(str(exc), code=getattr(exc, "code", None)) from exc


async def _send_one(sender: MessageSender, operation: _SendOperation) -> SendOutcome:
    try:
        message_id = await sender.send(operation.message)
    except Exception as exc:  # noqa: BLE001
        return SendOutcome(
            token=operation.token,
            message_index=operation.message_index,
            success=False,
            message_id=None,
            error=SendError(
                code=str(getattr(exc, "code", None) or "unknown"),
                message=str(exc) or "Unknown error",
            ),
        )
    return SendOutcome(
        token=operation.token,
        message_index=operation.message_index,
        success=True,
        message_id=message_id,
        error=None,
    )


def _build_response(request: SendRequest, outcomes: list[SendOutcome]) -> PushResponse:
    success_count = sum(1 for outcome in outcomes if outcome.success)
    failure_count = sum(1 for outcome in outcomes if not outcome.success)
    total_messages = len(request.tokens) * request.messages_per_token
    if total_messages != len(outcomes) or total_messages != success_count + failure_count:
        raise MessageBuildError(
            f"aggregation mismatch: expected {total_messages} results, got {len(outcomes)}.",
            code="aggregation-mismatch",
        )

    logger.info(
        "푸시 메시지 발송 완료 (successCount=%s, failureCount=%s, totalTokens=%s, "
        "messagesPerToken=%s, totalMessages=%s)",
        success_count,
        failure_count,
        len(request.tokens),
        request.messages_per_token,
        total_messages,
    )

    return PushResponse(
        success=True,
        summary=PushSummary(
            total_tokens=len(request.tokens),
            messages_per_token=request.messages_per_token,
            total_messages=total_messages,
            success_count=success_count,
            failure_count=failure_count,
        ),
        results=outcomes,
        sent_at=datetime.now(timezone.utc),
    )
