from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from push_relay.api.deps import get_sender
from push_relay.schemas.push import PushResponse
from push_relay.services.dispatch_service import MessageSender, dispatch_push
from push_relay.services.message_template import get_default_message

router = APIRouter(tags=["push"])


@router.get("/message-template")
async def message_template() -> dict[str, Any]:
    return get_default_message()


@router.post("/push", response_model=PushResponse)
async def push(
    payload: Any = Body(default=None),
    sender: MessageSender | None = Depends(get_sender),
):
    """
    tokens 의 각 토큰으로 messagesPerToken 건씩 동시에 발송한다.

    개별 발송 실패는 results 에만 기록되고, 검증 실패(400)와
    FCM 미초기화/집계 오류(500)만 요청 단위 오류로 응답한다.
    """
    return await dispatch_push(sender, payload)
