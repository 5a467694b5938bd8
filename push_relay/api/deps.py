from __future__ import annotations

from fastapi import Request

from push_relay.services.dispatch_service import MessageSender


def get_sender(request: Request) -> MessageSender | None:
    """startup 에서 FCM 초기화에 성공한 경우에만 발송 핸들이 존재한다."""
    return getattr(request.app.state, "push_sender", None)
