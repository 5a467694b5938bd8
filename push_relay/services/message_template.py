from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Mapping

from push_relay.core.config import settings
from push_relay.core.errors import MessageBuildError

RECIPIENT_KEYS = frozenset({"token", "tokens"})
OBJECT_KEYS = ("notification", "data", "android", "apns", "webpush", "fcmOptions")


def _build_default_message() -> dict[str, Any]:
    title = settings.default_notification_title
    body = settings.default_notification_body
    return {
        "notification": {
            "title": title,
            "body": body,
        },
        "data": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "msg": "put any data you want to send",
        },
        "android": {
            "priority": "high",
            "notification": {
                "sound": "default",
                "channelId": "default",
            },
        },
        "apns": {
            "headers": {
                "apns-priority": "10",
            },
            "payload": {
                "aps": {
                    "content-available": 1,
                    "alert": {
                        "title": title,
                        "body": body,
                    },
                    "sound": "default",
                },
            },
        },
    }


# data.timestamp 는 프로세스 기동 시각으로 고정된다.
_DEFAULT_PUSH_MESSAGE = _build_default_message()


def get_default_message() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULT_PUSH_MESSAGE)


def merge_message(override: Any) -> dict[str, Any]:
    """
    기본 템플릿 위에 override 의 최상위 키를 덮어쓴다.

    android / apns 같은 하위 객체는 병합하지 않고 통째로 교체된다.
    override 가 객체가 아니면 기본 템플릿을 그대로 사용한다.
    """
    message = get_default_message()
    if not isinstance(override, Mapping):
        return message

    for key, value in override.items():
        if key in RECIPIENT_KEYS:
            continue
        if key in OBJECT_KEYS and not isinstance(value, Mapping):
            raise MessageBuildError(
                f"message.{key} must be an object.",
                code="invalid-message",
            )
        message[key] = copy.deepcopy(value)
    return message
