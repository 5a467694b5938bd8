from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

import firebase_admin
from firebase_admin import messaging

ANDROID_NOTIFICATION_FIELDS = {
    "title": "title",
    "body": "body",
    "icon": "icon",
    "color": "color",
    "sound": "sound",
    "tag": "tag",
    "image": "image",
    "clickAction": "click_action",
    "channelId": "channel_id",
    "ticker": "ticker",
    "sticky": "sticky",
    "localOnly": "local_only",
    "defaultSound": "default_sound",
    "notificationCount": "notification_count",
}
APS_FIELDS = {
    "badge": "badge",
    "sound": "sound",
    "category": "category",
    "thread-id": "thread_id",
}
APS_ALERT_FIELDS = {
    "title": "title",
    "subtitle": "subtitle",
    "body": "body",
    "launch-image": "launch_image",
}
WEBPUSH_NOTIFICATION_FIELDS = {
    "title": "title",
    "body": "body",
    "icon": "icon",
    "badge": "badge",
    "image": "image",
    "tag": "tag",
    "lang": "language",
    "renotify": "renotify",
    "requireInteraction": "require_interaction",
    "silent": "silent",
}


class FcmSender:
    """firebase-admin 앱 하나에 묶인 발송 핸들."""

    def __init__(self, app: firebase_admin.App) -> None:
        self.app = app

    async def send(self, message: dict[str, Any]) -> str:
        fcm_message = build_fcm_message(message)
        loop = asyncio.get_running_loop()
        # 공용 executor 의 워커 수에 묶이지 않도록 발송마다 전용 스레드를 쓴다.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fcm-send")
        try:
            return await loop.run_in_executor(
                executor,
                functools.partial(messaging.send, fcm_message, app=self.app),
            )
        finally:
            executor.shutdown(wait=False)


def build_fcm_message(body: Mapping[str, Any]) -> messaging.Message:
    """FCM v1 JSON 형태의 메시지 본문을 firebase-admin Message 로 변환한다."""
    return messaging.Message(
        token=body.get("token"),
        topic=body.get("topic"),
        condition=body.get("condition"),
        data=_string_map(body.get("data")),
        notification=_notification(body.get("notification")),
        android=_android(body.get("android")),
        apns=_apns(body.get("apns")),
        webpush=_webpush(body.get("webpush")),
        fcm_options=_fcm_options(body.get("fcmOptions")),
    )


def _notification(value: Mapping[str, Any] | None) -> messaging.Notification | None:
    if not value:
        return None
    return messaging.Notification(
        title=value.get("title"),
        body=value.get("body"),
        image=value.get("image"),
    )


def _android(value: Mapping[str, Any] | None) -> messaging.AndroidConfig | None:
    if not value:
        return None
    notification = value.get("notification")
    return messaging.AndroidConfig(
        collapse_key=value.get("collapseKey"),
        priority=value.get("priority"),
        ttl=value.get("ttl"),
        restricted_package_name=value.get("restrictedPackageName"),
        data=_string_map(value.get("data")),
        notification=(
            messaging.AndroidNotification(**_rename(notification, ANDROID_NOTIFICATION_FIELDS))
            if notification
            else None
        ),
    )


def _apns(value: Mapping[str, Any] | None) -> messaging.APNSConfig | None:
    if not value:
        return None
    payload = value.get("payload")
    return messaging.APNSConfig(
        headers=_string_map(value.get("headers")),
        payload=_apns_payload(payload) if payload else None,
    )


def _apns_payload(value: Mapping[str, Any]) -> messaging.APNSPayload:
    custom = {key: item for key, item in value.items() if key != "aps"}
    return messaging.APNSPayload(aps=_aps(value.get("aps") or {}), **custom)


def _aps(value: Mapping[str, Any]) -> messaging.Aps:
    known = set(APS_FIELDS) | {"alert", "content-available", "mutable-content"}
    alert = value.get("alert")
    if isinstance(alert, Mapping):
        alert = messaging.ApsAlert(**_rename(alert, APS_ALERT_FIELDS))
    custom_data = {key: item for key, item in value.items() if key not in known}
    return messaging.Aps(
        alert=alert,
        content_available=bool(value.get("content-available")) or None,
        mutable_content=bool(value.get("mutable-content")) or None,
        custom_data=custom_data or None,
        **_rename(value, APS_FIELDS),
    )


def _webpush(value: Mapping[str, Any] | None) -> messaging.WebpushConfig | None:
    if not value:
        return None
    notification = value.get("notification")
    link = (value.get("fcmOptions") or {}).get("link")
    return messaging.WebpushConfig(
        headers=_string_map(value.get("headers")),
        data=_string_map(value.get("data")),
        notification=(
            messaging.WebpushNotification(**_rename(notification, WEBPUSH_NOTIFICATION_FIELDS))
            if notification
            else None
        ),
        fcm_options=messaging.WebpushFCMOptions(link=link) if link else None,
    )


def _fcm_options(value: Mapping[str, Any] | None) -> messaging.FCMOptions | None:
    if not value:
        return None
    return messaging.FCMOptions(analytics_label=value.get("analyticsLabel"))


def _rename(value: Mapping[str, Any], fields: Mapping[str, str]) -> dict[str, Any]:
    return {fields[key]: item for key, item in value.items() if key in fields}


def _string_map(value: Mapping[str, Any] | None) -> dict[str, str] | None:
    # FCM 은 data/headers 값으로 문자열만 허용한다.
    if not value:
        return None
    return {str(key): item if isinstance(item, str) else str(item) for key, item in value.items()}
