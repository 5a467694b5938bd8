from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import firebase_admin
from firebase_admin import credentials

from push_relay.core.config import Settings

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_APP_NAME = "[DEFAULT]"


@dataclass
class FirebaseInit:
    """초기화 결과. ready 인 경우에만 발송 핸들을 만들 수 있다."""

    app: firebase_admin.App | None = None
    method: str | None = None
    error: str | None = None

    @property
    def ready(self) -> bool:
        return self.app is not None


def initialize_firebase(settings: Settings, *, name: str = DEFAULT_APP_NAME) -> FirebaseInit:
    """
    서비스 계정 자격 증명을 다음 순서로 찾아 Firebase 앱을 초기화한다.

    1. FIREBASE_SERVICE_ACCOUNT_PATH (JSON 파일 경로)
    2. FIREBASE_SERVICE_ACCOUNT (JSON 문자열)
    3. FIREBASE_PROJECT_ID / FIREBASE_PRIVATE_KEY / FIREBASE_CLIENT_EMAIL
    """
    try:
        resolved = _resolve_certificate(settings)
        if resolved is None:
            logger.warning("FCM 초기화 실패: Firebase 자격 증명 환경 변수를 확인하세요.")
            return FirebaseInit(error="Firebase credentials are not configured.")

        method, certificate = resolved
        app = _get_or_create_app(certificate, name)
    except Exception as exc:  # noqa: BLE001
        logger.error("FCM 초기화 오류: %s", exc)
        return FirebaseInit(error=str(exc))

    logger.info("FCM 초기화 완료 (method=%s)", method)
    return FirebaseInit(app=app, method=method)


def _resolve_certificate(settings: Settings) -> tuple[str, credentials.Certificate] | None:
    if settings.firebase_service_account_path:
        path = Path(settings.firebase_service_account_path).resolve()
        return "file", credentials.Certificate(str(path))

    if settings.firebase_service_account:
        info = json.loads(settings.firebase_service_account)
        return "env_json", credentials.Certificate(info)

    if settings.has_individual_credentials:
        info: dict[str, Any] = {
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key": settings.firebase_private_key.replace("\\n", "\n"),
            "client_email": settings.firebase_client_email,
            "token_uri": GOOGLE_TOKEN_URI,
        }
        return "env_vars", credentials.Certificate(info)

    return None


def _get_or_create_app(certificate: credentials.Certificate, name: str) -> firebase_admin.App:
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        return firebase_admin.initialize_app(certificate, name=name)
