from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class PushRelayError(RuntimeError):
    """요청 단위로 실패를 알리는 오류. 응답 본문은 {success, error, code?} 형태."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.message}
        if self.code is not None:
            body["code"] = self.code
        return body


class PushRequestError(PushRelayError):
    status_code = status.HTTP_400_BAD_REQUEST


class ProviderNotReadyError(PushRelayError):
    pass


class MessageBuildError(PushRelayError):
    pass


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PushRelayError)
    async def _push_relay_error(request: Request, exc: PushRelayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        error = PushRequestError("request body must be valid JSON.")
        return JSONResponse(status_code=error.status_code, content=error.to_body())
