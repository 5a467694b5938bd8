from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SendError(_CamelModel):
    code: str
    message: str


class SendOutcome(_CamelModel):
    token: str
    message_index: int = Field(..., ge=1, alias="messageIndex")
    success: bool
    message_id: str | None = Field(default=None, alias="messageId")
    error: SendError | None = None


class PushSummary(_CamelModel):
    total_tokens: int = Field(..., alias="totalTokens")
    messages_per_token: int = Field(..., alias="messagesPerToken")
    total_messages: int = Field(..., alias="totalMessages")
    success_count: int = Field(..., alias="successCount")
    failure_count: int = Field(..., alias="failureCount")


class PushResponse(_CamelModel):
    success: bool = True
    summary: PushSummary
    results: list[SendOutcome]
    sent_at: datetime = Field(..., alias="sentAt")


class HealthStatus(_CamelModel):
    status: str
    fcm_initialized: bool = Field(..., alias="fcmInitialized")
    timestamp: datetime
