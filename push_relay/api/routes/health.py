from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from push_relay.api.deps import get_sender
from push_relay.schemas.push import HealthStatus
from push_relay.services.dispatch_service import MessageSender

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthStatus)
async def health(sender: MessageSender | None = Depends(get_sender)) -> HealthStatus:
    return HealthStatus(
        status="ok",
        fcm_initialized=sender is not None,
        timestamp=datetime.now(timezone.utc),
    )
