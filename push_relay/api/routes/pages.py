from fastapi import APIRouter
from fastapi.responses import FileResponse

from push_relay.core.config import settings

router = APIRouter(tags=["pages"])


@router.get("/", include_in_schema=False)
async def index() -> FileResponse:
    return FileResponse(settings.static_dir / "index.html")
