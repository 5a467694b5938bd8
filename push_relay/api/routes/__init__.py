from fastapi import APIRouter

from . import health, messages, pages

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(messages.router)
api_router.include_router(pages.router)
