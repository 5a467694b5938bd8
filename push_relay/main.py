import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from push_relay.api.routes import api_router
from push_relay.core.config import settings
from push_relay.core.errors import register_exception_handlers
from push_relay.core.firebase import initialize_firebase
from push_relay.core.logging_config import configure_logging
from push_relay.services.fcm_service import FcmSender

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0", debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router)
# 라우터에 없는 경로는 static 디렉터리에서 찾는다.
app.mount("/", StaticFiles(directory=settings.static_dir, html=True, check_dir=False), name="static")


@app.on_event("startup")
def _startup() -> None:
    firebase = initialize_firebase(settings)
    app.state.firebase = firebase
    app.state.push_sender = FcmSender(firebase.app) if firebase.ready else None
