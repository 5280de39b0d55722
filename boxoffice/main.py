"""
FastAPI app entrypoint.

Box office console backend: show time planner sync against the remote planner service.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boxoffice.api.routes import schedule
from boxoffice.config import settings
from boxoffice.core.errors import RemoteServiceError
from boxoffice.services.planner import PlannerClient
from boxoffice.services.showtime import ScheduleSession

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = ScheduleSession(PlannerClient())
    try:
        slots = await session.open()
        logger.info("Slot catalog loaded: %s slots", len(slots))
    except RemoteServiceError as e:
        # Routes still come up; /schedule/slots stays empty until the service is reachable
        logger.warning("Slot catalog could not be loaded on startup: %s", e, exc_info=True)
    app.state.schedule_session = session
    logger.info("Backend ready; planner service at %s", session.client.config.base_url)
    yield


app = FastAPI(title="Box Office Console", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production console
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedule.router, prefix="/schedule", tags=["schedule"])


@app.get("/health")
def health():
    return {"status": "ok"}
