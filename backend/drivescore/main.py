from contextlib import asynccontextmanager

from fastapi import FastAPI

from drivescore.core.config import settings
from drivescore.core.db import SessionLocal
from drivescore.core.logging_setup import configure_logging
from drivescore.core.observability import setup_observability
from drivescore.routes.garage import router as garage_router
from drivescore.routes.sessions import router as sessions_router
from drivescore.routes.stats import router as stats_router
from drivescore.routes.trips import router as trips_router
from drivescore.routes.users import router as users_router
from drivescore.services.trip_writer import TripWriter

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.trip_writer = TripWriter(SessionLocal, max_workers=settings.TRIP_WRITER_MAX_WORKERS)
    try:
        yield
    finally:
        app.state.trip_writer.shutdown()


app = FastAPI(title="DriveScore", lifespan=lifespan)
setup_observability(app, settings)

app.include_router(users_router)
app.include_router(sessions_router)
app.include_router(trips_router)
app.include_router(stats_router)
app.include_router(garage_router)


@app.get("/health")
def health():
    return {"status": "ok"}
