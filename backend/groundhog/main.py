import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from groundhog.api import router
from groundhog.core import Base, engine, settings
from groundhog.models import AIAnalysis, ChemicalEstimate, Farm, SensorPoint, Waypoint, WaypointPath  # noqa: F401
from groundhog.services import build_relay
from groundhog.utils.logger import setup_logging

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

app = FastAPI(
    title="Groundhog Farm Monitor API",
    version="0.1.0",
    description="Farm sensor data, soil nutrient estimates, AI soil analysis and rover telemetry.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.on_event("startup")
def on_startup() -> None:
    setup_logging()
    Base.metadata.create_all(bind=engine)
    app.state.relay = build_relay()


@app.on_event("shutdown")
def on_shutdown() -> None:
    relay = getattr(app.state, "relay", None)
    if relay is not None:
        relay.close()
        app.state.relay = None


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Groundhog backend is running", "docs": "/docs"}
