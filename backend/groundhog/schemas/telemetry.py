from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RoverStatus(BaseModel):
    lat: float | None = None
    long: float | None = None
    heading_deg: float | None = None
    command: str | None = None
    updated_at: datetime | None = None


class SensorSample(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    farm_id: str | None = None
    created_at: str | None = None
    temperature: float | None = None
    humidity: float | None = None
    ec: float | None = Field(default=None, alias="EC")
    ph: float | None = Field(default=None, alias="pH")
    received_at: datetime | None = None


class ChemicalPush(BaseModel):
    """Chemical estimate pushed over the broker, normalised from either wire shape."""

    source: Literal["named", "ppm"]
    nitrogen: float = 0
    phosphorus: float = 0
    potassium: float = 0
    copper: float = 0
    iron: float = 0
    zinc: float = 0
    boron: float = 0
    created_at: str | None = None


class RoverCommand(BaseModel):
    command: Literal["drive", "turn", "probe"]
    value: int


class TelemetrySnapshot(BaseModel):
    status: str
    last_error: str | None
    rover: RoverStatus
    latest_sensor: SensorSample | None
    sensor_history: list[SensorSample]
    latest_chemical: ChemicalPush | None
