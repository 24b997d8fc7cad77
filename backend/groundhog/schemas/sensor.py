import datetime as dt

from pydantic import BaseModel, ConfigDict


class SensorPointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    farm_id: str
    created_at: dt.datetime
    lat: float
    long: float
    moisture: float | None
    temperature: float | None
    ph: float | None
    ec: float | None


class SensorPointListResponse(BaseModel):
    items: list[SensorPointOut]
    count: int


class SensorDatesResponse(BaseModel):
    dates: list[dt.date]


class SensorAverages(BaseModel):
    date: dt.date | None
    point_count: int
    temperature: float
    ph: float
    ec: float
    moisture: float
    # per-field number of contributing points; 0 means the average is "no data"
    counts: dict[str, int]


class HeatmapPoint(BaseModel):
    lat: float
    long: float
    value: float
    weight: float


class HeatmapResponse(BaseModel):
    field: str
    value_range: tuple[float, float]
    colorscale: list[tuple[float, str]]
    points: list[HeatmapPoint]
