from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WaypointIn(BaseModel):
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90.0, le=90.0)
    long: float = Field(..., ge=-180.0, le=180.0)


class WaypointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    lat: float
    long: float
    order_index: int


class WaypointPathIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    is_active: bool = False
    waypoints: list[WaypointIn] = Field(default_factory=list)


class WaypointPathOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    farm_id: str
    name: str
    description: str | None
    is_active: bool
    created_at: datetime | None
    waypoints: list[WaypointOut]


class WaypointPathListResponse(BaseModel):
    items: list[WaypointPathOut]
    count: int
