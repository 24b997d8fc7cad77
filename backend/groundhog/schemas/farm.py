from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FarmCreate(BaseModel):
    farm_name: str = Field(..., min_length=1)
    farmer_name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90.0, le=90.0)
    long: float = Field(..., ge=-180.0, le=180.0)


class FarmOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    farm_id: str
    farm_name: str
    farmer_name: str
    created_at: datetime | None
    lat: float
    long: float


class LoginRequest(BaseModel):
    farm_id: str = Field(..., min_length=1)


class SessionOut(BaseModel):
    farm_id: str | None
    authenticated: bool
