from pydantic import BaseModel


class ParameterStatus(BaseModel):
    parameter: str
    value: float | None
    band: str
    message: str


class SoilStatusResponse(BaseModel):
    farm_id: str
    sensors: list[ParameterStatus]
    nutrients: list[ParameterStatus]
