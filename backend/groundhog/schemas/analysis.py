from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SensorSnapshot(BaseModel):
    """Sensor means sent to the language model; ``None`` means no point reported the field."""

    model_config = ConfigDict(populate_by_name=True)

    ph: float | None = Field(default=None, alias="pH")
    ec: float | None = Field(default=None, alias="EC")
    temperature_c: float | None = None
    moisture_pct: float | None = None


class PredictedNutrients(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nitrogen: float = Field(alias="N_ppm")
    phosphorus: float = Field(alias="P_ppm")
    potassium: float = Field(alias="K_ppm")
    copper: float = Field(alias="Cu_ppm")
    iron: float = Field(alias="Fe_ppm")
    zinc: float = Field(alias="Zn_ppm")
    boron: float = Field(alias="B_ppm")


class AIAnalysisInput(BaseModel):
    farm_id: str
    sensor_data: SensorSnapshot
    predicted_nutrients: PredictedNutrients


class AIAnalysisOutput(BaseModel):
    summary: str
    todos: list[str] = Field(default_factory=list, max_length=3)
    status: str


class AIAnalysisOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    farm_id: str
    created_at: datetime
    input_data: dict
    output_data: AIAnalysisOutput
    last_updated: datetime
    is_fallback: bool
