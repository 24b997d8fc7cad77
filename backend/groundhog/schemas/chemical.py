import datetime as dt

from pydantic import BaseModel, ConfigDict


class NutrientPrediction(BaseModel):
    """Integer ppm values returned by the nutrient regression endpoint."""

    nitrogen: int
    phosphorus: int
    potassium: int
    copper: int
    iron: int
    zinc: int
    boron: int
    sulphur: int


class ChemicalAnalysisRequest(BaseModel):
    date: dt.date | None = None


class ChemicalEstimateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    farm_id: str
    created_at: dt.datetime
    nitrogen: int
    phosphorus: int
    potassium: int
    ec: float
    sulphur: int
    ph: float
    zinc: int
    iron: int
    boron: int
    copper: int
