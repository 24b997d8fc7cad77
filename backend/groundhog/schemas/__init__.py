from groundhog.schemas.analysis import (
    AIAnalysisInput,
    AIAnalysisOut,
    AIAnalysisOutput,
    PredictedNutrients,
    SensorSnapshot,
)
from groundhog.schemas.chemical import ChemicalAnalysisRequest, ChemicalEstimateOut, NutrientPrediction
from groundhog.schemas.farm import FarmCreate, FarmOut, LoginRequest, SessionOut
from groundhog.schemas.sensor import (
    HeatmapPoint,
    HeatmapResponse,
    SensorAverages,
    SensorDatesResponse,
    SensorPointListResponse,
    SensorPointOut,
)
from groundhog.schemas.soil import ParameterStatus, SoilStatusResponse
from groundhog.schemas.telemetry import ChemicalPush, RoverCommand, RoverStatus, SensorSample, TelemetrySnapshot
from groundhog.schemas.waypoint import WaypointIn, WaypointOut, WaypointPathIn, WaypointPathListResponse, WaypointPathOut

__all__ = [
    "AIAnalysisInput",
    "AIAnalysisOut",
    "AIAnalysisOutput",
    "ChemicalAnalysisRequest",
    "ChemicalEstimateOut",
    "ChemicalPush",
    "FarmCreate",
    "FarmOut",
    "HeatmapPoint",
    "HeatmapResponse",
    "LoginRequest",
    "NutrientPrediction",
    "ParameterStatus",
    "PredictedNutrients",
    "RoverCommand",
    "RoverStatus",
    "SensorAverages",
    "SensorDatesResponse",
    "SensorPointListResponse",
    "SensorPointOut",
    "SensorSample",
    "SensorSnapshot",
    "SessionOut",
    "SoilStatusResponse",
    "TelemetrySnapshot",
    "WaypointIn",
    "WaypointOut",
    "WaypointPathIn",
    "WaypointPathListResponse",
    "WaypointPathOut",
]
