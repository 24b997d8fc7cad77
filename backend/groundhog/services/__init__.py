from groundhog.services.aggregator import SENSOR_FIELDS, FieldSummary, average_fields, summarize_fields
from groundhog.services.heatmap import build_heatmap
from groundhog.services.pipeline import MissingAnalysisData, run_ai_analysis, run_chemical_analysis
from groundhog.services.predictor_client import (
    NutrientPredictorClient,
    PredictionError,
    PredictionTimeout,
    nutrient_predictor,
)
from groundhog.services.runs import RunCancelled, RunRegistry, analysis_runs
from groundhog.services.soil_advisor import SoilAdvisor, soil_advisor
from groundhog.services.soil_status import assess_nutrients, assess_sensors
from groundhog.services.telemetry import RelayState, TelemetryNotConnected, TelemetryRelay, build_relay

__all__ = [
    "SENSOR_FIELDS",
    "FieldSummary",
    "MissingAnalysisData",
    "NutrientPredictorClient",
    "PredictionError",
    "PredictionTimeout",
    "RelayState",
    "RunCancelled",
    "RunRegistry",
    "SoilAdvisor",
    "TelemetryNotConnected",
    "TelemetryRelay",
    "analysis_runs",
    "assess_nutrients",
    "assess_sensors",
    "average_fields",
    "build_heatmap",
    "build_relay",
    "nutrient_predictor",
    "run_ai_analysis",
    "run_chemical_analysis",
    "soil_advisor",
    "summarize_fields",
]
