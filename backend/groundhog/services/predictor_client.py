import logging
import math
from typing import Any

import requests

from groundhog.core.config import settings
from groundhog.schemas.chemical import NutrientPrediction

logger = logging.getLogger(__name__)

# wire symbol -> NutrientPrediction field
NUTRIENT_SYMBOLS = {
    "N": "nitrogen",
    "P": "phosphorus",
    "K": "potassium",
    "Cu": "copper",
    "Fe": "iron",
    "Zn": "zinc",
    "B": "boron",
    "S": "sulphur",
}


class PredictionError(Exception):
    """The nutrient endpoint could not be reached or answered badly."""


class PredictionTimeout(PredictionError):
    pass


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_prediction(body: Any) -> NutrientPrediction:
    if not isinstance(body, dict):
        raise PredictionError(f"Unexpected prediction payload type: {type(body).__name__}")

    values: dict[str, int] = {}
    for symbol, field in NUTRIENT_SYMBOLS.items():
        raw = body.get(f"{symbol}_ppm")
        try:
            values[field] = round_half_up(float(raw))
        except (TypeError, ValueError, OverflowError) as exc:
            raise PredictionError(f"Prediction is missing a numeric {symbol}_ppm value") from exc
    return NutrientPrediction(**values)


class NutrientPredictorClient:
    def __init__(self, base_url: str, timeout: float) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def predict(self, temperature: float, moisture_fraction: float, ec: float, ph: float) -> NutrientPrediction:
        payload = {"temp": temperature, "moisture": moisture_fraction, "ec": ec, "pH": ph}
        try:
            response = requests.post(f"{self.base_url}/predict", json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            logger.error(f"Nutrient prediction timed out after {self.timeout}s")
            raise PredictionTimeout(f"Prediction request timed out after {self.timeout} seconds") from exc
        except requests.RequestException as exc:
            logger.error(f"Nutrient prediction request failed: {exc}")
            raise PredictionError(f"Prediction request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Nutrient prediction returned a non-JSON body")
            raise PredictionError("Prediction response is not JSON") from exc

        prediction = parse_prediction(body)
        logger.info(f"Nutrient prediction received: {prediction.model_dump()}")
        return prediction


nutrient_predictor = NutrientPredictorClient(settings.predictor_base_url, settings.predictor_timeout)
