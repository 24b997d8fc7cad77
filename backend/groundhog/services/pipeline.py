"""Sensor points -> means -> external estimate -> persisted record.

Failure policy: a failed external call never produces a stored record that
looks like a successful one. The nutrient regression has no meaningful
substitute, so its errors abort the run before anything is written. The soil
advisor substitutes a canned reply; that reply is stored with
``is_fallback=True`` so readers can tell it apart.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from groundhog.crud import analysis_crud, estimate_crud, sensor_crud
from groundhog.models.ai_analysis import AIAnalysis
from groundhog.models.chemical_estimate import ChemicalEstimate
from groundhog.schemas.analysis import AIAnalysisInput, PredictedNutrients, SensorSnapshot
from groundhog.services.aggregator import SENSOR_FIELDS, average_fields, summarize_fields
from groundhog.services.predictor_client import NutrientPredictorClient
from groundhog.services.runs import RunToken
from groundhog.services.soil_advisor import SoilAdvisor

logger = logging.getLogger(__name__)

AI_ANALYSIS_POINT_LIMIT = 10


class MissingAnalysisData(Exception):
    pass


def _checkpoint(token: RunToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


def run_chemical_analysis(
    db: Session,
    farm_id: str,
    day: date | None,
    predictor: NutrientPredictorClient,
    token: RunToken | None = None,
) -> ChemicalEstimate:
    if day is None:
        dates = sensor_crud.get_available_dates(db, farm_id)
        if not dates:
            raise MissingAnalysisData(f"No sensor points recorded for farm {farm_id}")
        day = dates[0]

    points = sensor_crud.get_for_day(db, farm_id, day)
    if not points:
        raise MissingAnalysisData(f"No sensor points for farm {farm_id} on {day.isoformat()}")

    summaries = summarize_fields(points, SENSOR_FIELDS)
    missing = [field for field, summary in summaries.items() if summary.count == 0]
    if missing:
        logger.warning(f"Chemical analysis for {farm_id} on {day}: no readings for {missing}, sending 0")
    means = average_fields(points, SENSOR_FIELDS)
    logger.info(f"Chemical analysis for {farm_id} on {day}: {len(points)} points, means={means}")
    _checkpoint(token)

    prediction = predictor.predict(
        temperature=means["temperature"],
        moisture_fraction=means["moisture"] / 100,
        ec=means["ec"],
        ph=means["ph"],
    )
    _checkpoint(token)

    estimate = estimate_crud.create(
        db,
        farm_id,
        {**prediction.model_dump(), "ec": means["ec"], "ph": means["ph"]},
    )
    logger.info(f"Chemical estimate {estimate.id} stored for farm {farm_id}")
    return estimate


def build_analysis_input(db: Session, farm_id: str) -> AIAnalysisInput:
    points = sensor_crud.get_recent(db, farm_id, limit=AI_ANALYSIS_POINT_LIMIT)
    estimate = estimate_crud.get_latest(db, farm_id)
    if not points or estimate is None:
        logger.error(
            f"No data available for AI analysis of {farm_id}: "
            f"points={len(points)}, estimate={'yes' if estimate else 'none'}"
        )
        raise MissingAnalysisData("Sensor points and a chemical estimate are both required")

    summaries = summarize_fields(points, SENSOR_FIELDS)
    return AIAnalysisInput(
        farm_id=farm_id,
        sensor_data=SensorSnapshot(
            ph=summaries["ph"].mean,
            ec=summaries["ec"].mean,
            temperature_c=summaries["temperature"].mean,
            moisture_pct=summaries["moisture"].mean,
        ),
        predicted_nutrients=PredictedNutrients(
            nitrogen=estimate.nitrogen,
            phosphorus=estimate.phosphorus,
            potassium=estimate.potassium,
            copper=estimate.copper,
            iron=estimate.iron,
            zinc=estimate.zinc,
            boron=estimate.boron,
        ),
    )


def run_ai_analysis(
    db: Session,
    farm_id: str,
    advisor: SoilAdvisor,
    token: RunToken | None = None,
) -> AIAnalysis:
    analysis_input = build_analysis_input(db, farm_id)
    _checkpoint(token)

    result = advisor.analyze(analysis_input)
    _checkpoint(token)

    record = analysis_crud.create(
        db,
        farm_id,
        input_data=analysis_input.model_dump(by_alias=True),
        output_data=result.output.model_dump(),
        is_fallback=result.fallback,
    )
    logger.info(f"AI analysis {record.id} stored for farm {farm_id} (fallback={result.fallback})")
    return record
