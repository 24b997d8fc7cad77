import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from groundhog.core.database import get_db
from groundhog.core.session import (
    FarmSession,
    clear_session_cookie,
    get_farm_session,
    require_farm_session,
    set_session_cookie,
)
from groundhog.crud import analysis_crud, estimate_crud, farm_crud, sensor_crud, waypoint_crud
from groundhog.models.waypoint import WaypointPath
from groundhog.schemas import (
    AIAnalysisOut,
    ChemicalAnalysisRequest,
    ChemicalEstimateOut,
    FarmCreate,
    FarmOut,
    HeatmapResponse,
    LoginRequest,
    NutrientPrediction,
    RoverCommand,
    SensorAverages,
    SensorDatesResponse,
    SensorPointListResponse,
    SensorPointOut,
    SessionOut,
    SoilStatusResponse,
    TelemetrySnapshot,
    WaypointPathIn,
    WaypointPathListResponse,
    WaypointPathOut,
)
from groundhog.services import (
    SENSOR_FIELDS,
    MissingAnalysisData,
    NutrientPredictorClient,
    PredictionError,
    PredictionTimeout,
    RunCancelled,
    SoilAdvisor,
    TelemetryNotConnected,
    TelemetryRelay,
    analysis_runs,
    assess_nutrients,
    assess_sensors,
    build_heatmap,
    nutrient_predictor,
    run_ai_analysis,
    run_chemical_analysis,
    soil_advisor,
    summarize_fields,
)
from groundhog.services.pipeline import AI_ANALYSIS_POINT_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()

# live prediction inputs used when the latest telemetry sample lacks a value
LIVE_DEFAULTS = {"temperature": 25.0, "humidity": 60.0, "ec": 1.5, "ph": 7.0}


def get_predictor() -> NutrientPredictorClient:
    return nutrient_predictor


def get_advisor() -> SoilAdvisor:
    return soil_advisor


def get_relay(request: Request) -> TelemetryRelay:
    relay = getattr(request.app.state, "relay", None)
    if relay is None:
        raise HTTPException(status_code=503, detail="Telemetry relay is not running")
    return relay


def _prediction_http_error(exc: PredictionError) -> HTTPException:
    if isinstance(exc, PredictionTimeout):
        return HTTPException(status_code=504, detail=str(exc))
    return HTTPException(status_code=502, detail=f"Nutrient prediction failed: {exc}")


def _get_path_or_404(db: Session, session: FarmSession, path_id: str) -> WaypointPath:
    path = waypoint_crud.get_path(db, session.farm_id, path_id)
    if path is None:
        raise HTTPException(status_code=404, detail="Waypoint path not found")
    return path


def _live_value(value: float | None, default: float) -> float:
    # zero counts as missing for live samples
    return value if value else default


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/auth/login", response_model=FarmOut)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)) -> FarmOut:
    farm_id = payload.farm_id.strip()
    farm = farm_crud.get_by_farm_id(db, farm_id)
    if farm is None:
        logger.info(f"Login rejected for unknown farm id {farm_id!r}")
        raise HTTPException(status_code=404, detail="Farm ID not found. Check the ID or onboard a new farm.")

    set_session_cookie(response, farm.farm_id)
    return FarmOut.model_validate(farm)


@router.post("/auth/logout", response_model=SessionOut)
def logout(response: Response) -> SessionOut:
    clear_session_cookie(response)
    return SessionOut(farm_id=None, authenticated=False)


@router.get("/auth/me", response_model=SessionOut)
def whoami(session: FarmSession = Depends(get_farm_session)) -> SessionOut:
    return SessionOut(farm_id=session.farm_id, authenticated=not session.is_anonymous)


@router.post("/farms", response_model=FarmOut, status_code=201)
def onboard_farm(payload: FarmCreate, response: Response, db: Session = Depends(get_db)) -> FarmOut:
    try:
        farm = farm_crud.create(db, payload.model_dump())
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="A farm with this name already exists") from exc

    set_session_cookie(response, farm.farm_id)
    return FarmOut.model_validate(farm)


@router.get("/farms/current", response_model=FarmOut)
def get_current_farm(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> FarmOut:
    farm = farm_crud.get_by_farm_id(db, session.farm_id)
    if farm is None:
        raise HTTPException(status_code=404, detail="Farm not found")
    return FarmOut.model_validate(farm)


@router.get("/sensor/points", response_model=SensorPointListResponse)
def get_sensor_points(
    day: date | None = Query(default=None, alias="date"),
    limit: int = Query(default=500, ge=1, le=5000),
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> SensorPointListResponse:
    if day is not None:
        items = sensor_crud.get_for_day(db, session.farm_id, day)[:limit]
    else:
        items = sensor_crud.get_multi(db, session.farm_id, limit=limit)
    serialized = [SensorPointOut.model_validate(item) for item in items]
    return SensorPointListResponse(items=serialized, count=len(serialized))


@router.get("/sensor/dates", response_model=SensorDatesResponse)
def get_sensor_dates(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> SensorDatesResponse:
    return SensorDatesResponse(dates=sensor_crud.get_available_dates(db, session.farm_id))


@router.get("/sensor/averages", response_model=SensorAverages)
def get_sensor_averages(
    day: date | None = Query(default=None, alias="date"),
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> SensorAverages:
    if day is not None:
        points = sensor_crud.get_for_day(db, session.farm_id, day)
    else:
        points = sensor_crud.get_recent(db, session.farm_id, limit=AI_ANALYSIS_POINT_LIMIT)

    summaries = summarize_fields(points, SENSOR_FIELDS)
    means = {field: summary.mean or 0 for field, summary in summaries.items()}
    return SensorAverages(
        date=day,
        point_count=len(points),
        counts={field: summary.count for field, summary in summaries.items()},
        **means,
    )


@router.get("/sensor/heatmap", response_model=HeatmapResponse)
def get_sensor_heatmap(
    field: str = Query(default="moisture"),
    day: date | None = Query(default=None, alias="date"),
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> HeatmapResponse:
    if day is not None:
        points = sensor_crud.get_for_day(db, session.farm_id, day)
    else:
        points = sensor_crud.get_multi(db, session.farm_id, limit=None)

    try:
        return build_heatmap(points, field)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/soil/status", response_model=SoilStatusResponse)
def get_soil_status(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> SoilStatusResponse:
    points = sensor_crud.get_recent(db, session.farm_id, limit=AI_ANALYSIS_POINT_LIMIT)
    summaries = summarize_fields(points, SENSOR_FIELDS)
    estimate = estimate_crud.get_latest(db, session.farm_id)
    return SoilStatusResponse(
        farm_id=session.farm_id,
        sensors=assess_sensors({field: summary.mean for field, summary in summaries.items()}),
        nutrients=assess_nutrients(estimate),
    )


@router.get("/chemical/latest", response_model=ChemicalEstimateOut)
def get_latest_estimate(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> ChemicalEstimateOut:
    estimate = estimate_crud.get_latest(db, session.farm_id)
    if estimate is None:
        raise HTTPException(status_code=404, detail="No chemical estimate available")
    return ChemicalEstimateOut.model_validate(estimate)


@router.get("/chemical/history", response_model=list[ChemicalEstimateOut])
def get_estimate_history(
    limit: int = Query(default=20, ge=1, le=200),
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> list[ChemicalEstimateOut]:
    return [ChemicalEstimateOut.model_validate(item) for item in estimate_crud.get_history(db, session.farm_id, limit)]


@router.post("/chemical/analysis", response_model=ChemicalEstimateOut, status_code=201)
def run_chemical_estimate(
    payload: ChemicalAnalysisRequest,
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
    predictor: NutrientPredictorClient = Depends(get_predictor),
) -> ChemicalEstimateOut:
    try:
        with analysis_runs.run((session.farm_id, "chemical")) as token:
            estimate = run_chemical_analysis(db, session.farm_id, payload.date, predictor, token=token)
    except MissingAnalysisData as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PredictionError as exc:
        raise _prediction_http_error(exc) from exc
    except RunCancelled as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ChemicalEstimateOut.model_validate(estimate)


@router.get("/ai-analysis/latest", response_model=AIAnalysisOut)
def get_latest_analysis(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> AIAnalysisOut:
    record = analysis_crud.get_latest(db, session.farm_id)
    if record is None:
        raise HTTPException(status_code=404, detail="No AI analysis available")
    return AIAnalysisOut.model_validate(record)


@router.post("/ai-analysis/run", response_model=AIAnalysisOut, status_code=201)
def run_soil_analysis(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
    advisor: SoilAdvisor = Depends(get_advisor),
) -> AIAnalysisOut:
    try:
        with analysis_runs.run((session.farm_id, "ai")) as token:
            record = run_ai_analysis(db, session.farm_id, advisor, token=token)
    except MissingAnalysisData as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RunCancelled as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return AIAnalysisOut.model_validate(record)


@router.get("/waypoints/paths", response_model=WaypointPathListResponse)
def list_waypoint_paths(
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> WaypointPathListResponse:
    paths = [WaypointPathOut.model_validate(path) for path in waypoint_crud.get_paths(db, session.farm_id)]
    return WaypointPathListResponse(items=paths, count=len(paths))


@router.post("/waypoints/paths", response_model=WaypointPathOut, status_code=201)
def create_waypoint_path(
    payload: WaypointPathIn,
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> WaypointPathOut:
    path = waypoint_crud.create_path(db, session.farm_id, payload.model_dump())
    return WaypointPathOut.model_validate(path)


@router.get("/waypoints/paths/{path_id}", response_model=WaypointPathOut)
def get_waypoint_path(
    path_id: str,
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> WaypointPathOut:
    return WaypointPathOut.model_validate(_get_path_or_404(db, session, path_id))


@router.put("/waypoints/paths/{path_id}", response_model=WaypointPathOut)
def update_waypoint_path(
    path_id: str,
    payload: WaypointPathIn,
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> WaypointPathOut:
    path = _get_path_or_404(db, session, path_id)
    path = waypoint_crud.update_path(db, path, payload.model_dump())
    return WaypointPathOut.model_validate(path)


@router.delete("/waypoints/paths/{path_id}", status_code=204)
def delete_waypoint_path(
    path_id: str,
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
) -> Response:
    path = _get_path_or_404(db, session, path_id)
    waypoint_crud.delete_path(db, path)
    return Response(status_code=204)


@router.get("/telemetry/status")
def get_telemetry_status(relay: TelemetryRelay = Depends(get_relay)) -> dict[str, Any]:
    return {"status": relay.state.value, "last_error": relay.last_error}


@router.post("/telemetry/connect")
def connect_telemetry(relay: TelemetryRelay = Depends(get_relay)) -> dict[str, Any]:
    state = relay.connect()
    return {"status": state.value, "last_error": relay.last_error}


@router.post("/telemetry/disconnect")
def disconnect_telemetry(relay: TelemetryRelay = Depends(get_relay)) -> dict[str, Any]:
    state = relay.disconnect()
    return {"status": state.value, "last_error": relay.last_error}


@router.get("/telemetry/snapshot", response_model=TelemetrySnapshot)
def get_telemetry_snapshot(relay: TelemetryRelay = Depends(get_relay)) -> TelemetrySnapshot:
    return relay.snapshot()


@router.post("/telemetry/command")
def send_rover_command(command: RoverCommand, relay: TelemetryRelay = Depends(get_relay)) -> dict[str, str]:
    try:
        message = relay.publish_command(command.command, command.value)
    except TelemetryNotConnected as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"sent": message}


@router.post("/telemetry/waypoints/{path_id}")
def upload_path_to_rover(
    path_id: str,
    session: FarmSession = Depends(require_farm_session),
    db: Session = Depends(get_db),
    relay: TelemetryRelay = Depends(get_relay),
) -> dict[str, Any]:
    path = _get_path_or_404(db, session, path_id)
    if not path.waypoints:
        raise HTTPException(status_code=400, detail="Path has no waypoints")

    try:
        relay.upload_waypoints(path.waypoints)
    except TelemetryNotConnected as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"path_id": path.id, "uploaded": len(path.waypoints)}


@router.post("/telemetry/predict", response_model=NutrientPrediction)
def predict_from_live_sample(
    relay: TelemetryRelay = Depends(get_relay),
    predictor: NutrientPredictorClient = Depends(get_predictor),
) -> NutrientPrediction:
    sample = relay.snapshot().latest_sensor
    if sample is None:
        raise HTTPException(status_code=404, detail="No live sensor sample received yet")

    try:
        return predictor.predict(
            temperature=_live_value(sample.temperature, LIVE_DEFAULTS["temperature"]),
            moisture_fraction=_live_value(sample.humidity, LIVE_DEFAULTS["humidity"]) / 100,
            ec=_live_value(sample.ec, LIVE_DEFAULTS["ec"]),
            ph=_live_value(sample.ph, LIVE_DEFAULTS["ph"]),
        )
    except PredictionError as exc:
        raise _prediction_http_error(exc) from exc
