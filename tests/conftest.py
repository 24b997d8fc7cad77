import json
import os
from datetime import datetime
from types import SimpleNamespace

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""
os.environ["OPENAI_API_KEY"] = "test-key"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from groundhog.api.routes import get_advisor, get_predictor  # noqa: E402
from groundhog.core.database import Base, SessionLocal, engine  # noqa: E402
from groundhog.crud import sensor_crud  # noqa: E402
from groundhog.main import app  # noqa: E402
from groundhog.schemas.chemical import NutrientPrediction  # noqa: E402
from groundhog.services.soil_advisor import SoilAdvisor  # noqa: E402
from groundhog.services.telemetry import TelemetryRelay, TelemetryTopics  # noqa: E402


class FakePredictor:
    def __init__(self, result=None, error=None, on_predict=None):
        self.result = result or NutrientPrediction(
            nitrogen=46, phosphorus=12, potassium=150, copper=3, iron=7, zinc=5, boron=1, sulphur=9
        )
        self.error = error
        self.on_predict = on_predict
        self.calls = []

    def predict(self, temperature, moisture_fraction, ec, ph):
        self.calls.append({"temperature": temperature, "moisture_fraction": moisture_fraction, "ec": ec, "ph": ph})
        if self.on_predict is not None:
            self.on_predict()
        if self.error is not None:
            raise self.error
        return self.result


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_openai_client(content=None, error=None):
    completions = FakeCompletions(content=content, error=error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class FakeMqttClient:
    def __init__(self):
        self.connect_calls = []
        self.subscriptions = []
        self.published = []
        self.loop_running = False
        self.disconnected = False
        self.publish_rc = 0

    def connect_async(self, host, port, keepalive):
        self.connect_calls.append((host, port, keepalive))

    def loop_start(self):
        self.loop_running = True

    def loop_stop(self):
        self.loop_running = False

    def subscribe(self, topics):
        self.subscriptions.append(topics)

    def publish(self, topic, payload):
        self.published.append((topic, payload))
        return SimpleNamespace(rc=self.publish_rc)

    def disconnect(self):
        self.disconnected = True


def reason(is_failure=False):
    return SimpleNamespace(is_failure=is_failure)


def broker_message(topic, payload):
    if not isinstance(payload, (bytes, str)):
        payload = json.dumps(payload)
    return SimpleNamespace(topic=topic, payload=payload)


@pytest.fixture
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(reset_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def predictor():
    return FakePredictor()


@pytest.fixture
def advisor():
    client = fake_openai_client(
        content='{"summary": "Soil is balanced. Nitrogen is adequate.", '
        '"todos": ["Keep irrigating", "Test again next week", "Add mulch"], '
        '"status": "Healthy soil"}'
    )
    return SoilAdvisor(api_key="test-key", model="gpt-4", client=client)


@pytest.fixture
def mqtt_client():
    return FakeMqttClient()


@pytest.fixture
def relay(mqtt_client):
    return TelemetryRelay(
        host="broker.test",
        port=8884,
        topics=TelemetryTopics.with_prefix("jumpstart"),
        client_factory=lambda: mqtt_client,
    )


@pytest.fixture
def client(reset_database, predictor, advisor, relay):
    app.dependency_overrides[get_predictor] = lambda: predictor
    app.dependency_overrides[get_advisor] = lambda: advisor
    with TestClient(app) as test_client:
        app.state.relay = relay
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def farm_client(client):
    response = client.post(
        "/api/farms",
        json={"farm_name": "Green Acres", "farmer_name": "Sam Rivera", "lat": 38.6, "long": -90.2},
    )
    assert response.status_code == 201
    return client


@pytest.fixture
def add_points(db):
    def _add(farm_id, created_at, *readings):
        points = []
        for index, reading in enumerate(readings):
            values = {"lat": 38.6 + index * 0.0001, "long": -90.2, "created_at": created_at}
            values.update(reading)
            points.append(sensor_crud.create(db, farm_id, values))
        return points

    return _add


DAY_ONE = datetime(2026, 10, 14, 9, 30)
DAY_TWO = datetime(2026, 10, 15, 14, 0)
