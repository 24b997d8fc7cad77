import pytest
import requests

from groundhog.services import predictor_client
from groundhog.services.predictor_client import (
    NutrientPredictorClient,
    PredictionError,
    PredictionTimeout,
    parse_prediction,
    round_half_up,
)

PPM_BODY = {
    "N_ppm": 45.6,
    "P_ppm": 12.3,
    "K_ppm": 150.5,
    "Cu_ppm": 2.5,
    "Fe_ppm": 7.49,
    "Zn_ppm": 4.0,
    "B_ppm": 0.7,
    "S_ppm": 9.2,
}


class FakeResponse:
    def __init__(self, body=None, status_code=200, json_error=False):
        self.body = body
        self.status_code = status_code
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.json_error:
            raise ValueError("not json")
        return self.body


@pytest.fixture
def captured(monkeypatch):
    calls = {}

    def install(response=None, error=None):
        def fake_post(url, json=None, timeout=None):
            calls.update(url=url, json=json, timeout=timeout)
            if error is not None:
                raise error
            return response

        monkeypatch.setattr(predictor_client.requests, "post", fake_post)
        return calls

    return install


def test_round_half_up():
    assert round_half_up(45.6) == 46
    assert round_half_up(12.3) == 12
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(150.49) == 150


def test_predict_sends_request_and_rounds(captured):
    calls = captured(FakeResponse(PPM_BODY))
    client = NutrientPredictorClient("https://predictor.test/", timeout=10)

    prediction = client.predict(temperature=24.0, moisture_fraction=0.42, ec=1.1, ph=6.8)

    assert calls["url"] == "https://predictor.test/predict"
    assert calls["json"] == {"temp": 24.0, "moisture": 0.42, "ec": 1.1, "pH": 6.8}
    assert calls["timeout"] == 10
    assert prediction.nitrogen == 46
    assert prediction.phosphorus == 12
    assert prediction.potassium == 151
    assert prediction.copper == 3
    assert prediction.iron == 7
    assert prediction.boron == 1
    assert prediction.sulphur == 9


def test_timeout_is_reported_separately(captured):
    captured(error=requests.Timeout("read timed out"))
    client = NutrientPredictorClient("https://predictor.test", timeout=0.5)

    with pytest.raises(PredictionTimeout):
        client.predict(temperature=20, moisture_fraction=0.3, ec=1.0, ph=7.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"error": requests.ConnectionError("refused")},
        {"response": FakeResponse(status_code=500)},
        {"response": FakeResponse(json_error=True)},
        {"response": FakeResponse(["not", "an", "object"])},
    ],
)
def test_transport_and_body_failures(captured, kwargs):
    captured(**kwargs)
    client = NutrientPredictorClient("https://predictor.test", timeout=10)

    with pytest.raises(PredictionError) as exc_info:
        client.predict(temperature=20, moisture_fraction=0.3, ec=1.0, ph=7.0)
    assert not isinstance(exc_info.value, PredictionTimeout)


def test_missing_nutrient_is_an_error():
    body = dict(PPM_BODY)
    del body["Zn_ppm"]

    with pytest.raises(PredictionError, match="Zn_ppm"):
        parse_prediction(body)


def test_non_numeric_nutrient_is_an_error():
    with pytest.raises(PredictionError, match="N_ppm"):
        parse_prediction({**PPM_BODY, "N_ppm": "lots"})


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), 1e400])
def test_non_finite_nutrient_is_an_error(value):
    with pytest.raises(PredictionError, match="K_ppm"):
        parse_prediction({**PPM_BODY, "K_ppm": value})


def test_non_finite_body_is_an_error(captured):
    captured(FakeResponse({**PPM_BODY, "N_ppm": float("inf")}))
    client = NutrientPredictorClient("https://predictor.test", timeout=10)

    with pytest.raises(PredictionError):
        client.predict(temperature=20, moisture_fraction=0.3, ec=1.0, ph=7.0)
