from types import SimpleNamespace

import pytest

from groundhog.services.aggregator import SENSOR_FIELDS, average_fields, summarize_fields


def test_average_skips_missing_values():
    points = [
        {"temperature": 20.0, "ph": 6.5, "ec": 1.0, "moisture": 40.0},
        {"temperature": 24.0, "ph": None, "ec": 1.4, "moisture": None},
        {"temperature": None, "ph": 7.1, "ec": None, "moisture": 50.0},
    ]

    means = average_fields(points, SENSOR_FIELDS)

    assert means["temperature"] == pytest.approx(22.0)
    assert means["ph"] == pytest.approx(6.8)
    assert means["ec"] == pytest.approx(1.2)
    assert means["moisture"] == pytest.approx(45.0)


def test_field_without_readings_averages_to_zero():
    points = [{"temperature": 21.0, "ph": None}, {"temperature": 23.0}]

    assert average_fields(points, ("temperature", "ph")) == {"temperature": 22.0, "ph": 0}


def test_summary_separates_no_data_from_measured_zero():
    points = [{"ec": 0.0, "ph": None}, {"ec": 0.0}]

    summaries = summarize_fields(points, ("ec", "ph"))

    assert summaries["ec"].mean == 0.0
    assert summaries["ec"].count == 2
    assert summaries["ph"].mean is None
    assert summaries["ph"].count == 0


def test_empty_input():
    summaries = summarize_fields([], SENSOR_FIELDS)

    assert all(summary.mean is None and summary.count == 0 for summary in summaries.values())
    assert average_fields([], SENSOR_FIELDS) == {field: 0 for field in SENSOR_FIELDS}


def test_reads_attributes_and_ignores_non_numbers():
    points = [
        SimpleNamespace(temperature=18.0, ph=6.0),
        SimpleNamespace(temperature=float("nan"), ph=True),
        SimpleNamespace(temperature="hot", ph=7.0),
    ]

    summaries = summarize_fields(points, ("temperature", "ph"))

    assert summaries["temperature"].mean == 18.0
    assert summaries["temperature"].count == 1
    assert summaries["ph"].mean == pytest.approx(6.5)
    assert summaries["ph"].count == 2
