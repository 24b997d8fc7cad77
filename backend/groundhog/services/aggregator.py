import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

SENSOR_FIELDS = ("temperature", "ph", "ec", "moisture")


@dataclass(frozen=True)
class FieldSummary:
    mean: float | None
    count: int


def _field_value(point: Any, field: str) -> Any:
    if isinstance(point, Mapping):
        return point.get(field)
    return getattr(point, field, None)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def summarize_fields(points: Iterable[Any], fields: Sequence[str]) -> dict[str, FieldSummary]:
    """Mean and contributing-point count per field.

    Only points where the field holds a number contribute. A field with no
    contributing points has ``mean=None`` so callers can tell "no data" apart
    from a measured zero.
    """
    totals = {field: 0.0 for field in fields}
    counts = {field: 0 for field in fields}

    for point in points:
        for field in fields:
            value = _field_value(point, field)
            if _is_number(value):
                totals[field] += value
                counts[field] += 1

    return {
        field: FieldSummary(
            mean=totals[field] / counts[field] if counts[field] else None,
            count=counts[field],
        )
        for field in fields
    }


def average_fields(points: Iterable[Any], fields: Sequence[str]) -> dict[str, float]:
    """Unweighted mean per field, 0 for fields no point reported."""
    summaries = summarize_fields(points, fields)
    return {field: summary.mean if summary.mean is not None else 0 for field, summary in summaries.items()}
