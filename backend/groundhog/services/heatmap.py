from collections.abc import Iterable

from groundhog.models.sensor_point import SensorPoint
from groundhog.schemas.sensor import HeatmapPoint, HeatmapResponse

HEATMAP_RANGES: dict[str, tuple[float, float]] = {
    "moisture": (0.0, 100.0),
    "temperature": (0.0, 40.0),
    "ph": (0.0, 14.0),
    "ec": (0.0, 5.0),
}

HEATMAP_COLORSCALES: dict[str, list[tuple[float, str]]] = {
    "moisture": [
        (0.0, "rgba(33,102,172,0)"),
        (0.2, "rgb(103,169,207)"),
        (0.4, "rgb(209,229,240)"),
        (0.6, "rgb(253,219,199)"),
        (0.8, "rgb(239,138,98)"),
        (1.0, "rgb(178,24,43)"),
    ],
    "temperature": [
        (0.0, "rgba(0,0,255,0)"),
        (0.2, "rgb(0,255,255)"),
        (0.4, "rgb(0,255,0)"),
        (0.6, "rgb(255,255,0)"),
        (0.8, "rgb(255,128,0)"),
        (1.0, "rgb(255,0,0)"),
    ],
    "ph": [
        (0.0, "rgba(255,255,255,0)"),
        (0.2, "rgb(173,216,230)"),
        (0.4, "rgb(144,238,144)"),
        (0.6, "rgb(255,255,0)"),
        (0.8, "rgb(255,165,0)"),
        (1.0, "rgb(255,0,0)"),
    ],
    "ec": [
        (0.0, "rgba(255,255,255,0)"),
        (0.2, "rgb(0,191,255)"),
        (0.4, "rgb(30,144,255)"),
        (0.6, "rgb(0,0,255)"),
        (0.8, "rgb(138,43,226)"),
        (1.0, "rgb(75,0,130)"),
    ],
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def build_heatmap(points: Iterable[SensorPoint], field: str) -> HeatmapResponse:
    if field not in HEATMAP_RANGES:
        raise ValueError(f"Unsupported heatmap field: {field}")

    low, high = HEATMAP_RANGES[field]
    heat_points: list[HeatmapPoint] = []
    for point in points:
        value = getattr(point, field)
        if value is None:
            continue
        heat_points.append(
            HeatmapPoint(
                lat=point.lat,
                long=point.long,
                value=value,
                weight=round(_clamp((value - low) / (high - low), 0.0, 1.0), 4),
            )
        )

    return HeatmapResponse(
        field=field,
        value_range=(low, high),
        colorscale=HEATMAP_COLORSCALES[field],
        points=heat_points,
    )
