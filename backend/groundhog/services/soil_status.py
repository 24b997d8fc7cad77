from dataclasses import dataclass
from typing import Any, Mapping

from groundhog.schemas.soil import ParameterStatus


@dataclass(frozen=True)
class SensorRange:
    parameter: str
    label: str
    low: float
    high: float
    low_band: str
    ok_band: str
    high_band: str
    # ok-band text for the advisor prompt, when it differs from low-high
    prompt_ok: str | None = None

    @property
    def ok_text(self) -> str:
        return self.prompt_ok or f"{self.low:g}-{self.high:g}"


SENSOR_RANGES = (
    SensorRange("ph", "pH", 6.0, 7.5, "acidic", "good", "alkaline", prompt_ok="6-7"),
    SensorRange("ec", "EC (mS/cm)", 0.3, 1.5, "low fertility", "good", "high salts"),
    SensorRange("moisture", "Moisture %", 25.0, 60.0, "dry", "ok", "wet"),
    SensorRange("temperature", "Temp C", 10.0, 32.0, "cold stress", "ok", "heat stress", prompt_ok="10-30"),
)

# field -> (symbol, minimum ppm)
NUTRIENT_MINIMUMS = {
    "nitrogen": ("N", 25.0),
    "phosphorus": ("P", 15.0),
    "potassium": ("K", 100.0),
    "iron": ("Fe", 5.0),
    "zinc": ("Zn", 4.0),
    "boron": ("B", 0.8),
    "copper": ("Cu", 2.0),
}


def _classify_sensor(rng: SensorRange, value: float | None) -> ParameterStatus:
    if value is None:
        return ParameterStatus(parameter=rng.parameter, value=None, band="unknown", message=f"{rng.label}: no data")
    if value < rng.low:
        band, message = rng.low_band, f"{rng.label} below {rng.low:g} ({value:.2f})"
    elif value > rng.high:
        band, message = rng.high_band, f"{rng.label} above {rng.high:g} ({value:.2f})"
    else:
        band, message = rng.ok_band, f"{rng.label} within {rng.low:g}-{rng.high:g} ({value:.2f})"
    return ParameterStatus(parameter=rng.parameter, value=value, band=band, message=message)


def assess_sensors(means: Mapping[str, float | None]) -> list[ParameterStatus]:
    return [_classify_sensor(rng, means.get(rng.parameter)) for rng in SENSOR_RANGES]


def assess_nutrients(estimate: Any) -> list[ParameterStatus]:
    statuses: list[ParameterStatus] = []
    for field, (symbol, minimum) in NUTRIENT_MINIMUMS.items():
        value = None if estimate is None else getattr(estimate, field, None)
        if value is None:
            statuses.append(ParameterStatus(parameter=field, value=None, band="unknown", message=f"{symbol}: no data"))
            continue

        value = float(value)
        if value < minimum:
            band, message = "low", f"{symbol} low ({value:g} < {minimum:g} ppm)"
        else:
            band, message = "ok", f"{symbol} adequate ({value:g} ppm)"
        statuses.append(ParameterStatus(parameter=field, value=value, band=band, message=message))
    return statuses


def guideline_text() -> str:
    lines = [
        f"{rng.label}: <{rng.low:g} {rng.low_band}, {rng.ok_text} {rng.ok_band}, >{rng.high:g} {rng.high_band}."
        for rng in SENSOR_RANGES
    ]
    nutrients = ", ".join(f"{symbol}<{minimum:g} low" for symbol, minimum in NUTRIENT_MINIMUMS.values())
    lines.append(f"Nutrients: {nutrients}.")
    return "\n".join(lines)
