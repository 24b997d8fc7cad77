import json
import logging
from dataclasses import dataclass
from typing import Any

from openai import OpenAI

from groundhog.core.config import settings
from groundhog.schemas.analysis import AIAnalysisInput, AIAnalysisOutput
from groundhog.services.soil_status import guideline_text

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Analysis completed"
DEFAULT_STATUS = "Analysis completed"
MAX_TODOS = 3

FALLBACK_OUTPUT = AIAnalysisOutput(
    summary="Analysis completed with fallback response",
    todos=["Review soil data manually", "Consider standard soil amendments"],
    status="Analysis completed",
)

SYSTEM_PROMPT = f"""You are an agronomy assistant.
Given pH, EC, temperature_c, moisture_pct, N, P, K, Cu, Fe, Zn, B, output a 2-sentence soil/nutrient summary, exactly 3 actionable to-do's, and a 2-5 word status phrase.
Guidelines:
{guideline_text()}
Values reported as "no data" were not measured; do not treat them as zero.
Mention key issues in summary; make todos short, specific, and direct.
Output only JSON in the exact schema below.
{{
"summary": "<2 sentences>",
"todos": ["<todo1>", "<todo2>", "<todo3>"],
"status": "<2-5 words>"
}}
Example output:
{{
"summary": "pH and EC are optimal with moderate fertility. Nitrogen and zinc are low, possibly limiting growth and flowering.",
"todos": ["Apply light nitrogen fertilizer.", "Spray foliar zinc solution.", "Maintain steady irrigation."],
"status": "Moderate nutrient imbalance"
}}"""


@dataclass(frozen=True)
class AdvisorResult:
    output: AIAnalysisOutput
    fallback: bool


def _fmt(value: float | None, unit: str = "") -> str:
    if value is None:
        return "no data"
    return f"{value:g}{unit}"


def build_user_prompt(analysis_input: AIAnalysisInput) -> str:
    sensors = analysis_input.sensor_data
    nutrients = analysis_input.predicted_nutrients
    return f"""Analyze the following soil data and provide insights:

Farm ID: {analysis_input.farm_id}

Sensor Data:
- pH: {_fmt(sensors.ph)}
- EC (Electrical Conductivity): {_fmt(sensors.ec, " dS/m")}
- Temperature: {_fmt(sensors.temperature_c, " C")}
- Moisture: {_fmt(sensors.moisture_pct, "%")}

Predicted Nutrients (ppm):
- Nitrogen (N): {nutrients.nitrogen:g}
- Phosphorus (P): {nutrients.phosphorus:g}
- Potassium (K): {nutrients.potassium:g}
- Copper (Cu): {nutrients.copper:g}
- Iron (Fe): {nutrients.iron:g}
- Zinc (Zn): {nutrients.zinc:g}
- Boron (B): {nutrients.boron:g}

Please provide:
1. A concise summary of the soil condition
2. 2-3 actionable recommendations (todos)
3. Overall status assessment

Respond in JSON format with keys: summary, todos (array), status."""


def parse_advisor_response(content: str) -> AIAnalysisOutput:
    """Parse the model's JSON reply, defaulting each missing key separately."""
    data: Any = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("Model reply is not a JSON object")

    todos = data.get("todos") or []
    if not isinstance(todos, list):
        todos = [todos]

    return AIAnalysisOutput(
        summary=str(data.get("summary") or DEFAULT_SUMMARY),
        todos=[str(todo) for todo in todos if todo][:MAX_TODOS],
        status=str(data.get("status") or DEFAULT_STATUS),
    )


class SoilAdvisor:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        client: Any = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url or None
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key or None, base_url=self.base_url)
        return self._client

    def analyze(self, analysis_input: AIAnalysisInput) -> AdvisorResult:
        """Ask the model for a summary; never raises, falls back to a canned reply."""
        try:
            completion = self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(analysis_input)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = completion.choices[0].message.content
            if not content:
                raise ValueError("No response content from model")
            output = parse_advisor_response(content)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Soil advisor failed for farm {analysis_input.farm_id}, using fallback: {exc}")
            return AdvisorResult(output=FALLBACK_OUTPUT.model_copy(deep=True), fallback=True)

        logger.info(f"Soil advisor status for farm {analysis_input.farm_id}: {output.status}")
        return AdvisorResult(output=output, fallback=False)


soil_advisor = SoilAdvisor(
    api_key=settings.openai_api_key,
    model=settings.openai_model,
    base_url=settings.openai_base_url,
)
