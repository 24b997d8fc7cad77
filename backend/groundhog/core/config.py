import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "true").lower() == "true"
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    cors_origins_raw: str = os.getenv("CORS_ORIGINS", "http://localhost:8501")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./groundhog.db")
    predictor_base_url: str = os.getenv(
        "PREDICTOR_BASE_URL", "https://ayanch0w-chemicalpredictiongroundhog.hf.space"
    )
    predictor_timeout: float = float(os.getenv("PREDICTOR_TIMEOUT", "10"))
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4")
    mqtt_host: str = os.getenv("MQTT_HOST", "mqtt-dashboard.com")
    mqtt_port: int = int(os.getenv("MQTT_PORT", "8884"))
    mqtt_path: str = os.getenv("MQTT_PATH", "/mqtt")
    mqtt_tls: bool = os.getenv("MQTT_TLS", "true").lower() == "true"
    mqtt_topic_prefix: str = os.getenv("MQTT_TOPIC_PREFIX", "jumpstart")
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "farm_id")
    session_max_age_days: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "7"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("LOG_DIR", "logs")

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_origins_raw.split(",") if item.strip()]

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


settings = Settings()
