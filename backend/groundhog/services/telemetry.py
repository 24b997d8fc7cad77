"""Broker relay for rover telemetry and commands.

One :class:`TelemetryRelay` owns one broker connection. States:

    disconnected -> connecting -> connected -> disconnected
    connecting -> error, any -> error

``error`` and ``disconnected`` stay put until ``connect()`` is called again;
there is no automatic reconnect. Inbound messages are routed by topic; unknown
topics and payloads that are not JSON are dropped without touching state.
"""

import json
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import paho.mqtt.client as mqtt

from groundhog.core.config import settings
from groundhog.schemas.telemetry import ChemicalPush, RoverStatus, SensorSample, TelemetrySnapshot

logger = logging.getLogger(__name__)

SENSOR_HISTORY_SIZE = 50
CHEMICAL_FIELDS = ("nitrogen", "phosphorus", "potassium", "copper", "iron", "zinc", "boron")
PPM_KEYS = {
    "nitrogen": "N_ppm",
    "phosphorus": "P_ppm",
    "potassium": "K_ppm",
    "copper": "Cu_ppm",
    "iron": "Fe_ppm",
    "zinc": "Zn_ppm",
    "boron": "B_ppm",
}


class RelayState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class TelemetryNotConnected(Exception):
    pass


@dataclass(frozen=True)
class TelemetryTopics:
    rover_location: str
    sensor_data: str
    chemical_estimate: str
    rover_command: str
    rover_waypoints: str

    @classmethod
    def with_prefix(cls, prefix: str) -> "TelemetryTopics":
        return cls(
            rover_location=f"{prefix}/rover_location",
            sensor_data=f"{prefix}/sensor_data",
            chemical_estimate=f"{prefix}/chemical_estimate",
            rover_command=f"{prefix}/rover_command",
            rover_waypoints=f"{prefix}/rover_waypoints",
        )

    @property
    def inbound(self) -> list[str]:
        return [self.rover_location, self.sensor_data, self.chemical_estimate]


@dataclass(frozen=True)
class UnrecognizedPayload:
    keys: tuple[str, ...]


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def decode_chemical_push(data: Any) -> ChemicalPush | UnrecognizedPayload:
    """Pick the chemical payload shape by its discriminating key."""
    if not isinstance(data, dict):
        return UnrecognizedPayload(keys=())
    if "nitrogen" in data:
        values = {field: _number(data.get(field)) for field in CHEMICAL_FIELDS}
        return ChemicalPush(source="named", created_at=data.get("created_at"), **values)
    if "N_ppm" in data:
        values = {field: _number(data.get(key)) for field, key in PPM_KEYS.items()}
        return ChemicalPush(source="ppm", created_at=data.get("created_at"), **values)
    return UnrecognizedPayload(keys=tuple(sorted(data)))


def _is_failure(reason_code: Any) -> bool:
    return bool(getattr(reason_code, "is_failure", False))


def _default_client_factory(path: str, use_tls: bool) -> mqtt.Client:
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, transport="websockets")
    client.ws_set_options(path=path)
    if use_tls:
        client.tls_set()
    return client


class TelemetryRelay:
    def __init__(
        self,
        host: str,
        port: int,
        topics: TelemetryTopics,
        path: str = "/mqtt",
        use_tls: bool = True,
        keepalive: int = 60,
        client_factory: Callable[[], Any] | None = None,
        history_size: int = SENSOR_HISTORY_SIZE,
    ) -> None:
        self.host = host
        self.port = port
        self.topics = topics
        self.keepalive = keepalive
        self._client_factory = client_factory or (lambda: _default_client_factory(path, use_tls))
        self._lock = threading.RLock()
        self._client: Any = None

        self.state = RelayState.DISCONNECTED
        self.last_error: str | None = None
        self.rover = RoverStatus()
        self.latest_sensor: SensorSample | None = None
        self.sensor_history: deque[SensorSample] = deque(maxlen=history_size)
        self.latest_chemical: ChemicalPush | None = None

        self._handlers: dict[str, Callable[[Any], None]] = {
            topics.rover_location: self._handle_rover_location,
            topics.sensor_data: self._handle_sensor_data,
            topics.chemical_estimate: self._handle_chemical_estimate,
        }

    def __enter__(self) -> "TelemetryRelay":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def is_connected(self) -> bool:
        return self.state == RelayState.CONNECTED

    def connect(self) -> RelayState:
        with self._lock:
            if self.state in (RelayState.CONNECTED, RelayState.CONNECTING):
                return self.state

            client = self._client_factory()
            client.on_connect = self._on_connect
            client.on_connect_fail = self._on_connect_fail
            client.on_subscribe = self._on_subscribe
            client.on_message = self._on_message
            client.on_disconnect = self._on_disconnect
            self._client = client
            self.state = RelayState.CONNECTING
            self.last_error = None

        logger.info(f"Connecting to broker {self.host}:{self.port}")
        try:
            client.connect_async(self.host, self.port, self.keepalive)
            client.loop_start()
        except (OSError, ValueError) as exc:
            self._fail(client, f"Could not start broker connection: {exc}")
        return self.state

    def disconnect(self) -> RelayState:
        with self._lock:
            client = self._client
            if client is None or self.state not in (RelayState.CONNECTED, RelayState.CONNECTING):
                return self.state
            self._client = None
            self.state = RelayState.DISCONNECTED

        client.disconnect()
        client.loop_stop()
        logger.info("Broker connection closed")
        return self.state

    def close(self) -> None:
        self.disconnect()

    def publish_command(self, command: str, value: int) -> str:
        message = f"{command},{value}"
        self._publish(self.topics.rover_command, message)
        logger.info(f"Sent rover command: {message}")
        return message

    def upload_waypoints(self, waypoints: Iterable[Any]) -> str:
        coordinates = [
            {
                "name": waypoint.name,
                "lat": waypoint.lat,
                "long": waypoint.long,
                "order_index": waypoint.order_index,
            }
            for waypoint in waypoints
        ]
        payload = json.dumps(coordinates)
        self._publish(self.topics.rover_waypoints, payload)
        logger.info(f"Uploaded {len(coordinates)} waypoints to rover")
        return payload

    def snapshot(self) -> TelemetrySnapshot:
        with self._lock:
            return TelemetrySnapshot(
                status=self.state.value,
                last_error=self.last_error,
                rover=self.rover.model_copy(),
                latest_sensor=self.latest_sensor,
                sensor_history=list(self.sensor_history),
                latest_chemical=self.latest_chemical,
            )

    def _publish(self, topic: str, payload: str) -> None:
        with self._lock:
            client = self._client
            if client is None or self.state != RelayState.CONNECTED:
                raise TelemetryNotConnected("Broker is not connected")
        info = client.publish(topic, payload)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.error(f"Publish to {topic} failed with code {info.rc}")
            raise TelemetryNotConnected(f"Publish to {topic} failed with code {info.rc}")

    def _fail(self, client: Any, message: str) -> None:
        with self._lock:
            if client is not self._client:
                return
            self._client = None
            self.state = RelayState.ERROR
            self.last_error = message
        logger.error(message)
        # stops paho's own reconnect loop; safe from the network thread
        client.loop_stop()

    def _on_connect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any = None) -> None:
        if _is_failure(reason_code):
            self._fail(client, f"Broker refused connection: {reason_code}")
            return

        with self._lock:
            if client is not self._client:
                return
            self.state = RelayState.CONNECTED
        logger.info("Connected to broker")
        client.subscribe([(topic, 0) for topic in self.topics.inbound])

    def _on_connect_fail(self, client: Any, userdata: Any) -> None:
        self._fail(client, "Broker connection failed")

    def _on_subscribe(self, client: Any, userdata: Any, mid: int, reason_codes: Any, properties: Any = None) -> None:
        failures = [code for code in reason_codes if _is_failure(code)]
        if failures:
            self._fail(client, f"Subscription refused: {failures}")
            return
        logger.info(f"Subscribed to {', '.join(self.topics.inbound)}")

    def _on_disconnect(
        self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any = None
    ) -> None:
        if _is_failure(reason_code):
            self._fail(client, f"Broker connection lost: {reason_code}")
            return

        with self._lock:
            if client is not self._client:
                return
            self._client = None
            self.state = RelayState.DISCONNECTED
        logger.info("Broker closed the connection")
        client.loop_stop()

    def _on_message(self, client: Any, userdata: Any, message: Any) -> None:
        handler = self._handlers.get(message.topic)
        if handler is None:
            logger.debug(f"Dropping message on unhandled topic {message.topic}")
            return

        try:
            data = json.loads(message.payload)
        except ValueError:
            logger.info(f"Dropping non-JSON message on {message.topic}")
            return

        try:
            handler(data)
        except (ValueError, TypeError) as exc:
            logger.warning(f"Dropping malformed message on {message.topic}: {exc}")

    def _handle_rover_location(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError("rover location payload must be an object")

        updates: dict[str, Any] = {}
        if data.get("lat") is not None and data.get("long") is not None:
            updates["lat"] = float(data["lat"])
            updates["long"] = float(data["long"])
        if data.get("heading_deg") is not None:
            updates["heading_deg"] = float(data["heading_deg"])
        if data.get("command") is not None:
            updates["command"] = str(data["command"])
        if not updates:
            logger.debug("Rover message carried no position or heading")
            return

        updates["updated_at"] = datetime.now(timezone.utc)
        with self._lock:
            self.rover = self.rover.model_copy(update=updates)

    def _handle_sensor_data(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise TypeError("sensor payload must be an object")

        sample = SensorSample.model_validate({**data, "received_at": datetime.now(timezone.utc)})
        with self._lock:
            self.latest_sensor = sample
            self.sensor_history.append(sample)

    def _handle_chemical_estimate(self, data: Any) -> None:
        decoded = decode_chemical_push(data)
        if isinstance(decoded, UnrecognizedPayload):
            logger.error(f"Unknown chemical payload shape, keys: {list(decoded.keys)}")
            return

        logger.info(f"Chemical estimate received ({decoded.source} format)")
        with self._lock:
            self.latest_chemical = decoded


def build_relay() -> TelemetryRelay:
    return TelemetryRelay(
        host=settings.mqtt_host,
        port=settings.mqtt_port,
        topics=TelemetryTopics.with_prefix(settings.mqtt_topic_prefix),
        path=settings.mqtt_path,
        use_tls=settings.mqtt_tls,
    )
