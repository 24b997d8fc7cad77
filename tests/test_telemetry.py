import json
from types import SimpleNamespace

import pytest

from conftest import FakeMqttClient, broker_message, reason
from groundhog.services.telemetry import (
    RelayState,
    TelemetryNotConnected,
    TelemetryRelay,
    TelemetryTopics,
    UnrecognizedPayload,
    decode_chemical_push,
)

TOPICS = TelemetryTopics.with_prefix("jumpstart")


def connect(relay, mqtt_client):
    relay.connect()
    mqtt_client.on_connect(mqtt_client, None, {}, reason(), None)


def test_topics_use_prefix():
    assert TOPICS.rover_command == "jumpstart/rover_command"
    assert TOPICS.inbound == [
        "jumpstart/rover_location",
        "jumpstart/sensor_data",
        "jumpstart/chemical_estimate",
    ]


def test_connect_lifecycle(relay, mqtt_client):
    assert relay.state == RelayState.DISCONNECTED

    assert relay.connect() == RelayState.CONNECTING
    assert mqtt_client.connect_calls == [("broker.test", 8884, 60)]
    assert mqtt_client.loop_running

    mqtt_client.on_connect(mqtt_client, None, {}, reason(), None)
    assert relay.state == RelayState.CONNECTED
    assert mqtt_client.subscriptions == [[(topic, 0) for topic in TOPICS.inbound]]

    assert relay.disconnect() == RelayState.DISCONNECTED
    assert mqtt_client.disconnected
    assert not mqtt_client.loop_running


def test_connect_is_ignored_while_connected():
    created = []

    def factory():
        created.append(FakeMqttClient())
        return created[-1]

    relay = TelemetryRelay("broker.test", 8884, TOPICS, client_factory=factory)
    relay.connect()
    relay.connect()
    created[0].on_connect(created[0], None, {}, reason(), None)

    assert relay.connect() == RelayState.CONNECTED
    assert len(created) == 1


def test_refused_connection_is_an_error_until_retried(relay, mqtt_client):
    relay.connect()
    mqtt_client.on_connect(mqtt_client, None, {}, reason(is_failure=True), None)

    assert relay.state == RelayState.ERROR
    assert relay.last_error.startswith("Broker refused connection")
    assert not mqtt_client.loop_running

    assert relay.connect() == RelayState.CONNECTING
    assert relay.last_error is None


def test_connect_fail_callback(relay, mqtt_client):
    relay.connect()
    mqtt_client.on_connect_fail(mqtt_client, None)

    assert relay.state == RelayState.ERROR


def test_start_failure_is_an_error():
    class BrokenClient(FakeMqttClient):
        def connect_async(self, host, port, keepalive):
            raise OSError("name resolution failed")

    relay = TelemetryRelay("broker.test", 8884, TOPICS, client_factory=BrokenClient)

    assert relay.connect() == RelayState.ERROR
    assert "name resolution failed" in relay.last_error


def test_unexpected_disconnect_is_an_error(relay, mqtt_client):
    connect(relay, mqtt_client)

    mqtt_client.on_disconnect(mqtt_client, None, {}, reason(is_failure=True), None)

    assert relay.state == RelayState.ERROR


def test_clean_broker_disconnect(relay, mqtt_client):
    connect(relay, mqtt_client)

    mqtt_client.on_disconnect(mqtt_client, None, {}, reason(), None)

    assert relay.state == RelayState.DISCONNECTED


def test_subscription_refused(relay, mqtt_client):
    connect(relay, mqtt_client)

    mqtt_client.on_subscribe(mqtt_client, None, 1, [reason(), reason(is_failure=True)], None)

    assert relay.state == RelayState.ERROR


def test_disconnect_when_idle_is_a_no_op(relay, mqtt_client):
    assert relay.disconnect() == RelayState.DISCONNECTED
    assert not mqtt_client.disconnected


def test_publish_requires_connection(relay, mqtt_client):
    with pytest.raises(TelemetryNotConnected):
        relay.publish_command("drive", 1)

    relay.connect()
    with pytest.raises(TelemetryNotConnected):
        relay.publish_command("drive", 1)
    assert mqtt_client.published == []


def test_publish_command(relay, mqtt_client):
    connect(relay, mqtt_client)

    assert relay.publish_command("turn", -30) == "turn,-30"
    assert mqtt_client.published == [("jumpstart/rover_command", "turn,-30")]


def test_failed_publish_raises(relay, mqtt_client):
    connect(relay, mqtt_client)
    mqtt_client.publish_rc = 4

    with pytest.raises(TelemetryNotConnected):
        relay.publish_command("probe", 1)


def test_upload_waypoints(relay, mqtt_client):
    connect(relay, mqtt_client)
    waypoints = [
        SimpleNamespace(name="A", lat=38.1, long=-90.1, order_index=0),
        SimpleNamespace(name="B", lat=38.2, long=-90.2, order_index=1),
    ]

    relay.upload_waypoints(waypoints)

    topic, payload = mqtt_client.published[0]
    assert topic == "jumpstart/rover_waypoints"
    assert [item["name"] for item in json.loads(payload)] == ["A", "B"]


def test_rover_location_updates(relay, mqtt_client):
    connect(relay, mqtt_client)

    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.rover_location, {"lat": 38.5, "long": -90.3}))
    mqtt_client.on_message(
        mqtt_client, None, broker_message(TOPICS.rover_location, {"heading_deg": 90, "command": "drive,1"})
    )

    rover = relay.snapshot().rover
    assert (rover.lat, rover.long) == (38.5, -90.3)
    assert rover.heading_deg == 90.0
    assert rover.command == "drive,1"
    assert rover.updated_at is not None


def test_sensor_samples_are_kept_in_bounded_history(mqtt_client):
    relay = TelemetryRelay("broker.test", 8884, TOPICS, client_factory=lambda: mqtt_client, history_size=3)
    connect(relay, mqtt_client)

    for index in range(5):
        payload = {"temperature": 20 + index, "humidity": 50, "EC": 1.2, "pH": 6.7}
        mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.sensor_data, payload))

    snapshot = relay.snapshot()
    assert [sample.temperature for sample in snapshot.sensor_history] == [22, 23, 24]
    assert snapshot.latest_sensor.ec == 1.2
    assert snapshot.latest_sensor.ph == 6.7


def test_unknown_topic_and_bad_payloads_leave_state_alone(relay, mqtt_client):
    connect(relay, mqtt_client)
    before = relay.snapshot()

    mqtt_client.on_message(mqtt_client, None, broker_message("jumpstart/other", {"lat": 1, "long": 2}))
    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.rover_location, b"not json"))
    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.sensor_data, {"temperature": "hot"}))
    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.sensor_data, [1, 2, 3]))
    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.chemical_estimate, {"foo": 1}))
    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.chemical_estimate, {"N_ppm": 4, "created_at": 12}))

    assert relay.snapshot() == before
    assert relay.state == RelayState.CONNECTED


def test_non_numeric_coordinates_are_dropped(relay, mqtt_client):
    connect(relay, mqtt_client)

    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.rover_location, {"lat": "north", "long": 1}))
    mqtt_client.on_message(mqtt_client, None, broker_message(TOPICS.rover_location, {"heading_deg": "east"}))

    rover = relay.snapshot().rover
    assert rover.lat is None
    assert rover.heading_deg is None
    assert relay.state == RelayState.CONNECTED


def test_chemical_message_updates_latest(relay, mqtt_client):
    connect(relay, mqtt_client)

    mqtt_client.on_message(
        mqtt_client, None, broker_message(TOPICS.chemical_estimate, {"N_ppm": 40, "P_ppm": 10, "K_ppm": 120})
    )

    latest = relay.snapshot().latest_chemical
    assert latest.source == "ppm"
    assert latest.nitrogen == 40
    assert latest.copper == 0


def test_decode_named_shape():
    decoded = decode_chemical_push({"nitrogen": 30, "phosphorus": "12.5", "zinc": None})

    assert decoded.source == "named"
    assert decoded.nitrogen == 30
    assert decoded.phosphorus == 12.5
    assert decoded.zinc == 0


def test_decode_prefers_named_shape():
    decoded = decode_chemical_push({"nitrogen": 30, "N_ppm": 99})

    assert decoded.source == "named"
    assert decoded.nitrogen == 30


def test_decode_unrecognized_shape():
    assert decode_chemical_push({"b": 1, "a": 2}) == UnrecognizedPayload(keys=("a", "b"))
    assert decode_chemical_push("N_ppm") == UnrecognizedPayload(keys=())


def test_context_manager_closes(mqtt_client):
    with TelemetryRelay("broker.test", 8884, TOPICS, client_factory=lambda: mqtt_client) as relay:
        connect(relay, mqtt_client)

    assert relay.state == RelayState.DISCONNECTED
    assert mqtt_client.disconnected
