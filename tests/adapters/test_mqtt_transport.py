from __future__ import annotations

import threading
from typing import Any

import paho.mqtt.client as mqtt
import pytest

from lib_log_pubsub.adapters.mqtt import MqttTransport
from lib_log_pubsub.domain import PublishError, TransportUnavailable


class _Info:
    def __init__(self, rc: int, published: bool = True, wait_error: Exception | None = None) -> None:
        self.rc = rc
        self._published = published
        self._wait_error = wait_error
        self.waited: float | None = None

    def wait_for_publish(self, timeout: float | None = None) -> None:
        self.waited = timeout
        if self._wait_error is not None:
            raise self._wait_error

    def is_published(self) -> bool:
        return self._published


class _FakeClient:
    """Stand-in for ``paho.mqtt.client.Client`` recording calls."""

    def __init__(self, *, connect_rc: int | None = 0, connect_error: Exception | None = None) -> None:
        self.on_connect: Any = None
        self.on_disconnect: Any = None
        self.connect_rc = connect_rc
        self.connect_error = connect_error
        self.credentials: tuple[str, str | None] | None = None
        self.calls: list[str] = []
        self.published: list[tuple[str, bytes, int]] = []
        self.next_info = _Info(mqtt.MQTT_ERR_SUCCESS)

    def username_pw_set(self, username: str, password: str | None = None) -> None:
        self.credentials = (username, password)

    def connect(self, host: str, port: int, keepalive: int = 60) -> int:
        self.calls.append(f"connect {host}:{port}")
        if self.connect_error is not None:
            raise self.connect_error
        return 0

    def loop_start(self) -> None:
        self.calls.append("loop_start")
        if self.connect_rc is not None:
            threading.Timer(0.01, self.on_connect, args=(self, None, {}, self.connect_rc, None)).start()

    def loop_stop(self) -> None:
        self.calls.append("loop_stop")

    def disconnect(self) -> None:
        self.calls.append("disconnect")
        if self.on_disconnect is not None:
            self.on_disconnect(self, None, {}, 0, None)

    def publish(self, topic: str, payload: bytes, qos: int = 0) -> _Info:
        self.published.append((topic, payload, qos))
        return self.next_info


def test_transport_starts_closed_until_connected() -> None:
    transport = MqttTransport(client=_FakeClient())
    assert transport.is_closed()


def test_credentials_are_forwarded_to_client() -> None:
    client = _FakeClient()
    MqttTransport(client=client, username="user", password="secret")
    assert client.credentials == ("user", "secret")


def test_username_without_password_is_forwarded() -> None:
    client = _FakeClient()
    MqttTransport(client=client, username="user")
    assert client.credentials == ("user", None)


def test_no_username_leaves_client_anonymous() -> None:
    client = _FakeClient()
    MqttTransport(client=client, password="secret")
    assert client.credentials is None


def test_connect_waits_for_acknowledgement() -> None:
    client = _FakeClient()
    transport = MqttTransport(host="broker", port=1884, client=client)

    transport.connect(timeout=2.0)

    assert not transport.is_closed()
    assert client.calls[:2] == ["connect broker:1884", "loop_start"]


def test_connect_refused_raises_transport_unavailable() -> None:
    client = _FakeClient(connect_rc=5)
    transport = MqttTransport(client=client)

    with pytest.raises(TransportUnavailable, match="refused"):
        transport.connect(timeout=2.0)

    assert transport.is_closed()
    assert client.calls[-2:] == ["loop_stop", "disconnect"]


def test_connect_timeout_raises_transport_unavailable() -> None:
    client = _FakeClient(connect_rc=None)
    transport = MqttTransport(client=client)
    with pytest.raises(TransportUnavailable, match="Timed out"):
        transport.connect(timeout=0.05)
    assert client.calls == ["connect localhost:1883", "loop_start", "loop_stop", "disconnect"]
    assert transport.is_closed()


def test_socket_error_raises_transport_unavailable() -> None:
    transport = MqttTransport(client=_FakeClient(connect_error=ConnectionRefusedError("nope")))
    with pytest.raises(TransportUnavailable, match="Unable to connect") as excinfo:
        transport.connect(timeout=0.05)
    assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)


def test_publish_uses_subject_as_topic_and_configured_qos() -> None:
    client = _FakeClient()
    transport = MqttTransport(client=client, qos=1)
    transport.connect(timeout=2.0)

    transport.publish("logs.app", b"{}\n")

    assert client.published == [("logs.app", b"{}\n", 1)]


def test_publish_failure_code_raises_publish_error() -> None:
    client = _FakeClient()
    client.next_info = _Info(mqtt.MQTT_ERR_NO_CONN)
    transport = MqttTransport(client=client)

    with pytest.raises(PublishError, match="logs.app"):
        transport.publish("logs.app", b"{}")


def test_publish_waits_when_wait_timeout_is_set() -> None:
    client = _FakeClient()
    info = _Info(mqtt.MQTT_ERR_SUCCESS)
    client.next_info = info
    transport = MqttTransport(client=client, wait_timeout=1.5)

    transport.publish("logs.app", b"{}")

    assert info.waited == 1.5


def test_publish_not_acknowledged_in_time_raises_publish_error() -> None:
    client = _FakeClient()
    client.next_info = _Info(mqtt.MQTT_ERR_SUCCESS, published=False)
    transport = MqttTransport(client=client, wait_timeout=0.1)

    with pytest.raises(PublishError, match="not acknowledged"):
        transport.publish("logs.app", b"{}")


def test_publish_wait_error_raises_publish_error() -> None:
    client = _FakeClient()
    client.next_info = _Info(mqtt.MQTT_ERR_SUCCESS, wait_error=RuntimeError("queue full"))
    transport = MqttTransport(client=client, wait_timeout=0.1)

    with pytest.raises(PublishError, match="queue full"):
        transport.publish("logs.app", b"{}")


def test_close_stops_loop_and_marks_closed() -> None:
    client = _FakeClient()
    transport = MqttTransport(client=client)
    transport.connect(timeout=2.0)

    transport.close()

    assert transport.is_closed()
    assert client.calls[-2:] == ["loop_stop", "disconnect"]


def test_broker_disconnect_marks_transport_closed() -> None:
    client = _FakeClient()
    transport = MqttTransport(client=client)
    transport.connect(timeout=2.0)

    client.on_disconnect(client, None, {}, 7, None)

    assert transport.is_closed()
