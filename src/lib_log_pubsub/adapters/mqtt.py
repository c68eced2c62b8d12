"""MQTT transport backed by paho-mqtt.

Purpose
-------
Give :class:`~lib_log_pubsub.application.use_cases.forward.LogForwarder` a
real broker connection. Subjects map one to one onto MQTT topics.

Contents
--------
* :class:`MqttTransport` - :class:`TransportPort` implementation.

System Role
-----------
Owns the paho client and its network loop thread. The forwarder only calls
:meth:`MqttTransport.is_closed` and :meth:`MqttTransport.publish`; connecting
and closing stay with whoever created the transport.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import paho.mqtt.client as mqtt

from lib_log_pubsub.application.ports.transport import TransportPort
from lib_log_pubsub.domain.errors import PublishError, TransportUnavailable

logger = logging.getLogger(__name__)


class MqttTransport(TransportPort):
    """Publish payloads to an MQTT broker.

    Thread Safety:
        paho's ``publish`` is safe to call from any thread while the network
        loop runs in the background (``loop_start``).
    """

    def __init__(
        self,
        *,
        host: str = "localhost",
        port: int = 1883,
        client_id: str = "",
        username: str | None = None,
        password: str | None = None,
        qos: int = 0,
        keepalive: int = 60,
        wait_timeout: float | None = None,
        client: Any | None = None,
    ) -> None:
        """Create the transport; no connection is attempted yet.

        Parameters
        ----------
        qos:
            Quality of service for every publish; 0 is fire-and-forget.
        wait_timeout:
            When set, :meth:`publish` blocks until paho has handed the
            message to the socket (QoS 0) or the broker acknowledged it.
        client:
            Pre-built paho client (or test double). When omitted a
            ``CallbackAPIVersion.VERSION2`` client is created.
        """
        self.host = host
        self.port = port
        self.qos = qos
        self.keepalive = keepalive
        self.wait_timeout = wait_timeout

        if client is None:
            client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username:
            client.username_pw_set(username, password)
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        self._client = client

        self._connected = threading.Event()
        self._answered = threading.Event()
        self._refused_reason: str | None = None

    @property
    def broker(self) -> str:
        return f"{self.host}:{self.port}"

    def _on_connect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any = None) -> None:
        if getattr(reason_code, "is_failure", reason_code != 0):
            self._refused_reason = str(reason_code)
            logger.warning("MQTT broker %s refused connection: %s", self.broker, reason_code)
            self._answered.set()
            return
        self._refused_reason = None
        self._connected.set()
        self._answered.set()
        logger.info("connected to MQTT broker %s", self.broker)

    def _on_disconnect(self, client: Any, userdata: Any, flags: Any, reason_code: Any = None, properties: Any = None) -> None:
        self._connected.clear()
        logger.warning("disconnected from MQTT broker %s (reason=%s)", self.broker, reason_code)

    def connect(self, timeout: float = 10.0) -> None:
        """Connect and block until the broker acknowledges or ``timeout`` expires.

        Raises
        ------
        TransportUnavailable
            When the socket cannot be opened, the broker refuses, or no
            acknowledgement arrives in time.
        """
        self._answered.clear()
        self._refused_reason = None
        try:
            self._client.connect(self.host, self.port, keepalive=self.keepalive)
        except OSError as exc:
            raise TransportUnavailable(f"Unable to connect to MQTT broker at {self.broker}: {exc}") from exc
        self._client.loop_start()

        if self._answered.wait(timeout=timeout) and self._connected.is_set():
            return
        self._client.loop_stop()
        self._client.disconnect()
        if self._refused_reason is not None:
            raise TransportUnavailable(f"MQTT broker at {self.broker} refused connection: {self._refused_reason}")
        raise TransportUnavailable(f"Timed out after {timeout}s waiting for MQTT broker at {self.broker}")

    def is_closed(self) -> bool:
        return not self._connected.is_set()

    def publish(self, subject: str, payload: bytes) -> None:
        """Publish ``payload`` on topic ``subject``.

        Raises
        ------
        PublishError
            When paho reports a non-success return code (e.g. no connection,
            outgoing queue full).
        """
        info = self._client.publish(subject, payload, qos=self.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(f"MQTT publish to {subject!r} failed: {mqtt.error_string(info.rc)}")
        if self.wait_timeout is None:
            return
        try:
            info.wait_for_publish(timeout=self.wait_timeout)
        except (RuntimeError, ValueError) as exc:
            raise PublishError(f"MQTT publish to {subject!r} failed: {exc}") from exc
        if not info.is_published():
            raise PublishError(f"MQTT publish to {subject!r} not acknowledged within {self.wait_timeout}s")

    def close(self) -> None:
        """Stop the network loop and disconnect; safe to call twice."""
        self._connected.clear()
        self._client.loop_stop()
        self._client.disconnect()


__all__ = ["MqttTransport"]
