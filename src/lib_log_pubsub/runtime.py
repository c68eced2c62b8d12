"""Composition root installing the forwarding hook into the logging system.

Purpose
-------
Translate :class:`~lib_log_pubsub.config.ForwarderSettings` into a connected
transport, a configured :class:`LogForwarder`, and the stdlib handler that
feeds it. Host applications call :func:`install_forwarder` once at start-up.

Contents
--------
* :func:`current_chain` - process-wide :class:`HookChain`.
* :func:`install_forwarder` / :func:`uninstall` - wiring and teardown.

System Role
-----------
Outer shell around the use cases; everything that touches global state
(the root logger, the process-wide chain, broker sockets) lives here.
"""

from __future__ import annotations

import logging
from threading import RLock

from lib_log_pubsub.adapters import ForwardingHandler, MqttTransport
from lib_log_pubsub.application.ports import TransportPort
from lib_log_pubsub.application.use_cases import HookChain, LogForwarder
from lib_log_pubsub.config import ForwarderSettings
from lib_log_pubsub.domain import ConfigurationError

logger = logging.getLogger(__name__)

_CHAIN: HookChain | None = None
_STATE_LOCK = RLock()
# Logger level in force before each attached handler lowered it to DEBUG.
_PREVIOUS_LEVELS: dict[ForwardingHandler, int] = {}


def current_chain() -> HookChain:
    """Return the process-wide hook chain, creating it on first use."""

    global _CHAIN
    with _STATE_LOCK:
        if _CHAIN is None:
            _CHAIN = HookChain()
        return _CHAIN


def create_transport(settings: ForwarderSettings, *, wait_timeout: float | None = None) -> MqttTransport:
    """Return an unconnected :class:`MqttTransport` for ``settings``."""

    return MqttTransport(
        host=settings.mqtt_host,
        port=settings.mqtt_port,
        client_id=settings.client_id,
        username=settings.username,
        password=settings.password,
        qos=settings.qos,
        wait_timeout=wait_timeout,
    )


def _attach_handler(chain: HookChain, logger_name: str | None) -> ForwardingHandler:
    target = logging.getLogger(logger_name)
    for handler in target.handlers:
        if isinstance(handler, ForwardingHandler) and handler.chain is chain:
            return handler
    handler = ForwardingHandler(chain)
    with _STATE_LOCK:
        _PREVIOUS_LEVELS[handler] = target.level
    target.addHandler(handler)
    target.setLevel(logging.DEBUG)
    return handler


def install_forwarder(
    settings: ForwarderSettings,
    *,
    transport: TransportPort | None = None,
    chain: HookChain | None = None,
    logger_name: str | None = None,
    connect_timeout: float = 10.0,
) -> tuple[TransportPort, LogForwarder]:
    """Connect, build, and register a forwarder in one step.

    Parameters
    ----------
    settings:
        Subject, dimensions, and broker options.
    transport:
        Already connected transport; when omitted an :class:`MqttTransport`
        is created from ``settings`` and connected.
    chain:
        Hook chain to register into; defaults to :func:`current_chain`.
    logger_name:
        Logger receiving the :class:`ForwardingHandler`; root by default.
        The logger level is lowered to ``DEBUG`` so every severity reaches
        the hooks, which then filter by their own levels; :func:`uninstall`
        restores the previous level.

    Returns
    -------
    tuple[TransportPort, LogForwarder]
        The transport (its lifecycle belongs to the caller) and the
        registered forwarder.

    Raises
    ------
    ConfigurationError
        When the subject is empty; raised before any connection attempt.
    TransportUnavailable
        When the MQTT connection cannot be established.
    """
    if not settings.subject or not settings.subject.strip():
        raise ConfigurationError("Must provide a subject for the forwarding hook")

    if transport is None:
        mqtt_transport = create_transport(settings)
        mqtt_transport.connect(timeout=connect_timeout)
        transport = mqtt_transport

    forwarder = LogForwarder(transport, settings.subject)
    for key, value in settings.dimensions.items():
        forwarder.add_static_field(key, value)

    target_chain = chain if chain is not None else current_chain()
    target_chain.add(forwarder)
    _attach_handler(target_chain, logger_name)
    logger.debug("forwarding log entries to %s", settings.subject)
    return transport, forwarder


def uninstall(logger_name: str | None = None, *, chain: HookChain | None = None) -> None:
    """Detach the handler feeding ``chain`` from the logger and empty ``chain``.

    ``chain`` defaults to :func:`current_chain`. The logger level lowered by
    :func:`install_forwarder` is put back. Transports are left alone;
    closing them is the caller's job.
    """

    target_chain = chain if chain is not None else current_chain()
    target = logging.getLogger(logger_name)
    for handler in list(target.handlers):
        if isinstance(handler, ForwardingHandler) and handler.chain is target_chain:
            target.removeHandler(handler)
            handler.close()
            with _STATE_LOCK:
                previous = _PREVIOUS_LEVELS.pop(handler, None)
            if previous is not None:
                target.setLevel(previous)
    target_chain.clear()


__all__ = ["create_transport", "current_chain", "install_forwarder", "uninstall"]
