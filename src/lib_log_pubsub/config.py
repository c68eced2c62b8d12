"""Environment-driven settings for installing the forwarding hook.

Purpose
-------
Collect the forwarder configuration (subject, static dimensions, broker
endpoint) from keyword arguments and ``LOG_PUBSUB_*`` environment variables,
optionally seeded from a ``.env`` file via python-dotenv.

Contents
--------
* :data:`DOTENV_ENV_VAR`, :func:`should_use_dotenv`, :func:`enable_dotenv` -
  opt-in ``.env`` loading shared by the CLI and host applications.
* :class:`ForwarderSettings` and :func:`load_settings`.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv

from lib_log_pubsub.domain.errors import ConfigurationError

DOTENV_ENV_VAR = "LOG_PUBSUB_USE_DOTENV"
ENV_PREFIX = "LOG_PUBSUB_"
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_DOTENV_LOCK = threading.Lock()
_DOTENV_LOADED: Path | None = None


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether a ``.env`` file should be loaded.

    An explicit CLI flag wins; otherwise the ``LOG_PUBSUB_USE_DOTENV`` toggle
    decides, defaulting to ``False``.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """
    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUTHY


def enable_dotenv(search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` into ``os.environ`` without overriding values.

    The search walks upwards from ``search_from`` (default: the current
    working directory). The first successful load is remembered and later
    calls return the same path without reading the file again.

    Returns
    -------
    Path | None
        Resolved path of the loaded file, or ``None`` when none was found.
    """
    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        if _DOTENV_LOADED is not None:
            return _DOTENV_LOADED
        if search_from is not None:
            candidate = _find_upwards(Path(search_from))
        else:
            found = find_dotenv(usecwd=True)
            candidate = Path(found) if found else None
        if candidate is None:
            return None
        load_dotenv(candidate, override=False)
        _DOTENV_LOADED = candidate.resolve()
        return _DOTENV_LOADED


def _find_upwards(start: Path) -> Path | None:
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED
    with _DOTENV_LOCK:
        _DOTENV_LOADED = None


@dataclass(frozen=True, slots=True)
class ForwarderSettings:
    """Everything needed to connect a transport and install a forwarder.

    Attributes
    ----------
    subject:
        Destination subject (MQTT topic). Must not be empty.
    dimensions:
        Static fields seeded onto every forwarded entry.
    mqtt_host / mqtt_port / client_id / username / password / qos:
        Broker endpoint and client options for :class:`MqttTransport`.
    """

    subject: str
    dimensions: Mapping[str, str] = field(default_factory=dict)
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    client_id: str = ""
    username: str | None = None
    password: str | None = None
    qos: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", MappingProxyType(dict(self.dimensions)))
        if not self.subject or not self.subject.strip():
            raise ConfigurationError("Must provide a subject for the forwarding hook")
        if not 0 < self.mqtt_port < 65536:
            raise ConfigurationError(f"mqtt_port must be between 1 and 65535, got {self.mqtt_port}")
        if self.qos not in (0, 1, 2):
            raise ConfigurationError(f"qos must be 0, 1 or 2, got {self.qos}")


def parse_dimensions(raw: str, *, source: str = ENV_PREFIX + "DIMENSIONS") -> dict[str, str]:
    """Parse ``key=value,key2=value2`` into a dictionary.

    Examples
    --------
    >>> parse_dimensions("env=prod, region = eu-west")
    {'env': 'prod', 'region': 'eu-west'}
    >>> parse_dimensions("")
    {}
    """
    dimensions: dict[str, str] = {}
    for chunk in raw.split(","):
        if not chunk.strip():
            continue
        key, sep, value = chunk.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"{source} expects KEY=VALUE pairs, got {chunk.strip()!r}")
        dimensions[key.strip()] = value.strip()
    return dimensions


def _env(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str) -> int | None:
    value = _env(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from exc


def load_settings(**overrides: Any) -> ForwarderSettings:
    """Build :class:`ForwarderSettings` from the environment plus ``overrides``.

    Keyword overrides that are not ``None`` win over environment variables;
    ``dimensions`` from both sources are merged with overrides taking
    precedence per key.

    Raises
    ------
    ConfigurationError
        When a variable is malformed or the resulting subject is empty.
    """
    unknown = set(overrides) - set(ForwarderSettings.__dataclass_fields__)
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    dimensions = parse_dimensions(_env("DIMENSIONS") or "")
    dimensions.update(overrides.pop("dimensions", None) or {})

    values: dict[str, Any] = {
        "subject": _env("SUBJECT") or "",
        "mqtt_host": _env("MQTT_HOST"),
        "mqtt_port": _env_int("MQTT_PORT"),
        "client_id": _env("MQTT_CLIENT_ID"),
        "username": _env("MQTT_USERNAME"),
        "password": _env("MQTT_PASSWORD"),
        "qos": _env_int("MQTT_QOS"),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ForwarderSettings(dimensions=dimensions, **{key: value for key, value in values.items() if value is not None})


__all__ = [
    "DOTENV_ENV_VAR",
    "ForwarderSettings",
    "enable_dotenv",
    "load_settings",
    "parse_dimensions",
    "should_use_dotenv",
]
