"""rich-click command line for inspecting and exercising the forwarder.

Contents
--------
* :func:`cli` - command group with ``info``, ``demo`` and ``send``.
* :func:`run_demo` - forwards sample records to a Rich console transport.
* :func:`main` - entry point running the group through ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import itertools
import logging
import os
from typing import Sequence

import lib_cli_exit_tools
import rich_click as click
from click.core import ParameterSource

from . import __init__conf__
from . import config as log_config
from .adapters import ForwardingHandler, RichConsoleTransport
from .application.use_cases import HookChain, LogForwarder
from .domain import ForwarderError, LogLevel
from .runtime import create_transport, install_forwarder, uninstall

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_LEVEL_CHOICES = [level.severity for level in LogLevel.descending()]
_DEMO_LEVELS = (LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR, LogLevel.DEBUG)


def _parse_dimension_options(values: Sequence[str]) -> dict[str, str]:
    try:
        return log_config.parse_dimensions(",".join(values), source="--dimension")
    except ForwarderError as exc:
        raise click.BadParameter(str(exc), param_hint="--dimension") from exc


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message="%(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help="Load environment variables from a nearby .env before running commands.",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool) -> None:
    """Forward structured log entries to a publish/subscribe broker."""

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not ParameterSource.DEFAULT:
        explicit = use_dotenv
    if log_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(log_config.DOTENV_ENV_VAR)):
        log_config.enable_dotenv()

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    if ctx.invoked_subcommand is None:
        __init__conf__.print_info(writer=lambda text: click.echo(text, nl=False))


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print resolved metadata so users can inspect installation details."""

    __init__conf__.print_info(writer=lambda text: click.echo(text, nl=False))


def run_demo(*, subject: str = "logs.demo", environment: str = "demo", count: int = 4, transport: RichConsoleTransport | None = None) -> int:
    """Log ``count`` sample records through a forwarder printing to the console.

    Returns the number of payloads the transport printed.
    """
    transport = transport or RichConsoleTransport()
    sequence = itertools.count(1)
    forwarder = (
        LogForwarder(transport, subject)
        .add_static_field("env", environment)
        .add_dynamic_field("seq", lambda: str(next(sequence)))
    )
    chain = HookChain()
    chain.add(forwarder)

    demo_logger = logging.getLogger(f"{__init__conf__.name}.demo")
    demo_logger.propagate = False
    demo_logger.setLevel(logging.DEBUG)
    handler = ForwardingHandler(chain)
    demo_logger.addHandler(handler)
    try:
        for index, level in zip(range(count), itertools.cycle(_DEMO_LEVELS)):
            demo_logger.log(level.to_python_level(), "demo message %d", index + 1, extra={"step": index + 1})
    finally:
        demo_logger.removeHandler(handler)
        handler.close()
    return transport.published


@cli.command("demo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option("--subject", default="logs.demo", show_default=True, help="Subject printed next to every payload.")
@click.option("--env", "environment", default="demo", show_default=True, help="Value of the static 'env' field.")
@click.option("--count", default=4, show_default=True, type=click.IntRange(1, 100), help="Number of records to log.")
def cli_demo(subject: str, environment: str, count: int) -> None:
    """Forward sample records to the console instead of a broker."""

    published = run_demo(subject=subject, environment=environment, count=count)
    click.echo(f"emitted {published} payloads to {subject}")


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("message")
@click.option("--level", default="info", show_default=True, type=click.Choice(_LEVEL_CHOICES, case_sensitive=False))
@click.option("--subject", default=None, help="Destination subject (falls back to LOG_PUBSUB_SUBJECT).")
@click.option("--host", default=None, help="MQTT broker host (falls back to LOG_PUBSUB_MQTT_HOST).")
@click.option("--port", default=None, type=int, help="MQTT broker port (falls back to LOG_PUBSUB_MQTT_PORT).")
@click.option("--dimension", "dimensions", multiple=True, metavar="KEY=VALUE", help="Static field added to the entry.")
@click.option("--timeout", default=10.0, show_default=True, type=float, help="Seconds to wait for connect and publish.")
def cli_send(
    message: str,
    level: str,
    subject: str | None,
    host: str | None,
    port: int | None,
    dimensions: tuple[str, ...],
    timeout: float,
) -> None:
    """Publish MESSAGE through the forwarder to an MQTT broker."""

    try:
        settings = log_config.load_settings(
            subject=subject,
            mqtt_host=host,
            mqtt_port=port,
            dimensions=_parse_dimension_options(dimensions),
        )
    except ForwarderError as exc:
        raise click.UsageError(str(exc)) from exc

    failures: list[Exception] = []
    chain = HookChain(on_error=lambda _hook, _entry, exc: failures.append(exc))
    logger_name = f"{__init__conf__.name}.send"
    transport = create_transport(settings, wait_timeout=timeout)
    try:
        transport.connect(timeout=timeout)
        install_forwarder(settings, transport=transport, chain=chain, logger_name=logger_name)
        logging.getLogger(logger_name).log(LogLevel.from_name(level).to_python_level(), message)
    except ForwarderError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        uninstall(logger_name, chain=chain)
        transport.close()

    if failures:
        raise click.ClickException(f"Forwarding failed: {failures[0]}")
    click.echo(f"published to {settings.subject} via {transport.broker}")


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI through ``lib_cli_exit_tools`` and return the exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    so embedding applications keep their own settings.
    """

    previous = (lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback, lib_cli_exit_tools.config.traceback_force_color = previous


__all__ = ["cli", "main", "run_demo"]
