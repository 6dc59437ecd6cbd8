"""CLI handling for cliplisten.

This module provides the command-line interface for cliplisten, handling
argument parsing via click, logging configuration, and dispatching to
listen or send mode based on user-specified options. Every option can also
be set through a CLIPLISTEN_* environment variable.

Usage:
    cliplisten [--listen] [--addr ADDR] [--port PORT] [--encoding ENC]
               [--key KEY] [--verbose 0|1|2]
    cliplisten --send [--addr ADDR] [--port PORT] [--key KEY] [--type TYPE] < text
"""

import click
import sys

from cliplisten.constants import (
    DEFAULT_ACCEPT_KEY,
    DEFAULT_ADDR,
    DEFAULT_ENCODING,
    DEFAULT_PORT,
    DEFAULT_PREVIEW_LENGTH,
    DEFAULT_SINK_TYPE,
    MAX_VERBOSITY,
)
from cliplisten.main_logging import configure_logging
from cliplisten.main_options import (
    MutuallyExclusiveOption,
    command_callback,
    encoding_callback,
)
from cliplisten.sink_command import CommandSpec


@click.command(context_settings={"auto_envvar_prefix": "CLIPLISTEN"})
@click.option(
    "--listen",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    not_required_if=["send"],
    help="Run the listener (default mode)",
)
@click.option(
    "--send",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    not_required_if=["listen"],
    help="Send standard input to a listener",
)
@click.option("--addr", default=DEFAULT_ADDR, show_default=True, help="Address to listen on or send to")
@click.option("--port", default=DEFAULT_PORT, show_default=True, type=click.IntRange(0, 65535), help="TCP port")
@click.option(
    "--encoding",
    default=DEFAULT_ENCODING,
    show_default=True,
    callback=encoding_callback,
    help="Output charset for received text",
)
@click.option(
    "--verbose",
    default=0,
    show_default=True,
    type=click.IntRange(0, MAX_VERBOSITY),
    help="0 silent, 1 connection summaries, 2 full text and encoding decisions",
)
@click.option("--key", default=DEFAULT_ACCEPT_KEY, show_default=True, help="Shared handshake key")
@click.option(
    "--preview-length",
    default=DEFAULT_PREVIEW_LENGTH,
    show_default=True,
    type=click.IntRange(0),
    help="Characters of text shown in notifications",
)
@click.option(
    "--clipboard-command",
    callback=command_callback,
    help="Command that receives clipboard text on stdin, or via {text}",
)
@click.option(
    "--primary-command",
    callback=command_callback,
    help="Command that receives primary selection text",
)
@click.option(
    "--notify-command",
    callback=command_callback,
    help="Notification command; {title} and {text} are substituted",
)
@click.option(
    "--type",
    "sink_type",
    default=DEFAULT_SINK_TYPE,
    show_default=True,
    help="Sink type header to send (send mode)",
)
def main(
    listen: bool,
    send: bool,
    addr: str,
    port: int,
    encoding: str,
    verbose: int,
    key: str,
    preview_length: int,
    clipboard_command: CommandSpec | None,
    primary_command: CommandSpec | None,
    notify_command: CommandSpec | None,
    sink_type: str,
) -> None:
    """Copy text received over TCP to the local clipboard."""
    configure_logging(verbose)

    if send:
        _run_send(addr, port, key, sink_type)
        return

    from cliplisten.config import ListenerConfig
    from cliplisten.sink import SinkKind

    overrides = {}
    if clipboard_command is not None:
        overrides[SinkKind.CLIPBOARD] = clipboard_command
    if primary_command is not None:
        overrides[SinkKind.PRIMARY] = primary_command

    config = ListenerConfig(
        addr=addr,
        port=port,
        accept_key=key,
        encoding=encoding,
        verbosity=verbose,
        preview_length=preview_length,
        command_overrides=overrides,
        notifier_override=notify_command,
    )
    _run_listen(config)


def _run_listen(config) -> None:
    """Run listen mode until interrupted, exiting 1 on fatal errors.

    Args:
        config: The ListenerConfig built from the options.
    """
    import asyncio
    from cliplisten.listener import BindError, run_listener
    from cliplisten.sink_command import SinkUnavailable

    try:
        asyncio.run(run_listener(config))
    except (BindError, SinkUnavailable) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _run_send(addr: str, port: int, key: str, sink_type: str) -> None:
    """Send standard input to a listener, exiting 1 on failure.

    Args:
        addr: Listener address.
        port: Listener port.
        key: Shared handshake key.
        sink_type: Value of the "type" header.
    """
    import asyncio
    from cliplisten.client import send_text

    payload = click.get_binary_stream("stdin").read()
    try:
        asyncio.run(send_text(addr, port, key, payload, {"type": sink_type}))
    except (ConnectionError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
