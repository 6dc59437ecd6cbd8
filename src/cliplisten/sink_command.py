#!/usr/bin/env python3
"""External-command sinks and notifiers.

Clipboard tools such as pbcopy, xsel, xclip or clip.exe read the text from
standard input. Notification tools such as notify-send take the title and
text as arguments instead. A CommandSpec records the argv template and
which of the two forms the command uses.
"""

from __future__ import annotations

import enum
import logging
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from cliplisten.sink import Notifier, Sink, SinkKind, SinkVariant

if TYPE_CHECKING:
    from cliplisten.command_resolver import CommandResolver

logger = logging.getLogger(__name__)

# Placeholders substituted into ARGS-mode argv templates.
TITLE_PLACEHOLDER: str = "{title}"
TEXT_PLACEHOLDER: str = "{text}"


class SinkUnavailable(RuntimeError):
    """
    Raised when no executable command exists for a required sink.

    Attributes:
        tried: Program names or paths that were probed, in order.
    """

    def __init__(self, what: str, tried: Sequence[str]) -> None:
        self.tried = list(tried)
        listing = ", ".join(self.tried) if self.tried else "(none)"
        super().__init__(f"No usable command for {what}; tried: {listing}")


class InputMode(enum.Enum):
    """How text reaches an external command."""

    STDIN = "stdin"
    ARGS = "args"


@dataclass(frozen=True)
class CommandSpec:
    """
    External command invocation template.

    Attributes:
        argv: Program followed by its arguments. In ARGS mode the arguments
            may contain {title} and {text} placeholders.
        mode: STDIN to pipe the text, ARGS to substitute it into argv.
    """

    argv: tuple[str, ...]
    mode: InputMode = InputMode.STDIN

    @property
    def program(self) -> str:
        """The command's program name or path."""
        return self.argv[0]

    @property
    def name(self) -> str:
        """Base name of the program, used in labels."""
        return self.program.replace("\\", "/").rsplit("/", 1)[-1]

    def with_program(self, program: str) -> CommandSpec:
        """Return a copy with the program replaced (e.g. by its full path)."""
        return replace(self, argv=(program, *self.argv[1:]))

    def render(self, title: str = "", text: str = "") -> list[str]:
        """Build the argv for one invocation."""
        if self.mode is InputMode.STDIN:
            # Title placeholders are still honoured for piped notifiers
            return [arg.replace(TITLE_PLACEHOLDER, title) for arg in self.argv]
        return [
            arg.replace(TITLE_PLACEHOLDER, title).replace(TEXT_PLACEHOLDER, text)
            for arg in self.argv
        ]

    @classmethod
    def parse(cls, command_line: str) -> CommandSpec:
        """
        Build a spec from a shell-style command line.

        Command lines containing {text} use ARGS mode, all others STDIN.

        Args:
            command_line: e.g. "xclip -selection clipboard" or
                "notify-send {title} {text}".

        Raises:
            ValueError: If the command line is empty or cannot be split.
        """
        argv = tuple(shlex.split(command_line))
        if not argv:
            raise ValueError("Empty command line")
        mode = InputMode.ARGS if TEXT_PLACEHOLDER in command_line else InputMode.STDIN
        return cls(argv, mode)


def run_command(argv: list[str], data: bytes | None) -> None:
    """
    Run a command to completion, piping data to its standard input.

    A non-zero exit status or a failure to start is logged, not raised.

    Args:
        argv: Full command line.
        data: Bytes for standard input, or None to give it no input.
    """
    try:
        result = subprocess.run(
            argv,
            input=data if data is not None else b"",
            stdout=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        logger.warning("Failed to run %s: %s", argv[0], e)
        return
    if result.returncode != 0:
        logger.warning("%s exited with status %d", argv[0], result.returncode)


class CommandSink(Sink):
    """Sink that pipes text into an external command."""

    variant = SinkVariant.COMMAND

    def __init__(self, kind: SinkKind, spec: CommandSpec, encoding: str = "utf-8") -> None:
        super().__init__(kind)
        self.spec = spec
        self.encoding = encoding

    @property
    def label(self) -> str:
        return f"{self.kind.value}:{self.spec.name}"

    def write(self, data: bytes) -> None:
        if self.spec.mode is InputMode.STDIN:
            run_command(self.spec.render(), data)
        else:
            # ARGS-mode clipboard commands get the text as an argument
            text = data.decode(self.encoding, "replace")
            run_command(self.spec.render(text=text), None)

    @classmethod
    def from_candidates(
        cls,
        kind: SinkKind,
        candidates: Sequence[CommandSpec],
        resolver: CommandResolver,
        encoding: str = "utf-8",
    ) -> CommandSink:
        """
        Wrap the first executable candidate.

        Raises:
            SinkUnavailable: If none of the candidates is executable.
        """
        spec = resolver.find_executable(candidates)
        if spec is None:
            raise SinkUnavailable(
                f"{kind.value} sink", [c.program for c in candidates]
            )
        return cls(kind, spec, encoding)


class CommandNotifier(Notifier):
    """Notifier that runs an external command per notification."""

    variant = SinkVariant.COMMAND

    def __init__(self, spec: CommandSpec) -> None:
        self.spec = spec

    def notify(self, title: str, text: str) -> None:
        if self.spec.mode is InputMode.STDIN:
            run_command(self.spec.render(title=title), text.encode("utf-8"))
        else:
            run_command(self.spec.render(title=title, text=text), None)

    @classmethod
    def from_candidates(
        cls, candidates: Sequence[CommandSpec], resolver: CommandResolver
    ) -> CommandNotifier:
        """
        Wrap the first executable candidate.

        Raises:
            SinkUnavailable: If none of the candidates is executable.
        """
        spec = resolver.find_executable(candidates)
        if spec is None:
            raise SinkUnavailable("notifier", [c.program for c in candidates])
        return cls(spec)
