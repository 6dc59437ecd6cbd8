#!/usr/bin/env python3
"""Executable lookup for external-command sinks.

The resolver is injected into the SinkFactory so that fallback-order tests
can simulate missing commands without touching PATH or the filesystem.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cliplisten.sink_command import CommandSpec


class CommandResolver:
    """Find executables on a search path.

    Args:
        search_path: os.pathsep-separated directories to search. None uses
            PATH.
    """

    def __init__(self, search_path: str | None = None) -> None:
        self.search_path = search_path

    def which(self, program: str) -> str | None:
        """Return the full path of an executable program, or None.

        Programs given with a directory part are checked directly rather
        than searched for.

        Args:
            program: Command name or path.
        """
        if os.path.dirname(program):
            if os.path.isfile(program) and os.access(program, os.X_OK):
                return program
            return None
        return shutil.which(program, path=self.search_path)

    def find_executable(self, candidates: Sequence[CommandSpec]) -> CommandSpec | None:
        """Return the first candidate whose program is executable.

        The returned spec has its program replaced by the resolved path.

        Args:
            candidates: Command specs in preference order.
        """
        for spec in candidates:
            path = self.which(spec.program)
            if path is not None:
                return spec.with_program(path)
        return None
