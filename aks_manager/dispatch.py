# /*
# Copyright 2026 The AKS Manager Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Verb dispatch shared by every tool.

A tool is a closed set of verbs (an ``enum.Enum`` subclass of :class:`Verb`),
one handler per verb, and a settings class. The ``-x VERB`` option of each
tool command is resolved against the enum and the matching handler is called
with the settings object built once at startup:

    verb missing   -> header + usage on stderr, exit 1
    verb unknown   -> usage on stderr, exit 1
    handler raises AksManagerError       -> message, exit 1
    handler raises sh.ErrorReturnCode    -> failing command, its exit code
                                            (128 + signal number if killed)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

import sh
import typer
from pydantic import ValidationError
from rich.markup import escape

from aks_manager import console, logger
from aks_manager.config import ToolSettings
from aks_manager.errors import AksManagerError

ConfigT = TypeVar("ConfigT", bound=ToolSettings)


class Verb(str, Enum):
    """Base class for a tool's verbs; members carry a one-line description."""

    def __new__(cls, value: str, description: str = "") -> Verb:
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.description = description
        return obj

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Tool(Generic[ConfigT]):
    """A verb-dispatched command.

    Attributes:
        name: Subcommand name under ``aks-manager``.
        title: Header title.
        verbs: Enum of the accepted verbs.
        handlers: Handler for every member of *verbs*.
        config_class: Settings class loaded from the environment.
        header_fields: Returns the ``label -> value`` lines shown in the header.
    """

    name: str
    title: str
    verbs: type[Verb]
    handlers: Mapping[Verb, Callable[[ConfigT], None]]
    config_class: type[ConfigT]
    header_fields: Callable[[ConfigT], Mapping[str, str]]

    def __post_init__(self) -> None:
        missing = [verb.value for verb in self.verbs if verb not in self.handlers]
        foreign = [str(key) for key in self.handlers if not isinstance(key, self.verbs)]
        if missing or foreign:
            raise ValueError(
                f"Tool '{self.name}' handlers do not match its verbs "
                f"(missing: {missing or 'none'}, unknown: {foreign or 'none'})"
            )

    def resolve(self, value: str) -> Verb | None:
        """Look up a verb by its command-line spelling."""
        try:
            return self.verbs(value)
        except ValueError:
            return None

    def header(self, config: ConfigT) -> str:
        lines = [self.title, "=" * 42]
        lines += [f"{label}: {value}" for label, value in self.header_fields(config).items()]
        return "\n".join(lines) + "\n"

    def usage(self, config: ConfigT, prog: str) -> str:
        width = max(len(verb.value) for verb in self.verbs)
        lines = [f"usage: {prog} [options]", "", "Available Commands:"]
        lines += [f"  -x {verb.value:<{width}}  {verb.description}" for verb in self.verbs]
        lines += ["", "Environment variables (with defaults):"]
        lines += [f"  {name}={value}" for name, value in config.env_vars().items()]
        return "\n".join(lines)

    def dispatch(self, value: str | None, config: ConfigT, prog: str) -> int:
        """Run the handler selected by *value* and return the exit status.

        Args:
            value: Verb given with ``-x``, or None when the flag is absent.
            config: Settings passed to the handler.
            prog: Program name shown in the usage line.

        Returns:
            Process exit status.
        """
        if value is None:
            console.print(self.header(config), markup=False, highlight=False)
            console.print(self.usage(config, prog), markup=False, highlight=False)
            return 1

        verb = self.resolve(value)
        if verb is None:
            console.print(f"[red]Unknown verb '{escape(value)}'[/red]")
            console.print(self.usage(config, prog), markup=False, highlight=False)
            return 1

        logger.debug("Dispatching %s -x %s", self.name, verb.value)
        try:
            self.handlers[verb](config)
        except AksManagerError as err:
            console.print(f"[red]\u274c {escape(str(err))}[/red]")
            return 1
        except sh.ErrorReturnCode as err:
            console.print(f"[red]\u274c Command failed (exit {err.exit_code}): {escape(err.full_cmd)}[/red]")
            stderr = err.stderr.decode(errors="replace").strip()
            if stderr:
                console.print(stderr, markup=False, highlight=False)
            return exit_status(err.exit_code)
        return 0


def exit_status(code: int) -> int:
    """Map a command exit code to a process status; signals become 128 + signum."""
    if code < 0:
        return 128 + abs(code)
    return code or 1


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger once per process; *verbose* enables command tracing."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    if verbose:
        logger.setLevel(logging.DEBUG)


def run_tool(tool: Tool, value: str | None, prog: str) -> None:
    """Load the tool's settings, dispatch *value*, and exit with its status.

    Raises:
        typer.Exit: Always, carrying the dispatch exit status.
    """
    setup_logging()
    try:
        config = tool.config_class()
    except ValidationError as err:
        console.print(f"[red]\u274c Invalid configuration for {tool.name}:[/red]")
        console.print(str(err), markup=False, highlight=False)
        raise typer.Exit(code=1)
    raise typer.Exit(code=tool.dispatch(value, config, prog))
