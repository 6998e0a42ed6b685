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

"""Utility functions for external commands, version ordering, and dependency reports."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable

import sh

from aks_manager import console, logger
from aks_manager.constants import MIN_AZURE_CLI_VERSION
from aks_manager.errors import DependencyError


# ============================================================================
# External commands
# ============================================================================

def _command_not_found(cmd: str) -> DependencyError:
    return DependencyError(f"Required command '{cmd}' not found. Please install it first.")


def _run(program: str, *args: str, **kwargs):
    logger.debug("$ %s %s", program, " ".join(str(arg) for arg in args))
    try:
        command = getattr(sh, program)
    except sh.CommandNotFound as err:
        raise _command_not_found(program) from err
    return command(*args, **kwargs)


def az(*args: str, **kwargs):
    """Run an Azure CLI command; raises ``sh.ErrorReturnCode`` on failure."""
    return _run("az", *args, **kwargs)


def kubectl(*args: str, **kwargs):
    """Run a kubectl command; raises ``sh.ErrorReturnCode`` on failure."""
    return _run("kubectl", *args, **kwargs)


def ssh(*args: str, **kwargs):
    return _run("ssh", *args, **kwargs)


def scp(*args: str, **kwargs):
    return _run("scp", *args, **kwargs)


# ============================================================================
# Dependency checks
# ============================================================================

def command_available(cmd: str) -> bool:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Returns:
        True if the command resolves to an executable.
    """
    try:
        return bool(sh.which(cmd))
    except sh.ErrorReturnCode:
        return False


def require_command(cmd: str) -> None:
    """Fail fast when a command a workflow is about to use is not installed.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        DependencyError: If the command is not found.
    """
    if not command_available(cmd):
        raise _command_not_found(cmd)


def version_key(version: str) -> tuple[int, ...]:
    """Sort key giving natural version ordering (``2.9.0`` < ``2.60.0``).

    Non-numeric parts are ignored and an empty string sorts before any
    release, so an unknown version never satisfies a minimum.

    Args:
        version: Dotted version string (e.g. ``2.61.0``).

    Returns:
        Tuple of the numeric components.
    """
    return tuple(int(part) for part in re.findall(r"\d+", version))


def version_at_least(version: str, minimum: str) -> bool:
    """Return whether *version* sorts at or after *minimum*."""
    if not version_key(version):
        return False
    return version_key(version) >= version_key(minimum)


def azure_cli_version() -> str:
    """Query the installed Azure CLI version.

    Returns:
        The ``azure-cli`` version string, or an empty string when ``az`` is
        missing or the query fails.
    """
    try:
        output = az("version", "-o", "json")
    except (sh.ErrorReturnCode, DependencyError) as err:
        logger.debug("az version failed: %s", err)
        return ""
    return json.loads(str(output)).get("azure-cli", "")


def check_dependencies(tools: Iterable[str], min_az_version: str = MIN_AZURE_CLI_VERSION) -> None:
    """Report each required tool and the Azure CLI version.

    Args:
        tools: Names of the CLI tools the calling workflow needs.
        min_az_version: Oldest acceptable Azure CLI release.

    Raises:
        DependencyError: If a tool is missing or the Azure CLI is too old.
    """
    console.print("[yellow]\u2139\ufe0f  Checking dependencies...[/yellow]")
    missing = False
    for tool in tools:
        if command_available(tool):
            console.print(f"[green]  {tool}: OK[/green]")
        else:
            console.print(f"[red]  {tool}: NOT FOUND[/red]")
            missing = True

    az_version = azure_cli_version()
    if version_at_least(az_version, min_az_version):
        console.print(f"[green]  Azure CLI version: {az_version} (OK)[/green]")
    else:
        console.print(
            f"[red]  Azure CLI version {az_version or 'unknown'} is too old. "
            f"Minimum required: {min_az_version}[/red]"
        )
        missing = True

    if missing:
        raise DependencyError("Dependencies missing. Please fix that before proceeding")
    console.print("[green]\u2705 All dependencies satisfied[/green]")
