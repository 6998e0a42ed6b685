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

"""Azure CLI output helpers, providers, resource groups, and credentials."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import sh
from rich.panel import Panel

from aks_manager import console
from aks_manager.utils import az


# ============================================================================
# Output helpers
# ============================================================================

def az_json(*args: str) -> Any:
    """Run an Azure CLI command and parse its JSON output."""
    return json.loads(str(az(*args, "-o", "json")))


def az_tsv(*args: str) -> str:
    """Run an Azure CLI command and return its TSV output stripped."""
    return str(az(*args, "-o", "tsv")).strip()


def az_table(*args: str) -> str:
    return str(az(*args, "-o", "table")).rstrip()


def az_exists(*args: str) -> bool:
    """Run a ``show`` style command and report whether it succeeded.

    Args:
        *args: Azure CLI arguments (e.g. ``"aks", "show", "--name", "c"``).

    Returns:
        False if the command exits non-zero.
    """
    try:
        az(*args, "-o", "none")
    except sh.ErrorReturnCode:
        return False
    return True


# ============================================================================
# Subscription setup
# ============================================================================

def register_providers(namespaces: Iterable[str]) -> None:
    """Register resource providers and wait for each to complete.

    Args:
        namespaces: Provider namespaces (e.g. ``Microsoft.Network``).
    """
    console.print(Panel.fit("Registering resource providers", style="bold blue"))
    for namespace in namespaces:
        console.print(f"[yellow]   Registering {namespace}[/yellow]")
        az("provider", "register", "--namespace", namespace, "--wait")
    console.print("[green]\u2705 Resource providers registered[/green]")


def register_feature(namespace: str, name: str) -> None:
    """Register a preview feature, then re-register its provider to propagate it.

    Args:
        namespace: Provider namespace owning the feature.
        name: Feature name.
    """
    console.print(Panel.fit("Registering preview features", style="bold blue"))
    console.print(f"[yellow]   Registering {name} feature[/yellow]")
    az("feature", "register", "--namespace", namespace, "--name", name)
    console.print(f"[yellow]   Registering {namespace} provider[/yellow]")
    az("provider", "register", "--namespace", namespace, "--wait")
    console.print("[green]\u2705 Preview features registered[/green]")


# ============================================================================
# Resource groups
# ============================================================================

def create_resource_group(name: str, location: str) -> None:
    console.print(f"[yellow]\u2139\ufe0f  Creating resource group {name} in {location}[/yellow]")
    az("group", "create", "--location", location, "--name", name, "-o", "none")
    console.print(f"[green]\u2705 Resource group {name} ready[/green]")


def resource_group_exists(name: str) -> bool:
    return az_exists("group", "show", "--name", name)


def delete_resource_group(name: str) -> None:
    """Start deletion of a resource group without waiting for it to finish.

    Args:
        name: Resource group name.
    """
    console.print(f"[yellow]\u2139\ufe0f  Deleting resource group {name}[/yellow]")
    az("group", "delete", "--name", name, "--yes", "--no-wait")


# ============================================================================
# Credentials
# ============================================================================

def get_credentials(resource_group: str, cluster: str, kubeconfig: Path, quiet: bool = False) -> None:
    """Write cluster credentials to a kubeconfig file.

    Args:
        resource_group: Resource group holding the cluster.
        cluster: AKS cluster name.
        kubeconfig: Destination file, overwritten if it exists.
        quiet: Suppress progress output.
    """
    if not quiet:
        console.print("[yellow]\u2139\ufe0f  Getting cluster credentials...[/yellow]")
    az(
        "aks", "get-credentials",
        "--resource-group", resource_group,
        "--name", cluster,
        "--file", str(kubeconfig),
        "--overwrite-existing",
    )
    if not quiet:
        console.print(f"[green]\u2705 Credentials written to {kubeconfig}[/green]")
