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

"""AKS cluster lifecycle, node pools, and in-cluster command invocation."""

from __future__ import annotations

from rich.panel import Panel

from aks_manager import console
from aks_manager.resources import az_exists, az_json, az_table, az_tsv
from aks_manager.utils import az


# ============================================================================
# Queries
# ============================================================================

def cluster_exists(resource_group: str, cluster: str) -> bool:
    return az_exists("aks", "show", "--name", cluster, "--resource-group", resource_group)


def show_cluster(resource_group: str, cluster: str) -> dict:
    """Return the ``az aks show`` document of a cluster."""
    return az_json("aks", "show", "--name", cluster, "--resource-group", resource_group)


def cluster_summary_table(resource_group: str, cluster: str) -> str:
    """Render name, state, version, and private flag of a cluster as a table."""
    return az_table(
        "aks", "show", "--name", cluster, "--resource-group", resource_group,
        "--query",
        "{Name:name, State:provisioningState, K8sVersion:kubernetesVersion, "
        "PrivateCluster:apiServerAccessProfile.enablePrivateCluster}",
    )


def list_node_pools(resource_group: str, cluster: str) -> str:
    return az_table("aks", "nodepool", "list", "--resource-group", resource_group, "--cluster-name", cluster)


def node_resource_group(resource_group: str, cluster: str) -> str:
    """Return the managed resource group AKS creates for the cluster's nodes."""
    return az_tsv("aks", "show", "-g", resource_group, "-n", cluster, "--query", "nodeResourceGroup")


# ============================================================================
# Cluster operations
# ============================================================================

def create_cluster(resource_group: str, cluster: str, *extra_args: str) -> None:
    """Create an AKS cluster.

    Args:
        resource_group: Resource group to create the cluster in.
        cluster: AKS cluster name.
        *extra_args: Additional ``az aks create`` flags chosen by the caller.
    """
    console.print(Panel.fit(f"Creating AKS cluster {cluster}", style="bold blue"))
    az("aks", "create", "--resource-group", resource_group, "--name", cluster, *extra_args)
    console.print("[green]\u2705 AKS cluster created successfully[/green]")


def enable_scheduler_configuration(resource_group: str, cluster: str) -> None:
    console.print(f"[yellow]\u2139\ufe0f  Cluster {cluster} already exists, updating configuration...[/yellow]")
    az(
        "aks", "update",
        "--resource-group", resource_group,
        "--name", cluster,
        "--enable-upstream-kubescheduler-user-configuration",
    )
    console.print("[green]\u2705 AKS cluster updated successfully[/green]")


def add_node_pool(
    resource_group: str,
    cluster: str,
    name: str,
    vm_size: str,
    node_count: int,
    zones: list[str],
) -> None:
    """Add a node pool to an existing cluster.

    Args:
        resource_group: Resource group holding the cluster.
        cluster: AKS cluster name.
        name: Node pool name.
        vm_size: VM size of the pool's nodes.
        node_count: Number of nodes.
        zones: Availability zones, or empty for a regional pool.
    """
    console.print(Panel.fit(f"Creating node pool {name} with {vm_size}", style="bold blue"))
    zone_args = ["--zones", *zones] if zones else []
    az(
        "aks", "nodepool", "add",
        "--resource-group", resource_group,
        "--cluster-name", cluster,
        "--name", name,
        "--node-count", str(node_count),
        "--node-vm-size", vm_size,
        *zone_args,
    )
    console.print(f"[green]\u2705 Node pool {name} created successfully[/green]")


def delete_cluster(resource_group: str, cluster: str) -> None:
    """Delete a cluster if it exists.

    Args:
        resource_group: Resource group holding the cluster.
        cluster: AKS cluster name.
    """
    if cluster_exists(resource_group, cluster):
        console.print(f"[yellow]\u2139\ufe0f  Deleting AKS cluster {cluster}[/yellow]")
        az("aks", "delete", "--name", cluster, "--resource-group", resource_group, "--yes")
        console.print(f"[green]\u2705 Cluster {cluster} deleted[/green]")
    else:
        console.print(f"[yellow]\u26a0\ufe0f  Cluster {cluster} not found, skipping cluster deletion[/yellow]")


def invoke_command(resource_group: str, cluster: str, command: str) -> str:
    """Run a shell command inside a (possibly private) cluster.

    Uses ``az aks command invoke`` so that clusters without a public API
    endpoint can be reached.

    Args:
        resource_group: Resource group holding the cluster.
        cluster: AKS cluster name.
        command: Command line executed by the invoke pod.

    Returns:
        The command's output.
    """
    return str(az(
        "aks", "command", "invoke",
        "--resource-group", resource_group,
        "--name", cluster,
        "--command", command,
    ))
