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

"""Virtual networks, peerings, route tables, and private DNS links."""

from __future__ import annotations

import sh
from rich.panel import Panel

from aks_manager import console
from aks_manager.constants import (
    DEFAULT_ROUTE_NAME,
    DEFAULT_ROUTE_PREFIX,
    DNS_LINK_NAME,
    PEERING_HUB_TO_SPOKE,
    PEERING_SPOKE_TO_HUB,
)
from aks_manager.resources import az_table, az_tsv
from aks_manager.utils import az


# ============================================================================
# Virtual networks
# ============================================================================

def create_vnet(
    resource_group: str,
    name: str,
    prefix: str,
    subnet_name: str | None = None,
    subnet_prefix: str | None = None,
) -> None:
    """Create a virtual network, optionally with its first subnet.

    Args:
        resource_group: Resource group to create the network in.
        name: Virtual network name.
        prefix: Address space in CIDR notation.
        subnet_name: Name of a subnet created together with the network.
        subnet_prefix: Address range of that subnet.
    """
    console.print(f"[yellow]\u2139\ufe0f  Creating virtual network {name} ({prefix})...[/yellow]")
    subnet_args: list[str] = []
    if subnet_name:
        subnet_args = ["--subnet-name", subnet_name, "--subnet-prefixes", subnet_prefix or ""]
    az(
        "network", "vnet", "create",
        "--resource-group", resource_group,
        "--name", name,
        "--address-prefixes", prefix,
        *subnet_args,
        "-o", "none",
    )
    console.print(f"[green]\u2705 Virtual network {name} created[/green]")


def create_subnet(resource_group: str, vnet: str, name: str, prefix: str) -> None:
    console.print(f"[yellow]\u2139\ufe0f  Creating subnet {name} ({prefix}) in {vnet}...[/yellow]")
    az(
        "network", "vnet", "subnet", "create",
        "--resource-group", resource_group,
        "--vnet-name", vnet,
        "--name", name,
        "--address-prefixes", prefix,
        "-o", "none",
    )


def vnet_id(resource_group: str, name: str) -> str:
    return az_tsv("network", "vnet", "show", "-g", resource_group, "-n", name, "--query", "id")


def subnet_id(resource_group: str, vnet: str, name: str) -> str:
    return az_tsv(
        "network", "vnet", "subnet", "show",
        "--resource-group", resource_group,
        "--vnet-name", vnet,
        "--name", name,
        "--query", "id",
    )


def list_vnets(resource_group: str) -> str:
    return az_table("network", "vnet", "list", "-g", resource_group)


# ============================================================================
# Peering
# ============================================================================

def _create_peering(resource_group: str, name: str, vnet: str, remote_vnet_id: str) -> None:
    az(
        "network", "vnet", "peering", "create",
        "--resource-group", resource_group,
        "--name", name,
        "--vnet-name", vnet,
        "--remote-vnet", remote_vnet_id,
        "--allow-vnet-access",
        "--allow-forwarded-traffic",
        "-o", "none",
    )


def peer_vnets(resource_group: str, hub_vnet: str, spoke_vnet: str) -> None:
    """Peer hub and spoke in both directions with forwarded traffic allowed.

    Args:
        resource_group: Resource group holding both networks.
        hub_vnet: Hub virtual network name.
        spoke_vnet: Spoke virtual network name.
    """
    console.print(Panel.fit("Creating VNet peerings", style="bold blue"))
    hub_id = vnet_id(resource_group, hub_vnet)
    spoke_id = vnet_id(resource_group, spoke_vnet)
    _create_peering(resource_group, PEERING_HUB_TO_SPOKE, hub_vnet, spoke_id)
    _create_peering(resource_group, PEERING_SPOKE_TO_HUB, spoke_vnet, hub_id)
    console.print("[green]\u2705 VNet peerings created[/green]")


# ============================================================================
# Routing
# ============================================================================

def create_route_table(resource_group: str, name: str, next_hop_ip: str) -> None:
    """Create a route table sending all traffic to a virtual appliance.

    BGP route propagation is disabled so the default route cannot be
    overridden by gateway-learned routes.

    Args:
        resource_group: Resource group to create the table in.
        name: Route table name.
        next_hop_ip: Private IP of the virtual appliance.
    """
    console.print(Panel.fit("Creating route table for forced tunneling", style="bold blue"))
    az(
        "network", "route-table", "create",
        "--resource-group", resource_group,
        "--name", name,
        "--disable-bgp-route-propagation", "true",
        "-o", "none",
    )
    az(
        "network", "route-table", "route", "create",
        "--resource-group", resource_group,
        "--route-table-name", name,
        "--name", DEFAULT_ROUTE_NAME,
        "--address-prefix", DEFAULT_ROUTE_PREFIX,
        "--next-hop-type", "VirtualAppliance",
        "--next-hop-ip-address", next_hop_ip,
        "-o", "none",
    )
    console.print(f"[green]\u2705 Route table {name} created (next hop {next_hop_ip})[/green]")


def associate_route_table(resource_group: str, vnet: str, subnet: str, route_table: str) -> None:
    az(
        "network", "vnet", "subnet", "update",
        "--resource-group", resource_group,
        "--vnet-name", vnet,
        "--name", subnet,
        "--route-table", route_table,
        "-o", "none",
    )
    console.print(f"[green]\u2705 Route table {route_table} associated with {vnet}/{subnet}[/green]")


def list_routes(resource_group: str, route_table: str) -> str | None:
    """Return the routes of a table as text, or None if the table is missing."""
    try:
        return az_table("network", "route-table", "route", "list",
                        "-g", resource_group, "--route-table-name", route_table)
    except sh.ErrorReturnCode:
        return None


# ============================================================================
# Private DNS
# ============================================================================

def link_private_dns_zone(node_resource_group: str, hub_vnet_id: str) -> None:
    """Link the private cluster's DNS zone to the hub network.

    AKS creates the zone in the node resource group; linking it lets hosts in
    the hub (the appliance) resolve the private API server.

    Args:
        node_resource_group: Managed resource group of the cluster.
        hub_vnet_id: Resource ID of the hub virtual network.
    """
    console.print(Panel.fit("Linking private DNS zone to hub VNet", style="bold blue"))
    zone = az_tsv("network", "private-dns", "zone", "list", "-g", node_resource_group, "--query", "[0].name")
    az(
        "network", "private-dns", "link", "vnet", "create",
        "--resource-group", node_resource_group,
        "--zone-name", zone,
        "--name", DNS_LINK_NAME,
        "--virtual-network", hub_vnet_id,
        "--registration-enabled", "false",
        "-o", "none",
    )
    console.print(f"[green]\u2705 Private DNS zone {zone} linked to hub VNet[/green]")
