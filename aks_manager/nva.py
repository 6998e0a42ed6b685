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

"""FreeBSD network virtual appliance: VM, PF NAT configuration, and access."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePosixPath

import sh
from rich.panel import Panel

from aks_manager import console, logger
from aks_manager.config import HubSpokeConfig
from aks_manager.constants import (
    NVA_EXTERNAL_INTERFACE,
    NVA_PF_CONF_PATH,
    NVA_REMOTE_KUBECONFIG,
    NVA_SUBNET_NAME,
    SSH_NO_HOST_KEY_CHECK,
    VNET_ADDRESS_SPACE,
)
from aks_manager.resources import az_exists, az_tsv
from aks_manager.utils import az, require_command, scp, ssh


@dataclass(frozen=True)
class ImageUrn:
    """Marketplace image reference ``publisher:offer:sku:version``."""

    publisher: str
    offer: str
    sku: str
    version: str


def parse_image_urn(urn: str) -> ImageUrn:
    """Split a marketplace image URN into its parts.

    Args:
        urn: Image URN (e.g. ``thefreebsdfoundation:freebsd-14_2:14_2-release-amd64-gen2-zfs:14.2.0``).

    Returns:
        Parsed :class:`ImageUrn`.

    Raises:
        ValueError: If the URN does not have four non-empty parts.
    """
    parts = urn.split(":")
    if len(parts) != 4 or not all(parts):
        raise ValueError(f"Invalid image URN '{urn}', expected publisher:offer:sku:version")
    return ImageUrn(*parts)


def pf_conf(ext_if: str = NVA_EXTERNAL_INTERFACE, source: str = VNET_ADDRESS_SPACE) -> str:
    """Render a PF ruleset that NATs all traffic from *source*, ICMP included.

    Args:
        ext_if: External interface of the appliance.
        source: Address range whose traffic is translated.

    Returns:
        Contents of ``/etc/pf.conf``.
    """
    return (
        "# PF configuration for ICMP NAT\n"
        f'ext_if = "{ext_if}"\n'
        "\n"
        "# NAT all outbound traffic including ICMP\n"
        f"nat on $ext_if from {source} to any -> ($ext_if)\n"
        "\n"
        "# Allow all traffic\n"
        "pass all\n"
    )


# ============================================================================
# Queries
# ============================================================================

def nva_exists(cfg: HubSpokeConfig) -> bool:
    return az_exists("vm", "show", "--name", cfg.nva_name, "--resource-group", cfg.resource_group)


def nva_public_ip(cfg: HubSpokeConfig) -> str:
    return az_tsv("network", "public-ip", "show", "-g", cfg.resource_group, "-n", cfg.nva_public_ip_name,
                  "--query", "ipAddress")


def nva_private_ip(cfg: HubSpokeConfig) -> str:
    return az_tsv("vm", "show", "-g", cfg.resource_group, "-n", cfg.nva_name, "-d", "--query", "privateIps")


# ============================================================================
# Provisioning
# ============================================================================

def accept_marketplace_terms(image: str) -> None:
    """Accept the marketplace terms of the appliance image.

    Terms that are already accepted, or images without a purchase plan, make
    the command fail; that is reported and provisioning continues.

    Args:
        image: Marketplace image URN.
    """
    urn = parse_image_urn(image)
    console.print(f"[yellow]\u2139\ufe0f  Accepting marketplace terms for {urn.publisher}/{urn.offer}...[/yellow]")
    try:
        az("vm", "image", "terms", "accept",
           "--publisher", urn.publisher, "--offer", urn.offer, "--plan", urn.sku, "-o", "none")
        console.print("[green]\u2705 Marketplace terms accepted[/green]")
    except sh.ErrorReturnCode as err:
        logger.debug("terms accept failed: %s", err)
        console.print("[yellow]\u26a0\ufe0f  Could not accept marketplace terms (continuing)[/yellow]")


def create_nva(cfg: HubSpokeConfig) -> None:
    """Create the appliance VM with a public IP, an NSG, and IP forwarding.

    Args:
        cfg: Hub-spoke configuration with the appliance and hub settings.
    """
    console.print(Panel.fit(f"Creating FreeBSD NVA {cfg.nva_name}", style="bold blue"))
    rg = cfg.resource_group
    az("network", "public-ip", "create", "--resource-group", rg, "--name", cfg.nva_public_ip_name,
       "--sku", "Standard", "--allocation-method", "Static", "-o", "none")

    az("network", "nsg", "create", "--resource-group", rg, "--name", cfg.nva_nsg_name, "-o", "none")
    az("network", "nsg", "rule", "create", "--resource-group", rg, "--nsg-name", cfg.nva_nsg_name,
       "--name", "allow-ssh", "--priority", "100", "--access", "Allow", "--protocol", "Tcp",
       "--destination-port-ranges", "22", "-o", "none")
    az("network", "nsg", "rule", "create", "--resource-group", rg, "--nsg-name", cfg.nva_nsg_name,
       "--name", "allow-vnet-inbound", "--priority", "200", "--access", "Allow", "--protocol", "*",
       "--direction", "Inbound", "--source-address-prefixes", VNET_ADDRESS_SPACE,
       "--destination-port-ranges", "*", "-o", "none")

    az(
        "vm", "create",
        "--resource-group", rg,
        "--name", cfg.nva_name,
        "--image", cfg.nva_image,
        "--size", cfg.nva_size,
        "--vnet-name", cfg.hub_vnet_name,
        "--subnet", NVA_SUBNET_NAME,
        "--public-ip-address", cfg.nva_public_ip_name,
        "--admin-username", cfg.nva_admin_user,
        "--generate-ssh-keys",
        "--nsg", cfg.nva_nsg_name,
        "-o", "none",
    )

    # Forwarding must be enabled on the NIC as well as inside the guest.
    nic_id = az_tsv("vm", "show", "-g", rg, "-n", cfg.nva_name,
                    "--query", "networkProfile.networkInterfaces[0].id")
    az("network", "nic", "update", "--resource-group", rg, "--name", PurePosixPath(nic_id).name,
       "--ip-forwarding", "true", "-o", "none")
    console.print("[green]\u2705 FreeBSD NVA created[/green]")


def configure_nva(cfg: HubSpokeConfig, sleep: Callable[[float], None] = time.sleep) -> None:
    """Install the PF NAT ruleset and enable forwarding on the appliance.

    Waits a fixed ``cfg.nva_boot_wait`` seconds for sshd before connecting.

    Args:
        cfg: Hub-spoke configuration with the appliance settings.
        sleep: Delay function.

    Raises:
        DependencyError: If ssh is not installed.
    """
    require_command("ssh")
    console.print(Panel.fit("Configuring PF on FreeBSD NVA", style="bold blue"))
    target = f"{cfg.nva_admin_user}@{nva_public_ip(cfg)}"

    console.print(f"[yellow]\u2139\ufe0f  Waiting {cfg.nva_boot_wait}s for {target} to boot...[/yellow]")
    sleep(cfg.nva_boot_wait)

    ssh(*SSH_NO_HOST_KEY_CHECK, target, f"sudo tee {NVA_PF_CONF_PATH}", _in=pf_conf())
    ssh(target, "sudo sysrc gateway_enable=YES && sudo sysrc pf_enable=YES "
                "&& sudo sysctl net.inet.ip.forwarding=1")
    ssh(target, f"sudo kldload pf 2>/dev/null || true && sudo pfctl -f {NVA_PF_CONF_PATH} "
                "&& sudo pfctl -e 2>/dev/null || true")
    console.print("[green]\u2705 PF configured on FreeBSD NVA[/green]")


def copy_kubeconfig(cfg: HubSpokeConfig) -> None:
    """Copy the cluster kubeconfig to the appliance's admin home directory."""
    require_command("scp")
    target = f"{cfg.nva_admin_user}@{nva_public_ip(cfg)}"
    console.print(f"[yellow]\u2139\ufe0f  Copying kubeconfig to {target}...[/yellow]")
    scp(*SSH_NO_HOST_KEY_CHECK, str(cfg.kubeconfig), f"{target}:{NVA_REMOTE_KUBECONFIG}")
    console.print(f"[green]\u2705 Kubeconfig copied to NVA at {NVA_REMOTE_KUBECONFIG}[/green]")
