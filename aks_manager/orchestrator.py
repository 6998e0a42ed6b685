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

"""Orchestration functions that compose domain modules into workflows."""

from __future__ import annotations

import time
from collections.abc import Callable

import sh
from rich.panel import Panel

from aks_manager import console, logger
from aks_manager.cluster import (
    add_node_pool,
    cluster_exists,
    cluster_summary_table,
    create_cluster,
    delete_cluster,
    enable_scheduler_configuration,
    invoke_command,
    list_node_pools,
    node_resource_group,
    show_cluster,
)
from aks_manager.config import AksConfig, HubSpokeConfig, SchedulerConfig
from aks_manager.constants import (
    AKS_REQUIRED_TOOLS,
    AKS_SUBNET_NAME,
    AKS_SUBNET_PREFIX,
    AKS_VNET_NAME,
    AKS_VNET_PREFIX,
    CLUSTER_PROVIDERS,
    FEATURE_SCHEDULER_CONFIGURATION,
    HUB_SPOKE_NODE_VM_SIZE,
    HUB_SPOKE_REQUIRED_TOOLS,
    NVA_SUBNET_NAME,
    OUTBOUND_IP_URL,
    PING_TARGET,
    PROVIDER_CONTAINER_SERVICE,
    ROUTE_TABLE_NAME,
    SCHEDULER_REQUIRED_TOOLS,
    TEST_POD_IMAGE,
    TEST_POD_NAME,
)
from aks_manager.errors import ResourceNotFoundError
from aks_manager.network import (
    associate_route_table,
    create_route_table,
    create_subnet,
    create_vnet,
    link_private_dns_zone,
    list_routes,
    list_vnets,
    peer_vnets,
    subnet_id,
    vnet_id,
)
from aks_manager.nva import (
    accept_marketplace_terms,
    configure_nva,
    copy_kubeconfig,
    create_nva,
    nva_exists,
    nva_private_ip,
    nva_public_ip,
)
from aks_manager.resources import (
    create_resource_group,
    delete_resource_group,
    get_credentials,
    register_feature,
    register_providers,
    resource_group_exists,
)
from aks_manager.scheduler import apply_scheduler_config, generate_scheduler_configs, scheduler_configurations
from aks_manager.utils import check_dependencies


# ============================================================================
# Internal helpers
# ============================================================================

def _print_section(title: str, body: str) -> None:
    console.print(f"\n{title}\n{'=' * len(title)}", markup=False, highlight=False)
    console.print(body, markup=False, highlight=False)


def _require_cluster(resource_group: str, cluster: str) -> None:
    if not cluster_exists(resource_group, cluster):
        raise ResourceNotFoundError(f"Cluster {cluster} not found in resource group {resource_group}")


def _print_done(message: str, hints: list[str]) -> None:
    console.print(f"\n[green]\u2705 {message}[/green]")
    for hint in hints:
        console.print(f"[yellow]   {hint}[/yellow]")


# ============================================================================
# aks
# ============================================================================

def run_aks_install(cfg: AksConfig) -> None:
    """Create a single-node AKS cluster with managed identity in its own VNet.

    Args:
        cfg: aks tool configuration.

    Raises:
        DependencyError: If a required tool is missing.
    """
    check_dependencies(AKS_REQUIRED_TOOLS)
    register_providers(CLUSTER_PROVIDERS)
    create_resource_group(cfg.resource_group, cfg.location)

    console.print(Panel.fit("Creating virtual network and subnet", style="bold blue"))
    create_vnet(cfg.resource_group, AKS_VNET_NAME, AKS_VNET_PREFIX)
    create_subnet(cfg.resource_group, AKS_VNET_NAME, AKS_SUBNET_NAME, AKS_SUBNET_PREFIX)

    aks_subnet_id = subnet_id(cfg.resource_group, AKS_VNET_NAME, AKS_SUBNET_NAME)
    create_cluster(
        cfg.resource_group, cfg.cluster,
        "--kubernetes-version", cfg.kubernetes_version,
        "--node-count", str(cfg.node_count),
        "--enable-managed-identity",
        "--vnet-subnet-id", aks_subnet_id,
    )
    get_credentials(cfg.resource_group, cfg.cluster, cfg.kubeconfig)

    _print_done("AKS cluster installation completed!", [
        "Run with '-x show' to get cluster information",
        f"Kubernetes version: {cfg.kubernetes_version}",
    ])


def show_aks(cfg: AksConfig) -> None:
    """Print cluster facts and its node pools.

    Raises:
        ResourceNotFoundError: If the cluster does not exist.
    """
    console.print("[yellow]\u2139\ufe0f  Getting cluster information...[/yellow]")
    _require_cluster(cfg.resource_group, cfg.cluster)
    info = show_cluster(cfg.resource_group, cfg.cluster)
    _print_section("Cluster Information:", "\n".join([
        f"Name: {cfg.cluster}",
        f"Resource Group: {cfg.resource_group}",
        f"Location: {cfg.location}",
        f"Kubernetes Version: {info.get('kubernetesVersion')}",
        f"Provisioning State: {info.get('provisioningState')}",
        f"FQDN: {info.get('fqdn')}",
    ]))
    _print_section("Node Pool Information:", list_node_pools(cfg.resource_group, cfg.cluster))


def destroy_aks(cfg: AksConfig) -> None:
    console.print(Panel.fit("Destroying AKS cluster and associated resources", style="bold red"))
    delete_cluster(cfg.resource_group, cfg.cluster)
    delete_resource_group(cfg.resource_group)
    console.print("[green]\u2705 Destruction completed[/green]")


# ============================================================================
# scheduler
# ============================================================================

def register_scheduler_feature(cfg: SchedulerConfig) -> None:
    register_feature(PROVIDER_CONTAINER_SERVICE, FEATURE_SCHEDULER_CONFIGURATION)


def create_scheduler_cluster(cfg: SchedulerConfig) -> None:
    """Create the cluster with scheduler user configuration, or enable it on an existing one."""
    if cluster_exists(cfg.resource_group, cfg.cluster):
        enable_scheduler_configuration(cfg.resource_group, cfg.cluster)
        return
    create_cluster(
        cfg.resource_group, cfg.cluster,
        "--node-count", "1",
        "--enable-upstream-kubescheduler-user-configuration",
        "--generate-ssh-keys",
    )


def create_gpu_pool(cfg: SchedulerConfig) -> None:
    add_node_pool(
        cfg.resource_group, cfg.cluster,
        name=cfg.gpu_pool_name,
        vm_size=cfg.gpu_vm_size,
        node_count=cfg.gpu_node_count,
        zones=cfg.gpu_zones.split(),
    )


def run_scheduler_install(cfg: SchedulerConfig) -> None:
    """Deploy the cluster, the GPU pool, and the default scheduler profile.

    Args:
        cfg: scheduler tool configuration.
    """
    check_dependencies(SCHEDULER_REQUIRED_TOOLS)
    register_scheduler_feature(cfg)
    create_resource_group(cfg.resource_group, cfg.location)
    create_scheduler_cluster(cfg)
    create_gpu_pool(cfg)
    generate_scheduler_configs(cfg.scheduler_config_dir)
    apply_scheduler_config(cfg)
    _print_done("AKS custom scheduler setup completed!", [
        "Run with '-x show' to get cluster scheduler information",
    ])


def show_scheduler(cfg: SchedulerConfig) -> None:
    """Print cluster facts and the SchedulerConfiguration resources.

    Raises:
        ResourceNotFoundError: If the cluster does not exist.
    """
    console.print("[yellow]\u2139\ufe0f  Getting cluster scheduler information...[/yellow]")
    _require_cluster(cfg.resource_group, cfg.cluster)
    info = show_cluster(cfg.resource_group, cfg.cluster)
    _print_section("Cluster Information:", "\n".join([
        f"Name: {cfg.cluster}",
        f"Resource Group: {cfg.resource_group}",
        f"Kubernetes Version: {info.get('kubernetesVersion')}",
        f"Provisioning State: {info.get('provisioningState')}",
    ]))
    get_credentials(cfg.resource_group, cfg.cluster, cfg.kubeconfig, quiet=True)
    configurations = scheduler_configurations(cfg.kubeconfig)
    _print_section("Scheduler Configurations:", configurations or "No scheduler configurations found")


def delete_scheduler(cfg: SchedulerConfig) -> None:
    console.print(Panel.fit("Destroying AKS cluster and resource group", style="bold red"))
    delete_cluster(cfg.resource_group, cfg.cluster)
    if resource_group_exists(cfg.resource_group):
        delete_resource_group(cfg.resource_group)
    else:
        console.print(f"[yellow]\u26a0\ufe0f  Resource group {cfg.resource_group} not found, "
                      "skipping resource group deletion[/yellow]")
    console.print("[green]\u2705 Destruction completed[/green]")


# ============================================================================
# hub-spoke
# ============================================================================

def create_test_pod(cfg: HubSpokeConfig, sleep: Callable[[float], None] = time.sleep) -> None:
    """Start a long-running alpine pod used by the connectivity test.

    A pod left over from a previous run makes ``kubectl run`` fail; that is
    reported and the existing pod is reused.
    """
    console.print(f"[yellow]\u2139\ufe0f  Creating test pod {TEST_POD_NAME}...[/yellow]")
    try:
        invoke_command(
            cfg.resource_group, cfg.cluster,
            f"kubectl run {TEST_POD_NAME} --image={TEST_POD_IMAGE} --restart=Never --command -- sleep infinity",
        )
    except sh.ErrorReturnCode as err:
        logger.debug("kubectl run failed: %s", err)
        console.print(f"[yellow]\u26a0\ufe0f  Could not create {TEST_POD_NAME} (it may already exist)[/yellow]")
    sleep(cfg.test_pod_wait)
    console.print("[green]\u2705 Test pod created[/green]")


def run_hub_spoke_install(cfg: HubSpokeConfig, sleep: Callable[[float], None] = time.sleep) -> None:
    """Deploy hub and spoke networks, the NVA, and a private cluster routed through it.

    Args:
        cfg: hub-spoke tool configuration.
        sleep: Delay function used for the fixed readiness waits.
    """
    rg = cfg.resource_group
    check_dependencies(HUB_SPOKE_REQUIRED_TOOLS)
    register_providers(CLUSTER_PROVIDERS)
    create_resource_group(rg, cfg.location)

    create_vnet(rg, cfg.hub_vnet_name, cfg.hub_vnet_prefix, NVA_SUBNET_NAME, cfg.nva_subnet_prefix)
    create_vnet(rg, cfg.spoke_vnet_name, cfg.spoke_vnet_prefix, AKS_SUBNET_NAME, cfg.aks_subnet_prefix)
    peer_vnets(rg, cfg.hub_vnet_name, cfg.spoke_vnet_name)

    accept_marketplace_terms(cfg.nva_image)
    create_nva(cfg)
    configure_nva(cfg, sleep=sleep)

    create_route_table(rg, ROUTE_TABLE_NAME, nva_private_ip(cfg))
    associate_route_table(rg, cfg.spoke_vnet_name, AKS_SUBNET_NAME, ROUTE_TABLE_NAME)

    create_cluster(
        rg, cfg.cluster,
        "--location", cfg.location,
        "--kubernetes-version", cfg.kubernetes_version,
        "--node-count", str(cfg.node_count),
        "--vnet-subnet-id", subnet_id(rg, cfg.spoke_vnet_name, AKS_SUBNET_NAME),
        "--network-plugin", "azure",
        "--outbound-type", "userDefinedRouting",
        "--enable-private-cluster",
        "--generate-ssh-keys",
        "--node-vm-size", HUB_SPOKE_NODE_VM_SIZE,
        "-o", "none",
    )
    link_private_dns_zone(node_resource_group(rg, cfg.cluster), vnet_id(rg, cfg.hub_vnet_name))
    get_credentials(rg, cfg.cluster, cfg.kubeconfig)
    copy_kubeconfig(cfg)
    create_test_pod(cfg, sleep=sleep)

    _print_done("Hub-Spoke AKS with FreeBSD NVA installation completed!", [
        "Run with '-x show' to get infrastructure information",
        "Run with '-x test-icmp' to test ICMP connectivity",
    ])


def show_hub_spoke(cfg: HubSpokeConfig) -> None:
    """Print cluster, appliance, network, and route information that exists."""
    console.print("[yellow]\u2139\ufe0f  Getting infrastructure information...[/yellow]")
    console.print(f"\nResource Group: {cfg.resource_group}\nLocation: {cfg.location}",
                  markup=False, highlight=False)

    if cluster_exists(cfg.resource_group, cfg.cluster):
        _print_section("AKS Cluster Information:", cluster_summary_table(cfg.resource_group, cfg.cluster))

    if nva_exists(cfg):
        public_ip = nva_public_ip(cfg)
        _print_section("FreeBSD NVA Information:", "\n".join([
            f"Name: {cfg.nva_name}",
            f"Public IP: {public_ip}",
            f"Private IP: {nva_private_ip(cfg)}",
            f"SSH: ssh {cfg.nva_admin_user}@{public_ip}",
        ]))

    _print_section("Network Configuration:", list_vnets(cfg.resource_group))
    _print_section("Route Table:", list_routes(cfg.resource_group, ROUTE_TABLE_NAME) or "No route table found")


def destroy_hub_spoke(cfg: HubSpokeConfig) -> None:
    console.print(Panel.fit("Destroying all resources", style="bold red"))
    delete_resource_group(cfg.resource_group)
    console.print("[green]\u2705 Destruction initiated (running in background)[/green]")


def run_icmp_test(cfg: HubSpokeConfig) -> None:
    """Ping out of the cluster and compare its egress IP with the appliance's.

    Args:
        cfg: hub-spoke tool configuration.
    """
    console.print(Panel.fit("Testing ICMP connectivity from AKS pod", style="bold blue"))
    ping = invoke_command(
        cfg.resource_group, cfg.cluster,
        f"kubectl exec {TEST_POD_NAME} -- ping -c 3 {PING_TARGET} 2>/dev/null "
        "|| echo 'Creating test pod first...'",
    )
    _print_section(f"Ping test to {PING_TARGET}:", ping.rstrip())

    outbound = invoke_command(
        cfg.resource_group, cfg.cluster,
        f"kubectl exec {TEST_POD_NAME} -- wget -qO- {OUTBOUND_IP_URL} 2>/dev/null",
    )
    _print_section("Checking outbound IP:", outbound.rstrip())
    console.print(f"\nExpected NVA public IP: {nva_public_ip(cfg)}", markup=False, highlight=False)
