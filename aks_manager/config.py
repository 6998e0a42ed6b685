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

"""Configuration classes, one per tool, loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from aks_manager.constants import (
    DEFAULT_AKS_CLUSTER,
    DEFAULT_AKS_KUBERNETES_VERSION,
    DEFAULT_AKS_LOCATION,
    DEFAULT_AKS_RESOURCE_GROUP,
    DEFAULT_AKS_SUBNET_PREFIX,
    DEFAULT_GPU_POOL_NAME,
    DEFAULT_GPU_VM_SIZE,
    DEFAULT_GPU_ZONES,
    DEFAULT_HUB_SPOKE_CLUSTER,
    DEFAULT_HUB_SPOKE_KUBERNETES_VERSION,
    DEFAULT_HUB_SPOKE_LOCATION,
    DEFAULT_HUB_SPOKE_RESOURCE_GROUP,
    DEFAULT_HUB_VNET_NAME,
    DEFAULT_HUB_VNET_PREFIX,
    DEFAULT_KUBECONFIG_NAME,
    DEFAULT_NODE_COUNT,
    DEFAULT_NVA_ADMIN_USER,
    DEFAULT_NVA_BOOT_WAIT_SECONDS,
    DEFAULT_NVA_IMAGE,
    DEFAULT_NVA_NAME,
    DEFAULT_NVA_SIZE,
    DEFAULT_NVA_SUBNET_PREFIX,
    DEFAULT_RULESETS_SUBDIR,
    DEFAULT_SCHEDULER_CLUSTER,
    DEFAULT_SCHEDULER_CONFIG,
    DEFAULT_SCHEDULER_LOCATION,
    DEFAULT_SCHEDULER_RESOURCE_GROUP,
    DEFAULT_SPOKE_VNET_NAME,
    DEFAULT_SPOKE_VNET_PREFIX,
    DEFAULT_TEST_POD_WAIT_SECONDS,
)


def _default_kubeconfig() -> Path:
    return Path.cwd() / DEFAULT_KUBECONFIG_NAME


def _default_rulesets_dir() -> Path:
    return Path.home() / DEFAULT_RULESETS_SUBDIR


# ============================================================================
# Base class
# ============================================================================

class ToolSettings(BaseSettings):
    """Immutable settings read once from the environment at startup.

    Field aliases carry the environment variable names. A field is read only
    from its own variable, never from its field name.
    """

    model_config = SettingsConfigDict(extra="ignore", frozen=True)

    def env_vars(self) -> dict[str, str]:
        """Map each environment variable name to its effective value."""
        result: dict[str, str] = {}
        for name, field in type(self).model_fields.items():
            env_name = field.validation_alias if isinstance(field.validation_alias, str) else name
            result[env_name.upper()] = str(getattr(self, name))
        return result


# ============================================================================
# Tool configurations
# ============================================================================

class AksConfig(ToolSettings):
    """Single-node AKS cluster with managed identity.

    Attributes:
        location: Azure region for every resource.
        resource_group: Resource group holding the cluster and its VNet.
        cluster: AKS cluster name.
        kubernetes_version: Kubernetes minor version to deploy.
        node_count: Number of nodes in the default pool.
        kubeconfig: File the cluster credentials are written to.
    """

    location: str = Field(default=DEFAULT_AKS_LOCATION, validation_alias="LOCATION")
    resource_group: str = Field(default=DEFAULT_AKS_RESOURCE_GROUP, validation_alias="RESOURCEGROUP")
    cluster: str = Field(default=DEFAULT_AKS_CLUSTER, validation_alias="CLUSTER")
    kubernetes_version: str = Field(default=DEFAULT_AKS_KUBERNETES_VERSION,
                                    validation_alias="KUBERNETES_VERSION")
    node_count: int = Field(default=DEFAULT_NODE_COUNT, ge=1, le=1000, validation_alias="NODE_COUNT")
    kubeconfig: Path = Field(default_factory=_default_kubeconfig, validation_alias="KUBECONFIG")


class SchedulerConfig(ToolSettings):
    """AKS cluster with user-defined kube-scheduler profiles and a GPU pool.

    Attributes:
        location: Azure region for every resource.
        resource_group: Resource group holding the cluster.
        cluster: AKS cluster name.
        kubeconfig: File the cluster credentials are written to.
        scheduler_config: Scheduler profile file applied by ``apply``.
        scheduler_config_dir: Directory the profile files are generated in.
        gpu_pool_name: Name of the GPU node pool.
        gpu_vm_size: VM size of the GPU node pool.
        gpu_zones: Space separated availability zones of the GPU node pool.
        gpu_node_count: Number of nodes in the GPU node pool.
    """

    location: str = Field(default=DEFAULT_SCHEDULER_LOCATION, validation_alias="LOCATION")
    resource_group: str = Field(default=DEFAULT_SCHEDULER_RESOURCE_GROUP, validation_alias="RESOURCE_GROUP")
    cluster: str = Field(default=DEFAULT_SCHEDULER_CLUSTER, validation_alias="CLUSTER_NAME")
    kubeconfig: Path = Field(default_factory=_default_kubeconfig, validation_alias="KUBECONFIG")
    scheduler_config: Path = Field(default=Path(DEFAULT_SCHEDULER_CONFIG), validation_alias="SCHEDULER_CONFIG")
    scheduler_config_dir: Path = Field(default_factory=Path.cwd, validation_alias="SCHEDULER_CONFIG_DIR")
    gpu_pool_name: str = Field(default=DEFAULT_GPU_POOL_NAME, pattern=r"^[a-z][a-z0-9]{0,11}$",
                               validation_alias="GPU_POOL_NAME")
    gpu_vm_size: str = Field(default=DEFAULT_GPU_VM_SIZE, validation_alias="GPU_VM_SIZE")
    gpu_zones: str = Field(default=DEFAULT_GPU_ZONES, validation_alias="GPU_ZONES")
    gpu_node_count: int = Field(default=DEFAULT_NODE_COUNT, ge=1, le=1000, validation_alias="GPU_NODE_COUNT")

    @property
    def scheduler_config_path(self) -> Path:
        """Scheduler profile path, relative names resolved in the config dir."""
        if self.scheduler_config.is_absolute():
            return self.scheduler_config
        return self.scheduler_config_dir / self.scheduler_config


class HubSpokeConfig(ToolSettings):
    """Private AKS cluster behind a FreeBSD network virtual appliance.

    Attributes:
        location: Azure region for every resource.
        resource_group: Resource group holding all hub and spoke resources.
        cluster: AKS cluster name.
        kubernetes_version: Kubernetes minor version to deploy.
        node_count: Number of nodes in the default pool.
        kubeconfig: File the cluster credentials are written to.
        hub_vnet_name: Hub virtual network name.
        hub_vnet_prefix: Hub virtual network address space.
        nva_subnet_prefix: Address range of the appliance subnet in the hub.
        spoke_vnet_name: Spoke virtual network name.
        spoke_vnet_prefix: Spoke virtual network address space.
        aks_subnet_prefix: Address range of the cluster subnet in the spoke.
        nva_name: Appliance VM name, also the prefix of its IP and NSG.
        nva_image: Marketplace image URN of the appliance.
        nva_size: Appliance VM size.
        nva_admin_user: Admin user created on the appliance.
        nva_boot_wait: Seconds to wait for the appliance before configuring it.
        test_pod_wait: Seconds to wait after starting the connectivity test pod.
    """

    location: str = Field(default=DEFAULT_HUB_SPOKE_LOCATION, validation_alias="LOCATION")
    resource_group: str = Field(default=DEFAULT_HUB_SPOKE_RESOURCE_GROUP, validation_alias="RESOURCEGROUP")
    cluster: str = Field(default=DEFAULT_HUB_SPOKE_CLUSTER, validation_alias="CLUSTER")
    kubernetes_version: str = Field(default=DEFAULT_HUB_SPOKE_KUBERNETES_VERSION,
                                    validation_alias="KUBERNETES_VERSION")
    node_count: int = Field(default=DEFAULT_NODE_COUNT, ge=1, le=1000, validation_alias="NODE_COUNT")
    kubeconfig: Path = Field(default_factory=_default_kubeconfig, validation_alias="KUBECONFIG")
    hub_vnet_name: str = Field(default=DEFAULT_HUB_VNET_NAME, validation_alias="HUB_VNET_NAME")
    hub_vnet_prefix: str = Field(default=DEFAULT_HUB_VNET_PREFIX, validation_alias="HUB_VNET_PREFIX")
    nva_subnet_prefix: str = Field(default=DEFAULT_NVA_SUBNET_PREFIX, validation_alias="NVA_SUBNET_PREFIX")
    spoke_vnet_name: str = Field(default=DEFAULT_SPOKE_VNET_NAME, validation_alias="SPOKE_VNET_NAME")
    spoke_vnet_prefix: str = Field(default=DEFAULT_SPOKE_VNET_PREFIX, validation_alias="SPOKE_VNET_PREFIX")
    aks_subnet_prefix: str = Field(default=DEFAULT_AKS_SUBNET_PREFIX, validation_alias="AKS_SUBNET_PREFIX")
    nva_name: str = Field(default=DEFAULT_NVA_NAME, validation_alias="NVA_NAME")
    nva_image: str = Field(default=DEFAULT_NVA_IMAGE, validation_alias="NVA_IMAGE")
    nva_size: str = Field(default=DEFAULT_NVA_SIZE, validation_alias="NVA_SIZE")
    nva_admin_user: str = Field(default=DEFAULT_NVA_ADMIN_USER, validation_alias="NVA_ADMIN_USER")
    nva_boot_wait: int = Field(default=DEFAULT_NVA_BOOT_WAIT_SECONDS, ge=0, validation_alias="NVA_BOOT_WAIT")
    test_pod_wait: int = Field(default=DEFAULT_TEST_POD_WAIT_SECONDS, ge=0, validation_alias="TEST_POD_WAIT")

    @property
    def nva_public_ip_name(self) -> str:
        return f"{self.nva_name}-pip"

    @property
    def nva_nsg_name(self) -> str:
        return f"{self.nva_name}-nsg"


class AppcatConfig(ToolSettings):
    """AppCAT ruleset cleanup.

    Attributes:
        rulesets_dir: Directory holding the downloaded AppCAT rulesets.
    """

    rulesets_dir: Path = Field(default_factory=_default_rulesets_dir, validation_alias="RULESETS_DIR")
