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

"""Upstream kube-scheduler profiles rendered as AKS SchedulerConfiguration manifests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import sh
import yaml
from rich.panel import Panel

from aks_manager import console
from aks_manager.config import SchedulerConfig
from aks_manager.constants import (
    KUBE_SCHEDULER_API_VERSION,
    LABEL_TOPOLOGY_ZONE,
    PROFILE_BIN_PACK_CPU,
    PROFILE_BIN_PACK_GPU,
    PROFILE_POD_TOPOLOGY_SPREAD,
    RESOURCE_GPU,
    SCHEDULER_CONFIG_API_VERSION,
    SCHEDULER_CONFIG_KIND,
    SCHEDULER_CONFIG_NAME,
)
from aks_manager.errors import ConfigFileNotFoundError
from aks_manager.resources import get_credentials
from aks_manager.utils import kubectl


@dataclass(frozen=True)
class SchedulerProfile:
    """One kube-scheduler profile and the file it is written to.

    Attributes:
        filename: Manifest file name.
        scheduler_name: Name pods select with ``spec.schedulerName``.
        plugin_config: ``pluginConfig`` entries of the profile.
        plugins: Optional ``plugins`` section of the profile.
    """

    filename: str
    scheduler_name: str
    plugin_config: list[dict]
    plugins: dict = field(default_factory=dict)

    def kube_scheduler_configuration(self) -> dict:
        profile: dict = {"schedulerName": self.scheduler_name}
        if self.plugins:
            profile["plugins"] = self.plugins
        profile["pluginConfig"] = self.plugin_config
        return {
            "apiVersion": KUBE_SCHEDULER_API_VERSION,
            "kind": "KubeSchedulerConfiguration",
            "profiles": [profile],
        }

    def manifest(self) -> dict:
        """Wrap the profile in a SchedulerConfiguration resource.

        Returns:
            Manifest whose ``spec.rawConfig`` holds the profile as YAML text.
        """
        return {
            "apiVersion": SCHEDULER_CONFIG_API_VERSION,
            "kind": SCHEDULER_CONFIG_KIND,
            "metadata": {"name": SCHEDULER_CONFIG_NAME},
            "spec": {"rawConfig": dump_yaml(self.kube_scheduler_configuration())},
        }


def _most_allocated(*resources: tuple[str, int]) -> dict:
    return {
        "name": "NodeResourcesFit",
        "args": {
            "scoringStrategy": {
                "type": "MostAllocated",
                "resources": [{"name": name, "weight": weight} for name, weight in resources],
            },
        },
    }


PROFILES: tuple[SchedulerProfile, ...] = (
    SchedulerProfile(
        filename=PROFILE_BIN_PACK_CPU,
        scheduler_name="node-binpacking-scheduler",
        plugin_config=[_most_allocated(("cpu", 1))],
    ),
    SchedulerProfile(
        filename=PROFILE_POD_TOPOLOGY_SPREAD,
        scheduler_name="pod-distribution-scheduler",
        plugin_config=[{
            "name": "PodTopologySpread",
            "args": {
                "apiVersion": KUBE_SCHEDULER_API_VERSION,
                "kind": "PodTopologySpreadArgs",
                "defaultingType": "List",
                "defaultConstraints": [{
                    "maxSkew": 1,
                    "topologyKey": LABEL_TOPOLOGY_ZONE,
                    "whenUnsatisfiable": "ScheduleAnyway",
                }],
            },
        }],
    ),
    SchedulerProfile(
        filename=PROFILE_BIN_PACK_GPU,
        scheduler_name="gpu-node-binpacking-scheduler",
        plugins={
            "multiPoint": {
                "enabled": [
                    {"name": "ImageLocality"},
                    {"name": "NodeResourcesFit"},
                    {"name": "NodeResourcesBalancedAllocation"},
                ],
            },
        },
        plugin_config=[
            _most_allocated(("cpu", 1), (RESOURCE_GPU, 3)),
            {
                "name": "NodeResourcesBalancedAllocation",
                "args": {"resources": [{"name": RESOURCE_GPU, "weight": 1}]},
            },
        ],
    ),
)


# ============================================================================
# YAML rendering
# ============================================================================

class _BlockDumper(yaml.SafeDumper):
    """Safe dumper writing multi-line strings as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_BlockDumper.add_representer(str, _represent_str)


def dump_yaml(document: dict) -> str:
    return yaml.dump(document, Dumper=_BlockDumper, sort_keys=False, default_flow_style=False)


# ============================================================================
# Operations
# ============================================================================

def generate_scheduler_configs(directory: Path) -> list[Path]:
    """Write every scheduler profile manifest into *directory*.

    Args:
        directory: Output directory, created if missing.

    Returns:
        Paths of the written files.
    """
    console.print(Panel.fit("Generating scheduler configuration files", style="bold blue"))
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for profile in PROFILES:
        path = directory / profile.filename
        path.write_text(dump_yaml(profile.manifest()))
        console.print(f"[green]  \u2713 {path}[/green]")
        written.append(path)
    console.print("[green]\u2705 Configuration files generated successfully[/green]")
    return written


def apply_scheduler_config(cfg: SchedulerConfig) -> None:
    """Apply the selected scheduler profile to the cluster.

    Args:
        cfg: Scheduler configuration naming the profile file and cluster.

    Raises:
        ConfigFileNotFoundError: If the profile file has not been generated.
    """
    console.print(Panel.fit("Applying scheduler configuration to cluster", style="bold blue"))
    config_path = cfg.scheduler_config_path
    if not config_path.is_file():
        raise ConfigFileNotFoundError(
            f"Configuration file {config_path} not found. Generate it first with '-x config'"
        )
    get_credentials(cfg.resource_group, cfg.cluster, cfg.kubeconfig)
    kubectl("apply", "-f", str(config_path), "--kubeconfig", str(cfg.kubeconfig))
    console.print("[green]\u2705 Scheduler configuration applied successfully[/green]")


def scheduler_configurations(kubeconfig: Path) -> str | None:
    """List SchedulerConfiguration resources, or None if none can be listed."""
    try:
        output = str(kubectl("get", "schedulerconfigurations", "--kubeconfig", str(kubeconfig))).rstrip()
    except sh.ErrorReturnCode:
        return None
    return output or None
