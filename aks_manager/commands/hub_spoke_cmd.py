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

"""hub-spoke tool: private AKS cluster with egress forced through a FreeBSD NVA."""

from __future__ import annotations

import typer

from aks_manager.config import HubSpokeConfig
from aks_manager.constants import HUB_SPOKE_REQUIRED_TOOLS
from aks_manager.dispatch import Tool, Verb, run_tool
from aks_manager.orchestrator import destroy_hub_spoke, run_hub_spoke_install, run_icmp_test, show_hub_spoke
from aks_manager.utils import check_dependencies


class HubSpokeVerb(Verb):
    INSTALL = "install", "Creates hub-spoke infrastructure with AKS and FreeBSD NVA"
    DESTROY = "destroy", "Deletes all resources"
    SHOW = "show", "Shows cluster and NVA information"
    CHECK_DEPS = "check-deps", "Checks if required dependencies are installed"
    TEST_ICMP = "test-icmp", "Tests ICMP connectivity from AKS pod"


TOOL = Tool(
    name="hub-spoke",
    title="Hub-Spoke AKS with FreeBSD NVA Deployment",
    verbs=HubSpokeVerb,
    handlers={
        HubSpokeVerb.INSTALL: run_hub_spoke_install,
        HubSpokeVerb.DESTROY: destroy_hub_spoke,
        HubSpokeVerb.SHOW: show_hub_spoke,
        HubSpokeVerb.CHECK_DEPS: lambda cfg: check_dependencies(HUB_SPOKE_REQUIRED_TOOLS),
        HubSpokeVerb.TEST_ICMP: run_icmp_test,
    },
    config_class=HubSpokeConfig,
    header_fields=lambda cfg: {
        "Kubernetes Version": cfg.kubernetes_version,
        "Node Count": str(cfg.node_count),
        "Location": cfg.location,
        "Resource Group": cfg.resource_group,
        "Hub VNet": f"{cfg.hub_vnet_name} ({cfg.hub_vnet_prefix})",
        "Spoke VNet": f"{cfg.spoke_vnet_name} ({cfg.spoke_vnet_prefix})",
    },
)


def command(
    ctx: typer.Context,
    verb: str | None = typer.Option(None, "-x", "--exec", metavar="VERB", help="Action to be executed"),
) -> None:
    """Deploy a private AKS cluster behind a FreeBSD network virtual appliance."""
    run_tool(TOOL, verb, ctx.command_path)


def main() -> None:
    typer.run(command)
