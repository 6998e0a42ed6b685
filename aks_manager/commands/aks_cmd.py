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

"""aks tool: single-node AKS cluster with managed identity."""

from __future__ import annotations

import typer

from aks_manager.config import AksConfig
from aks_manager.constants import AKS_REQUIRED_TOOLS
from aks_manager.dispatch import Tool, Verb, run_tool
from aks_manager.orchestrator import destroy_aks, run_aks_install, show_aks
from aks_manager.utils import check_dependencies


class AksVerb(Verb):
    INSTALL = "install", "Creates AKS cluster"
    DESTROY = "destroy", "Deletes AKS cluster and associated resources"
    SHOW = "show", "Shows cluster information and credentials"
    CHECK_DEPS = "check-deps", "Checks if required dependencies are installed"


TOOL = Tool(
    name="aks",
    title="AKS Cluster Deployment",
    verbs=AksVerb,
    handlers={
        AksVerb.INSTALL: run_aks_install,
        AksVerb.DESTROY: destroy_aks,
        AksVerb.SHOW: show_aks,
        AksVerb.CHECK_DEPS: lambda cfg: check_dependencies(AKS_REQUIRED_TOOLS),
    },
    config_class=AksConfig,
    header_fields=lambda cfg: {
        "Kubernetes Version": cfg.kubernetes_version,
        "Node Count": str(cfg.node_count),
        "Location": cfg.location,
        "Resource Group": cfg.resource_group,
    },
)


def command(
    ctx: typer.Context,
    verb: str | None = typer.Option(None, "-x", "--exec", metavar="VERB", help="Action to be executed"),
) -> None:
    """Create, inspect, or delete a single-node AKS cluster."""
    run_tool(TOOL, verb, ctx.command_path)


def main() -> None:
    typer.run(command)
