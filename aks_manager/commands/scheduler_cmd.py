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

"""scheduler tool: AKS cluster with custom kube-scheduler profiles and a GPU pool."""

from __future__ import annotations

import typer

from aks_manager.config import SchedulerConfig
from aks_manager.constants import SCHEDULER_REQUIRED_TOOLS
from aks_manager.dispatch import Tool, Verb, run_tool
from aks_manager.orchestrator import (
    create_gpu_pool,
    create_scheduler_cluster,
    delete_scheduler,
    register_scheduler_feature,
    run_scheduler_install,
    show_scheduler,
)
from aks_manager.resources import create_resource_group, get_credentials
from aks_manager.scheduler import apply_scheduler_config, generate_scheduler_configs
from aks_manager.utils import check_dependencies


class SchedulerVerb(Verb):
    INSTALL = "install", "Deploy all resources (cluster, GPU pool, scheduler configs)"
    DELETE = "delete", "Delete AKS cluster and resource group"
    SHOW = "show", "Show cluster and scheduler information"
    CHECK_DEPS = "check-deps", "Check if required dependencies are installed"
    REGISTER = "register", "Register required preview features"
    CREATE_RG = "create-rg", "Create resource group"
    CREATE = "create", "Create or update AKS cluster"
    CREATE_GPU_POOL = "create-gpu-pool", "Create GPU node pool"
    GET_CREDENTIALS = "get-credentials", "Retrieve cluster credentials to local kubeconfig"
    CONFIG = "config", "Generate scheduler configuration files"
    APPLY = "apply", "Apply scheduler configuration to cluster"


TOOL = Tool(
    name="scheduler",
    title="AKS Custom Scheduler Configuration",
    verbs=SchedulerVerb,
    handlers={
        SchedulerVerb.INSTALL: run_scheduler_install,
        SchedulerVerb.DELETE: delete_scheduler,
        SchedulerVerb.SHOW: show_scheduler,
        SchedulerVerb.CHECK_DEPS: lambda cfg: check_dependencies(SCHEDULER_REQUIRED_TOOLS),
        SchedulerVerb.REGISTER: register_scheduler_feature,
        SchedulerVerb.CREATE_RG: lambda cfg: create_resource_group(cfg.resource_group, cfg.location),
        SchedulerVerb.CREATE: create_scheduler_cluster,
        SchedulerVerb.CREATE_GPU_POOL: create_gpu_pool,
        SchedulerVerb.GET_CREDENTIALS: lambda cfg: get_credentials(cfg.resource_group, cfg.cluster, cfg.kubeconfig),
        SchedulerVerb.CONFIG: lambda cfg: generate_scheduler_configs(cfg.scheduler_config_dir),
        SchedulerVerb.APPLY: apply_scheduler_config,
    },
    config_class=SchedulerConfig,
    header_fields=lambda cfg: {
        "Location": cfg.location,
        "Resource Group": cfg.resource_group,
        "Cluster Name": cfg.cluster,
        "kubeconfig": str(cfg.kubeconfig),
    },
)


def command(
    ctx: typer.Context,
    verb: str | None = typer.Option(None, "-x", "--exec", metavar="VERB", help="Action to be executed"),
) -> None:
    """Configure custom kube-scheduler profiles on an AKS cluster."""
    run_tool(TOOL, verb, ctx.command_path)


def main() -> None:
    typer.run(command)
