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

"""
cli.py - Unified CLI for AKS infrastructure management.

Subcommands (each takes a single ``-x VERB`` selector):
    aks        Single-node AKS cluster (install, destroy, show, check-deps)
    scheduler  Custom kube-scheduler profiles and GPU pool (install, delete, show, ...)
    hub-spoke  Private AKS behind a FreeBSD NVA (install, destroy, show, check-deps, test-icmp)
    appcat     AppCAT ruleset cleanup (cleanup)

Environment Variables:
    Every setting can be overridden by the environment variable of the same
    name, e.g. LOCATION, RESOURCEGROUP, CLUSTER, KUBECONFIG. Run a subcommand
    without ``-x`` to list its variables and their effective values.

Examples:
    # Create a cluster in westus2
    LOCATION=westus2 aks-manager aks -x install

    # Generate and apply the GPU bin-packing profile
    SCHEDULER_CONFIG=bin-pack-gpu-scheduler.yaml aks-manager scheduler -x config
    SCHEDULER_CONFIG=bin-pack-gpu-scheduler.yaml aks-manager scheduler -x apply

    # Check connectivity through the NVA
    aks-manager hub-spoke -x test-icmp
"""

from __future__ import annotations

import typer

from aks_manager.commands import aks_cmd, appcat_cmd, hub_spoke_cmd, scheduler_cmd
from aks_manager.dispatch import setup_logging

app = typer.Typer(
    help="Unified CLI for AKS infrastructure management.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every external command"),
) -> None:
    """Initialize logging for all subcommands."""
    setup_logging(verbose)


app.command("aks")(aks_cmd.command)
app.command("scheduler")(scheduler_cmd.command)
app.command("hub-spoke")(hub_spoke_cmd.command)
app.command("appcat")(appcat_cmd.command)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
