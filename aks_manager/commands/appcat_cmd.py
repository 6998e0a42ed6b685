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

"""appcat tool: AppCAT ruleset cleanup."""

from __future__ import annotations

import typer

from aks_manager.appcat import cleanup_rulesets
from aks_manager.config import AppcatConfig
from aks_manager.dispatch import Tool, Verb, run_tool


class AppcatVerb(Verb):
    CLEANUP = "cleanup", "Remove unnecessary rulesets and optimize for Spring Boot"


TOOL = Tool(
    name="appcat",
    title="AppCAT Ruleset Cleanup",
    verbs=AppcatVerb,
    handlers={
        AppcatVerb.CLEANUP: lambda cfg: cleanup_rulesets(cfg.rulesets_dir),
    },
    config_class=AppcatConfig,
    header_fields=lambda cfg: {
        "Optimized for": "Spring Boot apps targeting Azure AKS/Linux",
        "Rulesets Directory": str(cfg.rulesets_dir),
    },
)


def command(
    ctx: typer.Context,
    verb: str | None = typer.Option(None, "-x", "--exec", metavar="VERB", help="Action to be executed"),
) -> None:
    """Prune AppCAT rulesets for Spring Boot applications on AKS."""
    run_tool(TOOL, verb, ctx.command_path)


def main() -> None:
    typer.run(command)
