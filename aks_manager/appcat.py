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

"""AppCAT ruleset pruning for Spring Boot applications targeting AKS on Linux."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from rich.panel import Panel
from rich.table import Table

from aks_manager import console, logger
from aks_manager.constants import APPCAT_OBSOLETE_RULES, APPCAT_OBSOLETE_RULESETS


def remove_rulesets(rulesets_dir: Path, names: Iterable[str] = APPCAT_OBSOLETE_RULESETS) -> list[str]:
    """Delete whole ruleset directories.

    Args:
        rulesets_dir: Root directory of the AppCAT rulesets.
        names: Ruleset directory names to delete; missing ones are skipped.

    Returns:
        Names of the directories that existed and were deleted.
    """
    console.print("[yellow]\u2139\ufe0f  Removing entire ruleset directories...[/yellow]")
    removed: list[str] = []
    for name in names:
        path = rulesets_dir / name
        if path.is_dir():
            shutil.rmtree(path)
            removed.append(name)
            console.print(f"[green]  Removed: {name} ruleset directory[/green]")
        else:
            logger.debug("Ruleset %s not present", path)
    return removed


def remove_rules(rulesets_dir: Path, ruleset: str, filenames: Iterable[str]) -> list[str]:
    """Delete individual rule files from one ruleset.

    Args:
        rulesets_dir: Root directory of the AppCAT rulesets.
        ruleset: Ruleset directory name.
        filenames: Rule files to delete; missing ones are skipped.

    Returns:
        Names of the files that existed and were deleted.
    """
    directory = rulesets_dir / ruleset
    if not directory.is_dir():
        logger.debug("Ruleset %s not present", directory)
        return []
    removed: list[str] = []
    for filename in filenames:
        path = directory / filename
        if path.is_file():
            path.unlink()
            removed.append(filename)
    return removed


def ruleset_file_counts(rulesets_dir: Path) -> dict[str, int]:
    """Count the entries of every remaining ruleset directory, sorted by name."""
    if not rulesets_dir.is_dir():
        return {}
    return {
        path.name: sum(1 for _ in path.iterdir())
        for path in sorted(rulesets_dir.iterdir())
        if path.is_dir()
    }


def total_rule_files(rulesets_dir: Path) -> int:
    if not rulesets_dir.is_dir():
        return 0
    return sum(1 for path in rulesets_dir.rglob("*.yaml") if path.is_file())


def print_summary(rulesets_dir: Path) -> None:
    console.print(Panel.fit("Cleanup complete!", style="bold green"))
    console.print("Remaining rulesets optimized for:")
    for target in ("Spring Boot applications", "Azure AKS / Container Apps / App Service",
                   "Linux environment", "Cloud-native patterns"):
        console.print(f"   - {target}")
    console.print(f"\nTotal ruleset files: {total_rule_files(rulesets_dir)}\n")

    table = Table(title="Remaining ruleset directories", title_justify="left")
    table.add_column("Ruleset")
    table.add_column("Files", justify="right")
    for name, count in ruleset_file_counts(rulesets_dir).items():
        table.add_row(name, str(count))
    console.print(table)


def cleanup_rulesets(rulesets_dir: Path) -> None:
    """Prune the rulesets to the Spring Boot / Azure / Linux subset.

    Args:
        rulesets_dir: Root directory of the AppCAT rulesets.
    """
    console.print(Panel.fit(f"Cleaning AppCAT rulesets in {rulesets_dir}", style="bold blue"))
    remove_rulesets(rulesets_dir)
    for ruleset, (filenames, label) in APPCAT_OBSOLETE_RULES.items():
        console.print(f"[yellow]\u2139\ufe0f  Cleaning {ruleset} ruleset...[/yellow]")
        removed = remove_rules(rulesets_dir, ruleset, filenames)
        console.print(f"[green]  Removed: {label} ({len(removed)} files)[/green]")
    print_summary(rulesets_dir)
