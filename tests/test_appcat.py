from __future__ import annotations

import re
from pathlib import Path

from typer.testing import CliRunner

from aks_manager.appcat import remove_rules, remove_rulesets, ruleset_file_counts, total_rule_files
from aks_manager.cli import app


runner = CliRunner()
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _plain(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _seed_rulesets(root: Path) -> Path:
    files = {
        "camel3": ["01-camel.yaml", "02-camel.yaml"],
        "eap7": ["01-eap.yaml"],
        "azure": ["01-azure-aws-config.yaml", "11-azure-tas-binding.yaml", "40-azure-spring.yaml"],
        "openjdk17": ["01-jdk17.yaml"],
    }
    for ruleset, names in files.items():
        directory = root / ruleset
        directory.mkdir(parents=True)
        for name in names:
            (directory / name).write_text("- ruleID: example\n", encoding="utf-8")
    return root


def test_remove_rulesets_skips_missing(tmp_path: Path) -> None:
    _seed_rulesets(tmp_path)

    removed = remove_rulesets(tmp_path, ["camel3", "fuse"])

    assert removed == ["camel3"]
    assert not (tmp_path / "camel3").exists()
    assert (tmp_path / "eap7").is_dir()


def test_remove_rules_only_deletes_listed_files(tmp_path: Path) -> None:
    _seed_rulesets(tmp_path)

    removed = remove_rules(tmp_path, "azure", ["01-azure-aws-config.yaml", "99-not-there.yaml"])

    assert removed == ["01-azure-aws-config.yaml"]
    assert sorted(path.name for path in (tmp_path / "azure").iterdir()) == [
        "11-azure-tas-binding.yaml",
        "40-azure-spring.yaml",
    ]


def test_remove_rules_missing_ruleset(tmp_path: Path) -> None:
    assert remove_rules(tmp_path, "azure", ["01-azure-aws-config.yaml"]) == []


def test_counts_on_missing_directory(tmp_path: Path) -> None:
    assert ruleset_file_counts(tmp_path / "absent") == {}
    assert total_rule_files(tmp_path / "absent") == 0


def test_cli_cleanup_prunes_and_summarizes(monkeypatch, tmp_path: Path) -> None:
    root = _seed_rulesets(tmp_path / "rulesets")
    monkeypatch.setenv("RULESETS_DIR", str(root))

    result = runner.invoke(app, ["appcat", "-x", "cleanup"])

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in root.iterdir()) == ["azure", "openjdk17"]
    assert sorted(path.name for path in (root / "azure").iterdir()) == ["40-azure-spring.yaml"]
    assert ruleset_file_counts(root) == {"azure": 1, "openjdk17": 1}
    output = _plain(result.output)
    assert "Cleanup complete!" in output
    assert "Total ruleset files: 2" in output


def test_cli_cleanup_on_missing_directory(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RULESETS_DIR", str(tmp_path / "absent"))

    result = runner.invoke(app, ["appcat", "-x", "cleanup"])

    assert result.exit_code == 0, result.output
    assert "Total ruleset files: 0" in _plain(result.output)
