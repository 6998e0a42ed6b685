from __future__ import annotations

import re
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from aks_manager.cli import app
from aks_manager.config import SchedulerConfig
from aks_manager.errors import ConfigFileNotFoundError
from aks_manager.scheduler import PROFILES, apply_scheduler_config, generate_scheduler_configs


runner = CliRunner()
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _plain(text: str) -> str:
    return _ANSI_RE.sub("", text)


def test_generate_writes_all_profiles(tmp_path: Path) -> None:
    written = generate_scheduler_configs(tmp_path / "profiles")

    assert sorted(path.name for path in written) == [
        "bin-pack-cpu-scheduler.yaml",
        "bin-pack-gpu-scheduler.yaml",
        "pod-topology-spreader-scheduler.yaml",
    ]
    assert all(path.is_file() for path in written)


@pytest.mark.parametrize("profile", PROFILES, ids=lambda profile: profile.filename)
def test_manifest_embeds_parseable_scheduler_profile(tmp_path: Path, profile) -> None:
    generate_scheduler_configs(tmp_path)

    manifest = yaml.safe_load((tmp_path / profile.filename).read_text())

    assert manifest["apiVersion"] == "aks.azure.com/v1alpha1"
    assert manifest["kind"] == "SchedulerConfiguration"
    assert manifest["metadata"]["name"] == "upstream"
    raw = yaml.safe_load(manifest["spec"]["rawConfig"])
    assert raw["apiVersion"] == "kubescheduler.config.k8s.io/v1"
    assert raw["kind"] == "KubeSchedulerConfiguration"
    assert raw["profiles"][0]["schedulerName"] == profile.scheduler_name


def test_raw_config_is_a_literal_block(tmp_path: Path) -> None:
    generate_scheduler_configs(tmp_path)

    assert "rawConfig: |" in (tmp_path / "bin-pack-cpu-scheduler.yaml").read_text()


def test_gpu_profile_weights_gpu_over_cpu() -> None:
    gpu = next(profile for profile in PROFILES if profile.filename == "bin-pack-gpu-scheduler.yaml")
    config = gpu.kube_scheduler_configuration()["profiles"][0]

    fit = config["pluginConfig"][0]["args"]["scoringStrategy"]
    assert fit["type"] == "MostAllocated"
    assert fit["resources"] == [{"name": "cpu", "weight": 1}, {"name": "nvidia.com/gpu", "weight": 3}]
    enabled = [plugin["name"] for plugin in config["plugins"]["multiPoint"]["enabled"]]
    assert enabled == ["ImageLocality", "NodeResourcesFit", "NodeResourcesBalancedAllocation"]


def test_topology_spread_profile_spreads_across_zones() -> None:
    spread = next(profile for profile in PROFILES if profile.scheduler_name == "pod-distribution-scheduler")
    args = spread.kube_scheduler_configuration()["profiles"][0]["pluginConfig"][0]["args"]

    assert args["defaultingType"] == "List"
    assert args["defaultConstraints"] == [{
        "maxSkew": 1,
        "topologyKey": "topology.kubernetes.io/zone",
        "whenUnsatisfiable": "ScheduleAnyway",
    }]


def test_apply_without_generated_file_fails(monkeypatch, fake_sh, tmp_path: Path) -> None:
    monkeypatch.setenv("SCHEDULER_CONFIG_DIR", str(tmp_path))
    cfg = SchedulerConfig()

    with pytest.raises(ConfigFileNotFoundError, match="Generate it first with '-x config'"):
        apply_scheduler_config(cfg)
    assert fake_sh.calls == []


def test_apply_uses_selected_profile_and_kubeconfig(monkeypatch, fake_sh, tmp_path: Path) -> None:
    monkeypatch.setenv("SCHEDULER_CONFIG", "bin-pack-gpu-scheduler.yaml")
    monkeypatch.setenv("SCHEDULER_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("KUBECONFIG", str(tmp_path / "kc"))
    generate_scheduler_configs(tmp_path)

    result = runner.invoke(app, ["scheduler", "-x", "apply"])

    assert result.exit_code == 0, result.output
    assert fake_sh.commands("kubectl") == [
        ("apply", "-f", str(tmp_path / "bin-pack-gpu-scheduler.yaml"), "--kubeconfig", str(tmp_path / "kc")),
    ]


def test_cli_apply_missing_file_exits_one(fake_sh) -> None:
    result = runner.invoke(app, ["scheduler", "-x", "apply"])

    assert result.exit_code == 1
    assert "not found. Generate it first with '-x config'" in _plain(result.output)


def test_create_updates_existing_cluster(fake_sh) -> None:
    result = runner.invoke(app, ["scheduler", "-x", "create"])

    assert result.exit_code == 0, result.output
    assert fake_sh.find("az", "aks", "create") == []
    update = fake_sh.find("az", "aks", "update")
    assert update and "--enable-upstream-kubescheduler-user-configuration" in update[0]


def test_create_new_cluster_enables_scheduler_configuration(fake_sh) -> None:
    fake_sh.fail("az", "aks", "show")

    result = runner.invoke(app, ["scheduler", "-x", "create"])

    assert result.exit_code == 0, result.output
    create = fake_sh.find("az", "aks", "create")
    assert len(create) == 1
    assert "--enable-upstream-kubescheduler-user-configuration" in create[0]


def test_create_gpu_pool_splits_zones(monkeypatch, fake_sh) -> None:
    monkeypatch.setenv("GPU_ZONES", "1 2")
    monkeypatch.setenv("GPU_POOL_NAME", "h100")

    result = runner.invoke(app, ["scheduler", "-x", "create-gpu-pool"])

    assert result.exit_code == 0, result.output
    (args,) = fake_sh.find("az", "aks", "nodepool", "add")
    assert args[args.index("--name") + 1] == "h100"
    assert args[args.index("--zones") + 1:args.index("--zones") + 3] == ("1", "2")
    assert args[args.index("--node-vm-size") + 1] == "Standard_NC40ads_H100_v5"


def test_invalid_gpu_pool_name_is_rejected(monkeypatch, fake_sh) -> None:
    monkeypatch.setenv("GPU_POOL_NAME", "GPU-Pool")

    result = runner.invoke(app, ["scheduler", "-x", "create-gpu-pool"])

    assert result.exit_code == 1
    assert fake_sh.calls == []


def test_register_enables_preview_feature(fake_sh) -> None:
    result = runner.invoke(app, ["scheduler", "-x", "register"])

    assert result.exit_code == 0, result.output
    assert fake_sh.commands() == [
        ("feature", "register", "--namespace", "Microsoft.ContainerService",
         "--name", "UserDefinedSchedulerConfigurationPreview"),
        ("provider", "register", "--namespace", "Microsoft.ContainerService", "--wait"),
    ]


def test_delete_skips_missing_resource_group(fake_sh) -> None:
    fake_sh.fail("az", "group", "show")

    result = runner.invoke(app, ["scheduler", "-x", "delete"])

    assert result.exit_code == 0, result.output
    assert fake_sh.find("az", "aks", "delete")
    assert fake_sh.find("az", "group", "delete") == []


def test_show_lists_scheduler_configurations(fake_sh) -> None:
    fake_sh.respond("az", "aks", "show", output='{"kubernetesVersion": "1.33.0", "provisioningState": "Succeeded"}')
    fake_sh.respond("kubectl", "get", "schedulerconfigurations", output="NAME       AGE\nupstream   5m\n")

    result = runner.invoke(app, ["scheduler", "-x", "show"])

    assert result.exit_code == 0, result.output
    output = _plain(result.output)
    assert "Kubernetes Version: 1.33.0" in output
    assert "upstream   5m" in output


def test_show_without_configurations(fake_sh) -> None:
    fake_sh.respond("az", "aks", "show", output='{"kubernetesVersion": "1.33.0", "provisioningState": "Succeeded"}')
    fake_sh.fail("kubectl", "get")

    result = runner.invoke(app, ["scheduler", "-x", "show"])

    assert result.exit_code == 0, result.output
    assert "No scheduler configurations found" in _plain(result.output)
