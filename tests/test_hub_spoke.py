from __future__ import annotations

import re

import pytest
from typer.testing import CliRunner

from aks_manager.cli import app
from aks_manager.config import HubSpokeConfig
from aks_manager.errors import DependencyError
from aks_manager.nva import ImageUrn, configure_nva, parse_image_urn, pf_conf
from aks_manager.orchestrator import run_hub_spoke_install


runner = CliRunner()
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

NIC_ID = ("/subscriptions/0000/resourceGroups/rg-aks-fw-test/providers/"
          "Microsoft.Network/networkInterfaces/freebsd-nvaVMNic")


def _plain(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _script_hub_spoke(fake_sh) -> None:
    fake_sh.respond("az", "network", "public-ip", "show", output="20.1.2.3\n")
    fake_sh.respond("az", "vm", "show", output="")
    fake_sh.respond("az", "vm", "show", "-g", "rg-aks-fw-test", "-n", "freebsd-nva", "-d", output="10.0.2.4\n")
    fake_sh.respond("az", "vm", "show", "-g", "rg-aks-fw-test", "-n", "freebsd-nva", "--query", output=NIC_ID + "\n")
    fake_sh.respond("az", "network", "vnet", "show", output="/subscriptions/0000/vnet-id\n")
    fake_sh.respond("az", "network", "vnet", "subnet", "show", output="/subscriptions/0000/subnet-id\n")
    fake_sh.respond("az", "aks", "show", "-g", output="MC_rg-aks-fw-test_aks-fw-test_westus3\n")
    fake_sh.respond("az", "network", "private-dns", "zone", "list",
                    output="abc.privatelink.westus3.azmk8s.io\n")


def test_parse_image_urn() -> None:
    urn = parse_image_urn("thefreebsdfoundation:freebsd-14_2:14_2-release-amd64-gen2-zfs:14.2.0")

    assert urn == ImageUrn("thefreebsdfoundation", "freebsd-14_2", "14_2-release-amd64-gen2-zfs", "14.2.0")


@pytest.mark.parametrize("urn", ["publisher:offer:sku", "a:b::d", "a:b:c:d:e", ""])
def test_parse_image_urn_rejects_malformed(urn: str) -> None:
    with pytest.raises(ValueError, match="Invalid image URN"):
        parse_image_urn(urn)


def test_pf_conf_nats_private_range() -> None:
    conf = pf_conf()

    assert 'ext_if = "hn0"' in conf
    assert "nat on $ext_if from 10.0.0.0/8 to any -> ($ext_if)" in conf
    assert conf.rstrip().endswith("pass all")


def test_configure_nva_waits_then_pushes_pf_conf(monkeypatch, fake_sh) -> None:
    monkeypatch.setenv("NVA_BOOT_WAIT", "5")
    fake_sh.respond("az", "network", "public-ip", "show", output="20.1.2.3\n")
    waits: list[float] = []

    configure_nva(HubSpokeConfig(), sleep=waits.append)

    assert waits == [5]
    ssh_calls = [(args, kwargs) for prog, args, kwargs in fake_sh.calls if prog == "ssh"]
    assert len(ssh_calls) == 3
    first_args, first_kwargs = ssh_calls[0]
    assert first_args == ("-o", "StrictHostKeyChecking=no", "azureuser@20.1.2.3", "sudo tee /etc/pf.conf")
    assert first_kwargs == {"_in": pf_conf()}
    assert "gateway_enable=YES" in ssh_calls[1][0][1]
    assert "pfctl -e" in ssh_calls[2][0][1]


def test_install_runs_full_sequence(fake_sh) -> None:
    _script_hub_spoke(fake_sh)
    waits: list[float] = []

    run_hub_spoke_install(HubSpokeConfig(), sleep=waits.append)

    assert waits == [30, 10]
    az_calls = fake_sh.commands()
    order = [
        ("group", "create"),
        ("network", "vnet", "create"),
        ("network", "vnet", "peering", "create"),
        ("vm", "image", "terms", "accept"),
        ("vm", "create"),
        ("network", "nic", "update"),
        ("network", "route-table", "create"),
        ("network", "vnet", "subnet", "update"),
        ("aks", "create"),
        ("network", "private-dns", "link", "vnet", "create"),
        ("aks", "get-credentials"),
        ("aks", "command", "invoke"),
    ]
    positions = [next(i for i, args in enumerate(az_calls) if args[:len(step)] == step) for step in order]
    assert positions == sorted(positions)

    (terms,) = fake_sh.find("az", "vm", "image", "terms", "accept")
    assert terms[terms.index("--publisher") + 1] == "thefreebsdfoundation"
    assert terms[terms.index("--offer") + 1] == "freebsd-14_2"
    assert terms[terms.index("--plan") + 1] == "14_2-release-amd64-gen2-zfs"

    (nic,) = fake_sh.find("az", "network", "nic", "update")
    assert nic[nic.index("--name") + 1] == "freebsd-nvaVMNic"

    (route,) = fake_sh.find("az", "network", "route-table", "route", "create")
    assert route[route.index("--next-hop-ip-address") + 1] == "10.0.2.4"
    assert route[route.index("--address-prefix") + 1] == "0.0.0.0/0"

    (create,) = fake_sh.find("az", "aks", "create")
    assert "--enable-private-cluster" in create
    assert create[create.index("--outbound-type") + 1] == "userDefinedRouting"
    assert create[create.index("--kubernetes-version") + 1] == "1.32"

    (link,) = fake_sh.find("az", "network", "private-dns", "link", "vnet", "create")
    assert link[link.index("--resource-group") + 1] == "MC_rg-aks-fw-test_aks-fw-test_westus3"
    assert link[link.index("--zone-name") + 1] == "abc.privatelink.westus3.azmk8s.io"

    assert len(fake_sh.commands("scp")) == 1


def test_install_continues_when_terms_and_test_pod_fail(fake_sh) -> None:
    _script_hub_spoke(fake_sh)
    fake_sh.fail("az", "vm", "image", "terms", "accept")
    fake_sh.fail("az", "aks", "command", "invoke", stderr=b"pods \"test-icmp\" already exists")

    run_hub_spoke_install(HubSpokeConfig(), sleep=lambda seconds: None)

    assert fake_sh.find("az", "vm", "create")
    assert fake_sh.find("az", "aks", "create")


def test_cli_install_honours_wait_settings(monkeypatch, fake_sh) -> None:
    monkeypatch.setenv("NVA_BOOT_WAIT", "0")
    monkeypatch.setenv("TEST_POD_WAIT", "0")
    monkeypatch.setenv("RESOURCEGROUP", "rg-hub")
    _script_hub_spoke(fake_sh)
    fake_sh.respond("az", "vm", "show", "-g", "rg-hub", "-n", "freebsd-nva", "-d", output="10.0.2.4\n")
    fake_sh.respond("az", "vm", "show", "-g", "rg-hub", "-n", "freebsd-nva", "--query", output=NIC_ID + "\n")

    result = runner.invoke(app, ["hub-spoke", "-x", "install"])

    assert result.exit_code == 0, result.output
    assert ("group", "create", "--location", "westus3", "--name", "rg-hub", "-o", "none") in fake_sh.commands()
    assert "Hub-Spoke AKS with FreeBSD NVA installation completed!" in _plain(result.output)


def test_check_deps_requires_ssh_tools(fake_sh) -> None:
    fake_sh.missing.add("jq")

    result = runner.invoke(app, ["hub-spoke", "-x", "check-deps"])

    assert result.exit_code == 1
    output = _plain(result.output)
    assert "scp: OK" in output
    assert "jq: NOT FOUND" in output


def test_show_skips_missing_resources(fake_sh) -> None:
    fake_sh.fail("az", "aks", "show")
    fake_sh.fail("az", "vm", "show")
    fake_sh.fail("az", "network", "route-table", "route", "list")
    fake_sh.respond("az", "network", "vnet", "list", output="Name        AddressSpace\nhub-vnet    10.0.0.0/16\n")

    result = runner.invoke(app, ["hub-spoke", "-x", "show"])

    assert result.exit_code == 0, result.output
    output = _plain(result.output)
    assert "AKS Cluster Information:" not in output
    assert "FreeBSD NVA Information:" not in output
    assert "hub-vnet" in output
    assert "No route table found" in output


def test_show_prints_nva_access(fake_sh) -> None:
    _script_hub_spoke(fake_sh)

    result = runner.invoke(app, ["hub-spoke", "-x", "show"])

    assert result.exit_code == 0, result.output
    output = _plain(result.output)
    assert "Public IP: 20.1.2.3" in output
    assert "Private IP: 10.0.2.4" in output
    assert "SSH: ssh azureuser@20.1.2.3" in output


def test_destroy_deletes_resource_group_without_waiting(fake_sh) -> None:
    result = runner.invoke(app, ["hub-spoke", "-x", "destroy"])

    assert result.exit_code == 0, result.output
    assert fake_sh.commands() == [("group", "delete", "--name", "rg-aks-fw-test", "--yes", "--no-wait")]


def test_icmp_test_compares_egress_ip(fake_sh) -> None:
    fake_sh.respond("az", "network", "public-ip", "show", output="20.1.2.3\n")
    fake_sh.respond("az", "aks", "command", "invoke", output="3 packets transmitted, 3 received\n")

    result = runner.invoke(app, ["hub-spoke", "-x", "test-icmp"])

    assert result.exit_code == 0, result.output
    output = _plain(result.output)
    assert "Ping test to 8.8.8.8:" in output
    assert "3 packets transmitted" in output
    assert "Expected NVA public IP: 20.1.2.3" in output
    invoked = [args[args.index("--command") + 1] for args in fake_sh.find("az", "aks", "command", "invoke")]
    assert "ping -c 3 8.8.8.8" in invoked[0]
    assert "ifconfig.me/ip" in invoked[1]


def test_configure_nva_requires_ssh_before_waiting(fake_sh) -> None:
    fake_sh.missing.add("ssh")
    waits: list[float] = []

    with pytest.raises(DependencyError, match="Required command 'ssh' not found"):
        configure_nva(HubSpokeConfig(), sleep=waits.append)
    assert waits == []
    assert fake_sh.calls == []
