from __future__ import annotations

import functools
import json
from pathlib import Path

import pytest
import sh

import aks_manager
from aks_manager import utils

AZ_VERSION_OUTPUT = json.dumps({"azure-cli": "2.61.0", "azure-cli-core": "2.61.0"})

_SETTINGS_ENV = (
    "LOCATION", "RESOURCEGROUP", "RESOURCE_GROUP", "CLUSTER", "CLUSTER_NAME", "KUBERNETES_VERSION",
    "NODE_COUNT", "KUBECONFIG", "SCHEDULER_CONFIG", "SCHEDULER_CONFIG_DIR", "GPU_POOL_NAME",
    "GPU_VM_SIZE", "GPU_ZONES", "GPU_NODE_COUNT", "HUB_VNET_NAME", "HUB_VNET_PREFIX",
    "NVA_SUBNET_PREFIX", "SPOKE_VNET_NAME", "SPOKE_VNET_PREFIX", "AKS_SUBNET_PREFIX", "NVA_NAME",
    "NVA_IMAGE", "NVA_SIZE", "NVA_ADMIN_USER", "NVA_BOOT_WAIT", "TEST_POD_WAIT", "RULESETS_DIR",
)


class FakeShell:
    """Stand-in for the ``sh`` module that records commands instead of running them.

    Responses are matched on the program and a prefix of its arguments; the
    most recently added match wins, and unmatched commands return "".
    Programs listed in ``missing`` are absent from PATH.
    """

    ErrorReturnCode = sh.ErrorReturnCode
    ErrorReturnCode_1 = sh.ErrorReturnCode_1
    ErrorReturnCode_2 = sh.ErrorReturnCode_2
    CommandNotFound = sh.CommandNotFound

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[str, ...], dict]] = []
        self.missing: set[str] = set()
        self._responses: list[tuple[str, tuple[str, ...], object]] = []

    def respond(self, program: str, *prefix: str, output: str = "", error: Exception | None = None) -> None:
        self._responses.append((program, prefix, error if error is not None else output))

    def fail(self, program: str, *prefix: str, stderr: bytes = b"failed") -> None:
        cmd = " ".join((program, *prefix))
        self.respond(program, *prefix, error=sh.ErrorReturnCode_1(cmd, b"", stderr))

    def which(self, cmd: str) -> str | None:
        return None if cmd in self.missing else f"/usr/bin/{cmd}"

    def commands(self, program: str = "az") -> list[tuple[str, ...]]:
        return [args for prog, args, _ in self.calls if prog == program]

    def find(self, program: str, *prefix: str) -> list[tuple[str, ...]]:
        return [args for args in self.commands(program) if args[:len(prefix)] == prefix]

    def _call(self, program: str, *args: str, **kwargs) -> str:
        self.calls.append((program, args, kwargs))
        for prog, prefix, result in reversed(self._responses):
            if prog == program and args[:len(prefix)] == prefix:
                if isinstance(result, Exception):
                    raise result
                return result
        return ""

    def __getattr__(self, program: str):
        if program.startswith("_"):
            raise AttributeError(program)
        if program in self.missing:
            raise sh.CommandNotFound(program)
        return functools.partial(self._call, program)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> Path:
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(aks_manager.console, "width", 200)
    return tmp_path


@pytest.fixture
def fake_sh(monkeypatch) -> FakeShell:
    fake = FakeShell()
    fake.respond("az", "version", output=AZ_VERSION_OUTPUT)
    monkeypatch.setattr(utils, "sh", fake)
    return fake
