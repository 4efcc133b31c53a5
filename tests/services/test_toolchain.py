import subprocess

import pytest

from vectorpackager.errors import PackagerError
from vectorpackager.models import BuildRequest
from vectorpackager.services.toolchain import ToolchainService



def _run_cmd_reporting(version_output, calls):
    def run_cmd(cmd, check=True, capture_output=False, cwd=None, env=None):
        calls.append((cmd, env))
        stdout = version_output if cmd[-1] == "--version" else ""
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")

    return run_cmd


def test_install_pins_pgrx_and_initializes_against_pg_config(environment, dummy_logger, dummy_console):
    request = BuildRequest(tag="0.1.0", pg_major="15", pg_minor="4")
    calls = []

    reported = ToolchainService(dummy_logger, dummy_console).install(
        request, environment, _run_cmd_reporting("cargo-pgrx 0.9.8\n", calls)
    )

    assert reported == "cargo-pgrx 0.9.8"
    assert calls[0][0] == ["cargo", "install", "--locked", "cargo-pgrx", "--version", "0.9.8"]
    assert calls[1][0] == ["cargo", "pgrx", "init", f"--pg15={environment.pg_config_path}"]
    assert calls[1][1]["PATH"].startswith(environment.pg_bin_dir)


def test_install_rejects_unexpected_pgrx_version(environment, dummy_logger, dummy_console):
    request = BuildRequest(tag="0.1.0", pg_major="15", pg_minor="4")

    with pytest.raises(PackagerError, match="Expected cargo-pgrx 0.9.8"):
        ToolchainService(dummy_logger, dummy_console).install(
            request, environment, _run_cmd_reporting("cargo-pgrx 0.11.0\n", [])
        )
