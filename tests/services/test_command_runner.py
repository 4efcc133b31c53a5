import os
import sys

import pytest

from vectorpackager.errors import PackagerError
from vectorpackager.services.command_runner import CommandRunner


def test_command_runner_raises_with_stderr(dummy_logger):
    runner = CommandRunner(logger=dummy_logger)

    with pytest.raises(PackagerError, match="boom"):
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(1)"],
            check=True,
            capture_output=True,
        )


def test_command_runner_returns_when_check_disabled(dummy_logger):
    runner = CommandRunner(logger=dummy_logger)

    result = runner.run(
        [sys.executable, "-c", "import sys; sys.exit(1)"],
        check=False,
        capture_output=True,
    )

    assert result.returncode == 1


def test_command_runner_honours_cwd_and_env(tmp_path, dummy_logger):
    runner = CommandRunner(logger=dummy_logger)
    env = dict(os.environ, PACKAGER_MARKER="marker-value")

    result = runner.run(
        [
            sys.executable,
            "-c",
            "import os; print(os.getcwd()); print(os.environ['PACKAGER_MARKER'])",
        ],
        capture_output=True,
        cwd=str(tmp_path),
        env=env,
    )

    cwd_line, env_line = result.stdout.strip().splitlines()
    assert os.path.samefile(cwd_line, tmp_path)
    assert env_line == "marker-value"


def test_command_runner_reports_missing_tool_with_hint(dummy_logger):
    runner = CommandRunner(logger=dummy_logger)

    with pytest.raises(PackagerError, match="Required command not found: definitely-not-a-tool"):
        runner.run(["definitely-not-a-tool", "--version"])

