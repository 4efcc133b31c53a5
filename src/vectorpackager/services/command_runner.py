"""Subprocess execution service for vectorpackager."""

import subprocess
from typing import Dict, List, Optional

from vectorpackager.constants import INSTALL_HINTS
from vectorpackager.errors import PackagerError
from vectorpackager.errors_catalog import actionable_error


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger):
        self.logger = logger

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        if cwd:
            self.logger.debug("Executing in %s: %s", cwd, cmd_str)
        else:
            self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                cwd=cwd,
                env=env,
            )
        except FileNotFoundError as exc:
            hint = INSTALL_HINTS.get(cmd[0], "see the project README")
            raise PackagerError(actionable_error("tool_not_found", tool=cmd[0], hint=hint)) from exc
        except OSError as exc:
            raise PackagerError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise PackagerError(message)

        self.logger.warning(message)
        return result
