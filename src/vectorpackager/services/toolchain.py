"""pgrx build toolchain installation."""

from typing import Callable, List

from vectorpackager.errors import PackagerError
from vectorpackager.models import BuildEnvironment, BuildRequest


class ToolchainService:
    """Installs the pinned cargo-pgrx and points it at the built PostgreSQL."""

    def __init__(self, logger, console):
        self.logger = logger
        self.console = console

    def build_commands(self, request: BuildRequest, environment: BuildEnvironment) -> List[List[str]]:
        return [
            ["cargo", "install", "--locked", "cargo-pgrx", "--version", environment.pgrx_version],
            ["cargo", "pgrx", "init", f"--pg{request.pg_major}={environment.pg_config_path}"],
        ]

    def install(self, request: BuildRequest, environment: BuildEnvironment, run_cmd: Callable) -> str:
        self.console.print(f"[blue]Installing cargo-pgrx {environment.pgrx_version}...[/blue]")
        env = environment.build_env()

        for cmd in self.build_commands(request, environment):
            run_cmd(cmd, env=env)

        result = run_cmd(["cargo", "pgrx", "--version"], capture_output=True, env=env)
        reported = (result.stdout or "").strip()
        if environment.pgrx_version not in reported.split():
            raise PackagerError(
                f"Expected cargo-pgrx {environment.pgrx_version} but found `{reported}`. "
                "Suggested action: remove the installed cargo-pgrx and run again."
            )

        self.console.print(f"[green]{reported} is ready.[/green]")
        return reported
