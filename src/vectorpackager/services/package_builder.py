"""Extension build and .deb repackaging service."""

import os
from typing import Callable, List, Tuple

from vectorpackager.errors import PackagerError
from vectorpackager.errors_catalog import actionable_error
from vectorpackager.models import BuildEnvironment, BuildRequest


class PackageBuilderService:
    """Runs the extension's package target, then the .deb packaging script."""

    def __init__(self, logger, console, filesystem_service):
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service

    def script_path(self, environment: BuildEnvironment) -> str:
        if os.path.isabs(environment.package_script):
            return environment.package_script
        return os.path.join(environment.workspace, environment.package_script)

    def ensure_script(self, environment: BuildEnvironment) -> str:
        script = self.script_path(environment)
        if not os.path.isfile(script):
            raise PackagerError(actionable_error("packaging_script_not_found", path=script))
        return script

    def build_commands(
        self,
        request: BuildRequest,
        environment: BuildEnvironment,
    ) -> List[Tuple[str, List[str]]]:
        return [
            (environment.tag_dir, ["make", "package"]),
            (
                environment.workspace,
                [
                    "bash",
                    self.script_path(environment),
                    request.tag,
                    os.path.abspath(environment.tag_dir),
                    environment.runner_os,
                    request.pg_major,
                ],
            ),
        ]

    def build(self, request: BuildRequest, environment: BuildEnvironment, run_cmd: Callable) -> List[str]:
        self.ensure_script(environment)
        self.filesystem_service.cleanup_dir(environment.pkgdump_dir)
        env = environment.build_env()

        self.console.print(f"[blue]Building {request.artifact_name}...[/blue]")
        for cwd, cmd in self.build_commands(request, environment):
            run_cmd(cmd, cwd=cwd, env=env)

        packages = self.filesystem_service.find_files(environment.pkgdump_dir, request.artifact_glob)
        if not packages:
            raise PackagerError(
                actionable_error(
                    "no_packages_built",
                    pattern=request.artifact_glob,
                    directory=environment.pkgdump_dir,
                )
            )

        for package in packages:
            self.logger.info("Built package: %s", package)
        self.console.print(f"[green]Built {len(packages)} package(s).[/green]")
        return packages
