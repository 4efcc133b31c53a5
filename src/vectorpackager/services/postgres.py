"""PostgreSQL source build and install service."""

import os
import re
from typing import Callable, List, Optional

from packaging import version

from vectorpackager.errors import PackagerError
from vectorpackager.errors_catalog import actionable_error
from vectorpackager.models import BuildEnvironment, BuildRequest

_PG_CONFIG_VERSION = re.compile(r"PostgreSQL\s+(\S+)")


class PostgresService:
    """Downloads, compiles and installs a specific PostgreSQL release."""

    def __init__(self, logger, console, download_service, archive_service, filesystem_service):
        self.logger = logger
        self.console = console
        self.download_service = download_service
        self.archive_service = archive_service
        self.filesystem_service = filesystem_service

    @staticmethod
    def source_dirname(pg_version: str) -> str:
        return f"postgresql-{pg_version}"

    def source_url(self, mirror: str, pg_version: str) -> str:
        return f"{mirror.rstrip('/')}/v{pg_version}/{self.source_dirname(pg_version)}.tar.bz2"

    def build_commands(self, environment: BuildEnvironment) -> List[List[str]]:
        return [
            ["./configure", f"--prefix={environment.pg_install_dir}"],
            ["make", f"-j{environment.make_jobs}"],
            ["make", "install"],
        ]

    def provision(
        self,
        request: BuildRequest,
        environment: BuildEnvironment,
        run_cmd: Callable,
        expected_sha256: Optional[str] = None,
    ) -> str:
        pg_version = request.pg_version
        self.console.print(f"[blue]Building PostgreSQL {pg_version}...[/blue]")

        self.filesystem_service.cleanup_dir(environment.pg_src_dir)
        self.filesystem_service.ensure_dir(environment.pg_src_dir)

        tarball = os.path.join(environment.pg_src_dir, f"{self.source_dirname(pg_version)}.tar.bz2")
        self.download_service.download_file(
            self.source_url(environment.postgres_mirror, pg_version),
            tarball,
            description=f"Downloading PostgreSQL {pg_version}...",
            expected_sha256=expected_sha256,
        )
        self.archive_service.safe_extract_tar(tarball, environment.pg_src_dir)
        os.remove(tarball)

        source_root = os.path.join(environment.pg_src_dir, self.source_dirname(pg_version))
        if not os.path.isdir(source_root):
            raise PackagerError(
                f"PostgreSQL source archive did not contain `{self.source_dirname(pg_version)}/`."
            )

        for cmd in self.build_commands(environment):
            run_cmd(cmd, cwd=source_root)

        reported = self.verify_installation(request, environment, run_cmd)
        self.console.print(f"[green]PostgreSQL {reported} installed to {environment.pg_install_dir}.[/green]")
        return reported

    def verify_installation(
        self,
        request: BuildRequest,
        environment: BuildEnvironment,
        run_cmd: Callable,
    ) -> str:
        pg_config = environment.pg_config_path
        if not os.path.isfile(pg_config):
            raise PackagerError(f"pg_config was not installed at {pg_config}.")

        result = run_cmd([pg_config, "--version"], capture_output=True)
        output = (result.stdout or "").strip()
        match = _PG_CONFIG_VERSION.search(output)
        if not match:
            raise PackagerError(f"Could not parse pg_config version output: `{output}`")

        reported = match.group(1)
        try:
            matches_request = version.parse(reported) == version.parse(request.pg_version)
        except version.InvalidVersion:
            matches_request = False

        if not matches_request:
            raise PackagerError(
                actionable_error(
                    "pg_version_mismatch",
                    reported=reported,
                    expected=request.pg_version,
                    install_dir=environment.pg_install_dir,
                )
            )

        self.logger.info("pg_config reports PostgreSQL %s", reported)
        return reported
