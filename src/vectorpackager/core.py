import logging
import os
import platform
import shlex
import subprocess
import uuid
from dataclasses import asdict
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests
from rich.console import Console

from .constants import (
    ARTIFACT_RETENTION_DAYS,
    ARTIFACTS_DIR,
    DEFAULT_PG_MAJOR,
    DEFAULT_PG_MINOR,
    EXTENSION_REPOSITORY,
    MAKE_JOBS,
    OUTPUT_DIR,
    PACKAGE_SCRIPT,
    PG_INSTALL_DIR,
    PG_SRC_DIR,
    PGRX_VERSION,
    PKGDUMP_DIR,
    POSTGRES_MIRROR,
    REQUIRED_TOOLS,
    TAG_DIR,
)
from .errors import PackagerError
from .models import BuildEnvironment, BuildRequest, PublishedArtifact
from .services.archive import ArchiveService
from .services.artifact_store import ArtifactStoreService
from .services.command_runner import CommandRunner
from .services.dependencies import DependencyService
from .services.download import DownloadService
from .services.filesystem import FileSystemService
from .services.manifest import ManifestService
from .services.package_builder import PackageBuilderService
from .services.postgres import PostgresService
from .services.source_checkout import SourceCheckoutService
from .services.toolchain import ToolchainService
from .services.validation import ValidationService

console = Console()
logger = logging.getLogger("vectorpackager")


class DebPackager:
    """Builds a timescaledb-vector .deb against one PostgreSQL version and publishes it."""

    STEPS = (
        "validate_request",
        "validate_toolchain",
        "install_dependencies",
        "provision_postgres",
        "checkout_extension",
        "install_pgrx",
        "build_package",
        "publish_artifact",
    )

    def __init__(
        self,
        tag: Optional[str],
        pg_major: str = DEFAULT_PG_MAJOR,
        pg_minor: str = DEFAULT_PG_MINOR,
        workspace: Optional[str] = None,
        artifact_dir: Optional[str] = None,
        retention_days: int = ARTIFACT_RETENTION_DAYS,
        runner_os: Optional[str] = None,
        make_jobs: int = MAKE_JOBS,
        pgrx_version: str = PGRX_VERSION,
        repository: str = EXTENSION_REPOSITORY,
        package_script: str = PACKAGE_SCRIPT,
        postgres_mirror: str = POSTGRES_MIRROR,
        postgres_sha256: Optional[str] = None,
        download_timeout: float = 60.0,
        extra_packages: Optional[Iterable[str]] = None,
        allow_insecure_http: bool = False,
        dry_run: bool = False,
        verbose: bool = False,
    ):
        self.tag = tag
        self.pg_major = pg_major
        self.pg_minor = pg_minor
        self.dry_run = dry_run
        self.verbose = verbose
        self.run_id = uuid.uuid4().hex[:10]
        self.request: Optional[BuildRequest] = None
        self.current_step_name: Optional[str] = None

        if make_jobs < 1:
            raise PackagerError("--make-jobs must be at least 1.")

        self.validation_service = ValidationService(
            logger=logger,
            console=console,
            allow_insecure_http=allow_insecure_http,
        )
        self.postgres_sha256 = self.validation_service.normalize_sha256(
            postgres_sha256,
            "--postgres-sha256",
        )

        workspace = os.path.abspath(workspace or os.getcwd())
        home = os.path.expanduser("~")
        self.environment = BuildEnvironment(
            workspace=workspace,
            pg_src_dir=os.path.join(home, PG_SRC_DIR),
            pg_install_dir=os.path.join(home, PG_INSTALL_DIR),
            tag_dir=os.path.join(workspace, TAG_DIR),
            pkgdump_dir=os.path.join(workspace, PKGDUMP_DIR),
            artifact_root=os.path.abspath(artifact_dir or os.path.join(workspace, ARTIFACTS_DIR)),
            package_script=package_script,
            runner_os=runner_os or os.environ.get("RUNNER_OS") or platform.system(),
            repository=repository,
            pgrx_version=pgrx_version,
            postgres_mirror=postgres_mirror,
            make_jobs=make_jobs,
            retention_days=retention_days,
            extra_packages=tuple(extra_packages or ()),
        )
        self.output_dir = os.path.join(workspace, OUTPUT_DIR)
        self.manifest_file = os.path.join(self.output_dir, "run-manifest.json")

        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.archive_service = ArchiveService()
        self.command_runner = CommandRunner(logger=logger)
        self.download_service = DownloadService(
            validation_service=self.validation_service,
            logger=logger,
            console=console,
            requests_module=requests,
            timeout=download_timeout,
        )
        self.manifest_service = ManifestService(manifest_file=self.manifest_file, logger=logger)
        self.dependency_service = DependencyService(logger=logger, console=console)
        self.postgres_service = PostgresService(
            logger=logger,
            console=console,
            download_service=self.download_service,
            archive_service=self.archive_service,
            filesystem_service=self.filesystem_service,
        )
        self.checkout_service = SourceCheckoutService(
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
        )
        self.toolchain_service = ToolchainService(logger=logger, console=console)
        self.package_builder_service = PackageBuilderService(
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
        )
        self.artifact_store = ArtifactStoreService(
            root=self.environment.artifact_root,
            logger=logger,
            console=console,
            retention_days=retention_days,
        )

    def _build_manifest_request(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "pg_major": self.pg_major,
            "pg_minor": self.pg_minor,
            "dry_run": self.dry_run,
        }

    def _run_step(self, name: str, callback: Callable, *args, **kwargs):
        self.manifest_service.step_started(name)
        self.current_step_name = name
        logger.debug("Step started: %s", name)

        try:
            result = callback(*args, **kwargs)
        except Exception as exc:
            self.manifest_service.step_finished(name, "failed", error=str(exc))
            raise

        self.manifest_service.step_finished(name, "success")
        self.current_step_name = None
        return result

    def _run_cmd(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        return self.command_runner.run(
            cmd,
            check=check,
            capture_output=capture_output,
            cwd=cwd,
            env=env,
        )

    def _require_request(self) -> BuildRequest:
        if self.request is None:
            raise PackagerError("Build request has not been validated yet.")
        return self.request

    def validate_request(self) -> BuildRequest:
        self.request = self.validation_service.build_request(self.tag, self.pg_major, self.pg_minor)
        logger.info(
            "Packaging %s for PostgreSQL %s as %s",
            self.request.tag,
            self.request.pg_version,
            self.request.artifact_name,
        )
        return self.request

    def validate_toolchain(self):
        console.print("[blue]Checking required build tools...[/blue]")
        tools = list(REQUIRED_TOOLS)
        if self.dependency_service.requires_sudo():
            tools.append("sudo")
        self.validation_service.validate_toolchain(tools)
        self.package_builder_service.ensure_script(self.environment)

    def install_dependencies(self):
        self.dependency_service.install(self.environment.extra_packages, self._run_cmd)

    def provision_postgres(self) -> str:
        return self.postgres_service.provision(
            self._require_request(),
            self.environment,
            self._run_cmd,
            expected_sha256=self.postgres_sha256,
        )

    def checkout_extension(self) -> str:
        return self.checkout_service.checkout(
            repository=self.environment.repository,
            ref=self._require_request().tag,
            destination=self.environment.tag_dir,
            run_cmd=self._run_cmd,
        )

    def install_pgrx(self) -> str:
        return self.toolchain_service.install(self._require_request(), self.environment, self._run_cmd)

    def build_package(self) -> List[str]:
        return self.package_builder_service.build(
            self._require_request(),
            self.environment,
            self._run_cmd,
        )

    def publish_artifact(self, files: List[str]) -> PublishedArtifact:
        return self.artifact_store.publish(self._require_request().artifact_name, files)

    def build_plan(self) -> List[Dict[str, Any]]:
        """Commands each step would run, in order, without side effects."""
        request = self._require_request()
        environment = self.environment
        packages = self.dependency_service.package_list(environment.extra_packages)
        pg_source_root = os.path.join(
            environment.pg_src_dir,
            self.postgres_service.source_dirname(request.pg_version),
        )

        return [
            {
                "step": "install_dependencies",
                "commands": [
                    (None, cmd) for cmd in self.dependency_service.build_commands(packages)
                ],
            },
            {
                "step": "provision_postgres",
                "download": self.postgres_service.source_url(
                    environment.postgres_mirror,
                    request.pg_version,
                ),
                "commands": [
                    (pg_source_root, cmd)
                    for cmd in self.postgres_service.build_commands(environment)
                ],
            },
            {
                "step": "checkout_extension",
                "commands": [
                    (environment.tag_dir, cmd)
                    for cmd in self.checkout_service.build_commands(environment.repository, request.tag)
                ],
            },
            {
                "step": "install_pgrx",
                "commands": [
                    (None, cmd) for cmd in self.toolchain_service.build_commands(request, environment)
                ],
            },
            {
                "step": "build_package",
                "commands": self.package_builder_service.build_commands(request, environment),
            },
            {
                "step": "publish_artifact",
                "artifact": request.artifact_name,
                "pattern": os.path.join(environment.pkgdump_dir, request.artifact_glob),
                "store": environment.artifact_root,
            },
        ]

    def print_plan(self):
        request = self._require_request()
        console.print("[bold blue]Dry run: no commands will be executed.[/bold blue]")
        console.print(f"Tag: {request.tag}")
        console.print(f"PostgreSQL: {request.pg_version}")
        console.print(f"Artifact: {request.artifact_name}")

        for entry in self.build_plan():
            console.print(f"[bold]{entry['step']}[/bold]")
            if "download" in entry:
                console.print(f"  download {entry['download']}")
            for cwd, cmd in entry.get("commands", []):
                location = f"(in {cwd}) " if cwd else ""
                console.print(f"  {location}{shlex.join(cmd)}", markup=False)
            if "artifact" in entry:
                console.print(
                    f"  upload {entry['pattern']} as {entry['artifact']} to {entry['store']}",
                    markup=False,
                )

    def run(self) -> int:
        exit_code = 1
        manifest_status = "failed"
        manifest_error: Optional[str] = None

        try:
            logger.info("Starting vector packager run %s...", self.run_id)
            self.manifest_service.start_run(
                run_id=self.run_id,
                request=self._build_manifest_request(),
                environment=asdict(self.environment),
            )

            self._run_step("validate_request", self.validate_request)

            if self.dry_run:
                self.print_plan()
                manifest_status = "dry_run"
                exit_code = 0
                return exit_code

            self._run_step("validate_toolchain", self.validate_toolchain)
            self._run_step("install_dependencies", self.install_dependencies)

            postgres_version = self._run_step("provision_postgres", self.provision_postgres)
            self.manifest_service.set_value("postgres_version", postgres_version)

            commit = self._run_step("checkout_extension", self.checkout_extension)
            self.manifest_service.set_value("extension_commit", commit)

            self._run_step("install_pgrx", self.install_pgrx)
            packages = self._run_step("build_package", self.build_package)
            artifact = self._run_step("publish_artifact", self.publish_artifact, packages)
            self.manifest_service.set_value("artifact", asdict(artifact))

            console.print(f"[bold green]Published {artifact.name} ({artifact.upload_id}).[/bold green]")
            manifest_status = "success"
            exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            if self.current_step_name:
                self.manifest_service.step_finished(self.current_step_name, "aborted")
            manifest_status = "aborted"
            manifest_error = "Operation cancelled by user."
            return exit_code
        except PackagerError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error("Step '%s' failed: %s", self.current_step_name or "run", exc)
            manifest_error = str(exc)
            return exit_code
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            manifest_error = str(exc)
            return exit_code
        finally:
            self.manifest_service.finalize(manifest_status, error=manifest_error)
