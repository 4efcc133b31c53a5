import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    ARTIFACT_RETENTION_DAYS,
    DEFAULT_PG_MAJOR,
    DEFAULT_PG_MINOR,
    EXTENSION_REPOSITORY,
    MAKE_JOBS,
    PACKAGE_SCRIPT,
    PGRX_VERSION,
    POSTGRES_MIRROR,
)
from .core import DebPackager, PackagerError
from .services.config_loader import ConfigLoader

DEFAULT_CONFIG_FILE = ".vectorpackager.yml"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option("--tag", required=False, envvar="TAG", help="Extension tag (or any git ref) to package.")
@click.option(
    "--pg",
    "pg_major",
    required=False,
    envvar="PG_VER",
    help=f"PostgreSQL major version (default: {DEFAULT_PG_MAJOR}).",
)
@click.option(
    "--pg-min",
    "pg_minor",
    required=False,
    envvar="PG_MIN_VER",
    help=f"PostgreSQL minor version (default: {DEFAULT_PG_MINOR}).",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--workspace",
    required=False,
    type=click.Path(file_okay=False),
    help="Directory holding the packaging script, checkout and pkgdump/ (default: cwd).",
)
@click.option(
    "--artifact-dir",
    required=False,
    type=click.Path(file_okay=False),
    help="Artifact store root (default: <workspace>/artifacts).",
)
@click.option(
    "--retention-days",
    required=False,
    type=int,
    default=None,
    help=f"Days an uploaded artifact is kept (default: {ARTIFACT_RETENTION_DAYS}).",
)
@click.option(
    "--runner-os",
    required=False,
    envvar="RUNNER_OS",
    help="OS name passed to the packaging script (default: $RUNNER_OS or the host OS).",
)
@click.option(
    "--make-jobs",
    required=False,
    type=int,
    default=None,
    help=f"Parallel make jobs for the PostgreSQL build (default: {MAKE_JOBS}).",
)
@click.option(
    "--postgres-mirror",
    required=False,
    help=f"Base URL for PostgreSQL source tarballs (default: {POSTGRES_MIRROR}).",
)
@click.option(
    "--postgres-sha256",
    required=False,
    help="Expected SHA-256 checksum of the PostgreSQL source tarball.",
)
@click.option(
    "--download-timeout",
    required=False,
    type=float,
    default=None,
    help="HTTP download timeout in seconds.",
)
@click.option(
    "--allow-insecure-http",
    is_flag=True,
    default=None,
    help="Allow an HTTP PostgreSQL mirror (insecure). By default only HTTPS is accepted.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Validate inputs and print the build plan without running anything.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    tag,
    pg_major,
    pg_minor,
    config,
    workspace,
    artifact_dir,
    retention_days,
    runner_os,
    make_jobs,
    postgres_mirror,
    postgres_sha256,
    download_timeout,
    allow_insecure_http,
    dry_run,
    verbose,
    log_file,
):
    """Build a timescaledb-vector .deb against a chosen PostgreSQL version."""
    logger = logging.getLogger("vectorpackager")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except PackagerError as exc:
        raise click.ClickException(str(exc)) from exc

    tag = _resolve_option(tag, config_values, "tag")
    pg_major = str(_resolve_option(pg_major, config_values, "pg", default=DEFAULT_PG_MAJOR))
    pg_minor = str(_resolve_option(pg_minor, config_values, "pg_min", default=DEFAULT_PG_MINOR))
    workspace = _resolve_option(workspace, config_values, "workspace")
    artifact_dir = _resolve_option(artifact_dir, config_values, "artifact_dir")
    retention_days = int(
        _resolve_option(retention_days, config_values, "retention_days", default=ARTIFACT_RETENTION_DAYS)
    )
    runner_os = _resolve_option(runner_os, config_values, "runner_os")
    make_jobs = int(_resolve_option(make_jobs, config_values, "make_jobs", default=MAKE_JOBS))
    postgres_mirror = _resolve_option(
        postgres_mirror, config_values, "postgres_mirror", default=POSTGRES_MIRROR
    )
    postgres_sha256 = _resolve_option(postgres_sha256, config_values, "postgres_sha256")
    download_timeout = float(
        _resolve_option(download_timeout, config_values, "download_timeout", default=60.0)
    )
    allow_insecure_http = bool(
        _resolve_option(allow_insecure_http, config_values, "allow_insecure_http", default=False)
    )
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    pgrx_version = str(config_values.get("pgrx_version", PGRX_VERSION))
    repository = config_values.get("repository", EXTENSION_REPOSITORY)
    package_script = config_values.get("package_script", PACKAGE_SCRIPT)
    extra_packages = config_values.get("extra_packages") or []

    if not tag or not str(tag).strip():
        raise click.ClickException("Missing required option '--tag' (or provide it in config).")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        packager = DebPackager(
            tag=str(tag),
            pg_major=pg_major,
            pg_minor=pg_minor,
            workspace=workspace,
            artifact_dir=artifact_dir,
            retention_days=retention_days,
            runner_os=runner_os,
            make_jobs=make_jobs,
            pgrx_version=pgrx_version,
            repository=repository,
            package_script=package_script,
            postgres_mirror=postgres_mirror,
            postgres_sha256=postgres_sha256,
            download_timeout=download_timeout,
            extra_packages=extra_packages,
            allow_insecure_http=allow_insecure_http,
            dry_run=dry_run,
            verbose=verbose,
        )
    except PackagerError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(packager.run())


if __name__ == "__main__":
    main()
