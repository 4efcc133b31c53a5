import pytest

from vectorpackager.models import BuildEnvironment


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None

    def error(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


@pytest.fixture
def dummy_logger():
    return DummyLogger()


@pytest.fixture
def dummy_console():
    return DummyConsole()


@pytest.fixture
def environment(tmp_path):
    workspace = tmp_path / "workspace"
    workspace.mkdir(exist_ok=True)
    return BuildEnvironment(
        workspace=str(workspace),
        pg_src_dir=str(tmp_path / "home" / "pgbuild"),
        pg_install_dir=str(tmp_path / "home" / "postgresql"),
        tag_dir=str(workspace / "timescaledb_vector"),
        pkgdump_dir=str(workspace / "pkgdump"),
        artifact_root=str(workspace / "artifacts"),
        package_script="scripts/package-deb.sh",
        runner_os="Linux",
        repository="timescale/timescaledb-vector",
        pgrx_version="0.9.8",
        postgres_mirror="https://ftp.postgresql.org/pub/source",
        make_jobs=6,
        retention_days=90,
    )
