"""Shared domain models for vectorpackager."""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from .constants import EXTENSION_NAME


@dataclass(frozen=True)
class BuildRequest:
    """Invocation parameters, fixed for the whole run."""

    tag: str
    pg_major: str
    pg_minor: str

    @property
    def pg_version(self) -> str:
        return f"{self.pg_major}.{self.pg_minor}"

    @property
    def artifact_name(self) -> str:
        return f"vector-{self.tag}-pg{self.pg_major}"

    @property
    def artifact_glob(self) -> str:
        return f"{EXTENSION_NAME}-*{self.tag}*.deb"


@dataclass(frozen=True)
class BuildEnvironment:
    """Resolved locations and build knobs shared by every step."""

    workspace: str
    pg_src_dir: str
    pg_install_dir: str
    tag_dir: str
    pkgdump_dir: str
    artifact_root: str
    package_script: str
    runner_os: str
    repository: str
    pgrx_version: str
    postgres_mirror: str
    make_jobs: int
    retention_days: int
    extra_packages: Tuple[str, ...] = ()

    @property
    def pg_bin_dir(self) -> str:
        return os.path.join(self.pg_install_dir, "bin")

    @property
    def pg_config_path(self) -> str:
        return os.path.join(self.pg_bin_dir, "pg_config")

    def build_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env["PATH"] = os.pathsep.join([self.pg_bin_dir, env.get("PATH", "")])
        env["PG_CONFIG"] = self.pg_config_path
        return env


@dataclass(frozen=True)
class PublishedArtifact:
    """An uploaded set of package files in the artifact store."""

    name: str
    upload_id: str
    path: str
    files: Tuple[str, ...]
    created_at: str
    expires_at: str
    checksums: Dict[str, str] = field(default_factory=dict)
