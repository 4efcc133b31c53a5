"""Configuration loader for vectorpackager."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from vectorpackager.errors import PackagerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "tag",
        "pg",
        "pg_min",
        "workspace",
        "artifact_dir",
        "retention_days",
        "runner_os",
        "make_jobs",
        "pgrx_version",
        "repository",
        "package_script",
        "postgres_mirror",
        "postgres_sha256",
        "download_timeout",
        "extra_packages",
        "allow_insecure_http",
        "verbose",
        "log_file",
        "dry_run",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise PackagerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise PackagerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise PackagerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise PackagerError(f"Unknown configuration keys: {unknown_list}")

        extra_packages = parsed.get("extra_packages")
        if extra_packages is not None and (
            not isinstance(extra_packages, list)
            or not all(isinstance(item, str) and item.strip() for item in extra_packages)
        ):
            raise PackagerError("`extra_packages` must be a list of package names.")

        tag = parsed.get("tag")
        if tag is not None and not isinstance(tag, str):
            raise PackagerError(
                f"`tag` must be a quoted string in the config file (got {tag!r}). "
                "Write it as `tag: \"1.10\"` so YAML keeps it verbatim."
            )

        for key in ("pg", "pg_min"):
            value = parsed.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int))):
                raise PackagerError(f"`{key}` must be a whole number or a quoted string (got {value!r}).")

        return parsed
