"""Input and environment validation helpers for vectorpackager."""

import re
import shutil
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from vectorpackager.constants import INSTALL_HINTS
from vectorpackager.errors import PackagerError
from vectorpackager.errors_catalog import actionable_error
from vectorpackager.models import BuildRequest

_TAG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+~-]*$")


class ValidationService:
    """Validates run parameters, tooling and protocol policy."""

    def __init__(self, logger, console, allow_insecure_http: bool = False, which=shutil.which):
        self.logger = logger
        self.console = console
        self.allow_insecure_http = allow_insecure_http
        self.which = which

    def build_request(self, tag: Optional[str], pg_major, pg_minor) -> BuildRequest:
        clean_tag = (tag or "").strip()
        if not clean_tag:
            raise PackagerError(actionable_error("missing_tag"))
        if not _TAG_PATTERN.match(clean_tag):
            raise PackagerError(
                f"Invalid tag `{clean_tag}`. Tags may contain letters, digits and `._+~-`, "
                "and must not start with a separator."
            )

        return BuildRequest(
            tag=clean_tag,
            pg_major=self._normalize_version_part(pg_major, "major version"),
            pg_minor=self._normalize_version_part(pg_minor, "minor version"),
        )

    def _normalize_version_part(self, value, label: str) -> str:
        clean_value = str(value).strip() if value is not None else ""
        if not clean_value.isdigit():
            raise PackagerError(actionable_error("invalid_pg_version", label=label, value=clean_value))
        return str(int(clean_value))

    def normalize_sha256(self, value: Optional[str], option_name: str) -> Optional[str]:
        if value is None:
            return None

        clean_value = value.strip().lower()
        if len(clean_value) != 64 or any(c not in "0123456789abcdef" for c in clean_value):
            raise PackagerError(
                f"{option_name} must be a valid SHA-256 hash (64 hexadecimal characters)."
            )
        return clean_value

    def enforce_https_policy(self, location: str, label: str):
        scheme = urlparse(location).scheme.lower()
        if scheme == "https":
            return

        if scheme == "http" and self.allow_insecure_http:
            self.logger.warning("Insecure HTTP enabled for %s: %s", label, location)
            self.console.print(
                f"[yellow]Warning:[/yellow] Using insecure HTTP for {label}. "
                "Prefer HTTPS whenever possible."
            )
            return

        if scheme == "http":
            raise PackagerError(actionable_error("insecure_http", label=label))

        raise PackagerError(f"{label} must be an HTTPS URL: {location}")

    def missing_tools(self, tools: Iterable[str]) -> List[str]:
        return [tool for tool in tools if self.which(tool) is None]

    def validate_toolchain(self, tools: Iterable[str]):
        missing = self.missing_tools(tools)
        if not missing:
            self.console.print("[green]Required build tools are available.[/green]")
            return

        hints = "; ".join(f"{tool}: {INSTALL_HINTS.get(tool, 'install it')}" for tool in missing)
        raise PackagerError(f"Missing required tools: {', '.join(missing)}. Suggested action: {hints}")
