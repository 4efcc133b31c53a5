"""OS build dependency installation for vectorpackager."""

import os
from typing import Callable, Iterable, List, Optional

from vectorpackager.constants import BASE_PACKAGES, DEB_PACKAGES


class DependencyService:
    """Installs the apt packages the PostgreSQL and extension builds need."""

    def __init__(self, logger, console, geteuid: Optional[Callable[[], int]] = None):
        self.logger = logger
        self.console = console
        self.geteuid = geteuid or getattr(os, "geteuid", None)

    def package_list(self, extra_packages: Iterable[str] = ()) -> List[str]:
        packages: List[str] = []
        for name in (*BASE_PACKAGES, *DEB_PACKAGES, *extra_packages):
            clean_name = name.strip()
            if clean_name and clean_name not in packages:
                packages.append(clean_name)
        return packages

    def requires_sudo(self) -> bool:
        return self.geteuid is not None and self.geteuid() != 0

    def _privilege_prefix(self) -> List[str]:
        return ["sudo"] if self.requires_sudo() else []

    def build_commands(self, packages: List[str]) -> List[List[str]]:
        prefix = self._privilege_prefix()
        return [
            prefix + ["apt-get", "update"],
            prefix + ["apt-get", "install", "-y", "--no-install-recommends", *packages],
        ]

    def install(self, extra_packages: Iterable[str], run_cmd: Callable):
        packages = self.package_list(extra_packages)
        self.console.print(f"[blue]Installing {len(packages)} build packages...[/blue]")
        self.logger.info("Installing packages: %s", ", ".join(packages))

        for cmd in self.build_commands(packages):
            run_cmd(cmd)

        self.console.print("[green]Build packages installed.[/green]")
