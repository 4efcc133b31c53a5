"""Extension source checkout service."""

from typing import Callable, List

from vectorpackager.constants import GITHUB_URL
from vectorpackager.errors import PackagerError
from vectorpackager.errors_catalog import actionable_error


class SourceCheckoutService:
    """Materializes a fresh working tree of a repository at a given ref."""

    def __init__(self, logger, console, filesystem_service):
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service

    def repository_url(self, repository: str) -> str:
        if "://" in repository or repository.startswith(("/", "git@")):
            return repository
        return f"{GITHUB_URL}/{repository}.git"

    def build_commands(self, repository: str, ref: str) -> List[List[str]]:
        return [
            ["git", "init", "-q"],
            ["git", "remote", "add", "origin", self.repository_url(repository)],
            ["git", "fetch", "--depth", "1", "origin", ref],
            ["git", "checkout", "-q", "--detach", "FETCH_HEAD"],
        ]

    def checkout(self, repository: str, ref: str, destination: str, run_cmd: Callable) -> str:
        self.console.print(f"[blue]Checking out {repository} at {ref}...[/blue]")
        self.filesystem_service.cleanup_dir(destination)
        self.filesystem_service.ensure_dir(destination)

        for cmd in self.build_commands(repository, ref):
            if cmd[1] == "fetch":
                try:
                    run_cmd(cmd, cwd=destination, capture_output=True)
                except PackagerError as exc:
                    raise PackagerError(
                        actionable_error("ref_not_found", ref=ref, repository=repository)
                    ) from exc
                continue
            run_cmd(cmd, cwd=destination)

        result = run_cmd(["git", "rev-parse", "HEAD"], cwd=destination, capture_output=True)
        commit = (result.stdout or "").strip()
        self.logger.info("Checked out %s at %s (%s)", repository, ref, commit)
        self.console.print(f"[green]Extension source ready at {destination}.[/green]")
        return commit
