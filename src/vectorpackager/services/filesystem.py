"""Filesystem helpers for vectorpackager."""

import glob
import logging
import os
import shutil
from typing import List

from rich.console import Console


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def cleanup_dir(self, path: str):
        if os.path.exists(path):
            try:
                shutil.rmtree(path)
                self.logger.debug("Removed directory: %s", path)
            except OSError as exc:
                message = f"Warning: Could not remove {path}: {exc}"
                self.console.print(f"[yellow]{message}[/yellow]")
                self.logger.warning(message)

    def ensure_dir(self, path: str):
        os.makedirs(path, exist_ok=True)

    def find_files(self, directory: str, pattern: str) -> List[str]:
        """Regular files in ``directory`` matching ``pattern``, sorted by name."""
        matches = glob.glob(os.path.join(glob.escape(directory), pattern))
        return sorted(path for path in matches if os.path.isfile(path))
