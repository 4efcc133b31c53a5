"""Download service with progress reporting and checksum validation."""

import hashlib
import os
from typing import Optional

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from vectorpackager.errors import PackagerError


class DownloadService:
    """Streams remote files to disk."""

    def __init__(
        self,
        validation_service,
        logger,
        console,
        requests_module,
        timeout: float = 60.0,
    ):
        self.validation_service = validation_service
        self.logger = logger
        self.console = console
        self.requests = requests_module
        self.timeout = timeout

    def download_file(
        self,
        url: str,
        dest_path: str,
        description: str = "Downloading...",
        expected_sha256: Optional[str] = None,
    ):
        self.logger.info("Downloading %s to %s", url, dest_path)
        self.validation_service.enforce_https_policy(url, description)

        try:
            self._stream_to_file(url, dest_path, description, expected_sha256)
        except self.requests.RequestException as exc:
            raise PackagerError(f"Download failed for {description}: {exc}") from exc

    def _stream_to_file(
        self,
        url: str,
        dest_path: str,
        description: str,
        expected_sha256: Optional[str],
    ):
        hasher = hashlib.sha256() if expected_sha256 else None

        with self.requests.get(url, stream=True, timeout=self.timeout) as response:
            response.raise_for_status()
            total_size = int(response.headers.get("Content-Length", 0))

            os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                "•",
                TimeElapsedColumn(),
                console=self.console,
            ) as progress:
                task = progress.add_task(f"[cyan]{description}", total=total_size or None)
                with open(dest_path, "wb") as file_obj:
                    for chunk in response.iter_content(chunk_size=8192):
                        if not chunk:
                            continue
                        file_obj.write(chunk)
                        if hasher:
                            hasher.update(chunk)
                        progress.update(task, advance=len(chunk))

        if hasher:
            downloaded_sha = hasher.hexdigest()
            if downloaded_sha != expected_sha256:
                try:
                    os.remove(dest_path)
                except OSError:
                    pass
                raise PackagerError(
                    f"Checksum mismatch for {description}. Expected {expected_sha256}, "
                    f"but got {downloaded_sha}."
                )
