"""Archive extraction helpers for vectorpackager."""

import os
import tarfile
from pathlib import Path

from vectorpackager.errors import PackagerError


class ArchiveService:
    """Encapsulates safe source tarball extraction."""

    def is_within_dir(self, base_dir: Path, candidate: Path) -> bool:
        try:
            return os.path.commonpath([str(base_dir), str(candidate)]) == str(base_dir)
        except ValueError:
            return False

    def safe_extract_tar(self, tar_path: str, destination_dir: str):
        base = Path(destination_dir).resolve()
        base.mkdir(parents=True, exist_ok=True)

        try:
            with tarfile.open(tar_path, "r:*") as tar_ref:
                members = tar_ref.getmembers()
                for member in members:
                    target_path = (base / member.name).resolve()

                    if not self.is_within_dir(base, target_path):
                        raise PackagerError(
                            f"Unsafe archive entry detected: `{member.name}`. "
                            "Extraction aborted to prevent path traversal."
                        )

                    if member.issym() or member.islnk():
                        if member.issym():
                            link_target = (target_path.parent / member.linkname).resolve()
                        else:
                            link_target = (base / member.linkname).resolve()
                        if not self.is_within_dir(base, link_target):
                            raise PackagerError(
                                f"Unsafe archive entry detected: `{member.name}` links outside "
                                "the extraction directory."
                            )

                    if member.isdev():
                        raise PackagerError(
                            f"Unsafe archive entry detected: `{member.name}` is a device file."
                        )

                if hasattr(tarfile, "data_filter"):
                    tar_ref.extractall(str(base), members=members, filter="data")
                else:
                    tar_ref.extractall(str(base), members=members)
        except tarfile.TarError as exc:
            raise PackagerError(f"Invalid tar archive: {tar_path}") from exc
