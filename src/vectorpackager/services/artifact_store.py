"""Filesystem-backed artifact store with a retention window."""

import hashlib
import json
import os
import shutil
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from vectorpackager.constants import ARTIFACT_METADATA_FILE, ARTIFACT_RETENTION_DAYS
from vectorpackager.errors import PackagerError
from vectorpackager.models import PublishedArtifact


class ArtifactStoreService:
    """Stores uploads under ``<root>/<name>/<upload id>/`` with expiry metadata.

    Every publish creates a new upload, even for a name that already exists.
    Uploads whose ``expires_at`` has passed are removed before each publish.
    """

    def __init__(
        self,
        root: str,
        logger,
        console,
        retention_days: int = ARTIFACT_RETENTION_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if retention_days < 1:
            raise PackagerError("Artifact retention must be at least one day.")
        self.root = root
        self.logger = logger
        self.console = console
        self.retention_days = retention_days
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def publish(self, name: str, files: List[str]) -> PublishedArtifact:
        if not files:
            raise PackagerError(f"Refusing to publish empty artifact `{name}`.")

        self.prune_expired()

        created = self.clock()
        upload_id = f"{created.strftime('%Y%m%dT%H%M%SZ')}-{uuid.uuid4().hex[:8]}"
        upload_dir = os.path.join(self.root, name, upload_id)
        os.makedirs(upload_dir)

        stored_files = []
        checksums = {}
        try:
            for file_path in files:
                file_name = os.path.basename(file_path)
                shutil.copy2(file_path, os.path.join(upload_dir, file_name))
                stored_files.append(file_name)
                checksums[file_name] = self._sha256(file_path)

            artifact = PublishedArtifact(
                name=name,
                upload_id=upload_id,
                path=upload_dir,
                files=tuple(stored_files),
                created_at=created.isoformat(),
                expires_at=(created + timedelta(days=self.retention_days)).isoformat(),
                checksums=checksums,
            )
            self._write_metadata(artifact)
        except PackagerError:
            shutil.rmtree(upload_dir, ignore_errors=True)
            raise
        except OSError as exc:
            shutil.rmtree(upload_dir, ignore_errors=True)
            raise PackagerError(f"Could not upload artifact `{name}`: {exc}") from exc

        self.logger.info("Uploaded artifact %s (%s) to %s", name, upload_id, upload_dir)
        self.console.print(
            f"[green]Artifact {name} uploaded with {len(stored_files)} file(s); "
            f"expires {artifact.expires_at}.[/green]"
        )
        return artifact

    def list_artifacts(self, name: str) -> List[PublishedArtifact]:
        name_dir = os.path.join(self.root, name)
        if not os.path.isdir(name_dir):
            return []

        artifacts = []
        for upload_id in sorted(os.listdir(name_dir)):
            artifact = self._load_metadata(os.path.join(name_dir, upload_id))
            if artifact is not None:
                artifacts.append(artifact)
        return sorted(artifacts, key=lambda item: item.created_at)

    def prune_expired(self) -> List[str]:
        if not os.path.isdir(self.root):
            return []

        now = self.clock()
        removed = []
        for name in sorted(os.listdir(self.root)):
            for artifact in self.list_artifacts(name):
                if datetime.fromisoformat(artifact.expires_at) > now:
                    continue
                shutil.rmtree(artifact.path, ignore_errors=True)
                removed.append(artifact.path)
                self.logger.info("Removed expired artifact %s (%s)", artifact.name, artifact.upload_id)
        return removed

    def _write_metadata(self, artifact: PublishedArtifact):
        metadata_path = os.path.join(artifact.path, ARTIFACT_METADATA_FILE)
        payload = {
            "name": artifact.name,
            "upload_id": artifact.upload_id,
            "files": list(artifact.files),
            "checksums": artifact.checksums,
            "created_at": artifact.created_at,
            "expires_at": artifact.expires_at,
        }

        fd, temp_path = tempfile.mkstemp(prefix="artifact-", suffix=".json", dir=artifact.path)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(payload, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, metadata_path)
        except OSError as exc:
            raise PackagerError(f"Could not write artifact metadata '{metadata_path}': {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    def _load_metadata(self, upload_dir: str) -> Optional[PublishedArtifact]:
        metadata_path = os.path.join(upload_dir, ARTIFACT_METADATA_FILE)
        try:
            with open(metadata_path, "r", encoding="utf-8") as file_obj:
                data = json.load(file_obj)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.warning("Ignoring unreadable artifact metadata '%s': %s", metadata_path, exc)
            return None

        return PublishedArtifact(
            name=data["name"],
            upload_id=data["upload_id"],
            path=upload_dir,
            files=tuple(data.get("files", [])),
            created_at=data["created_at"],
            expires_at=data["expires_at"],
            checksums=data.get("checksums", {}),
        )

    @staticmethod
    def _sha256(path: str) -> str:
        hasher = hashlib.sha256()
        with open(path, "rb") as file_obj:
            for chunk in iter(lambda: file_obj.read(65536), b""):
                hasher.update(chunk)
        return hasher.hexdigest()
