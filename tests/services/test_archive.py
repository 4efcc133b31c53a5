import io
import tarfile

import pytest

from vectorpackager.errors import PackagerError
from vectorpackager.services.archive import ArchiveService


def _add_file(tar_file, name, payload=b"content"):
    info = tarfile.TarInfo(name)
    info.size = len(payload)
    tar_file.addfile(info, io.BytesIO(payload))


def test_archive_service_extracts_source_tarball(tmp_path):
    tar_path = tmp_path / "postgresql-15.4.tar.bz2"
    with tarfile.open(tar_path, "w:bz2") as tar_file:
        _add_file(tar_file, "postgresql-15.4/configure", b"#!/bin/sh\n")

    destination = tmp_path / "pgbuild"
    ArchiveService().safe_extract_tar(str(tar_path), str(destination))

    assert (destination / "postgresql-15.4" / "configure").read_bytes() == b"#!/bin/sh\n"


def test_archive_service_blocks_path_traversal(tmp_path):
    tar_path = tmp_path / "malicious.tar.gz"
    with tarfile.open(tar_path, "w:gz") as tar_file:
        _add_file(tar_file, "../escape.txt")

    destination = tmp_path / "extract"

    with pytest.raises(PackagerError, match="path traversal"):
        ArchiveService().safe_extract_tar(str(tar_path), str(destination))

    assert not (tmp_path / "escape.txt").exists()


def test_archive_service_blocks_escaping_symlink(tmp_path):
    tar_path = tmp_path / "symlink.tar"
    with tarfile.open(tar_path, "w") as tar_file:
        info = tarfile.TarInfo("postgresql-15.4/evil")
        info.type = tarfile.SYMTYPE
        info.linkname = "../../outside"
        tar_file.addfile(info)

    with pytest.raises(PackagerError, match="links outside"):
        ArchiveService().safe_extract_tar(str(tar_path), str(tmp_path / "extract"))


def test_archive_service_rejects_non_archive(tmp_path):
    bogus = tmp_path / "postgresql-15.4.tar.bz2"
    bogus.write_text("not a tarball", encoding="utf-8")

    with pytest.raises(PackagerError, match="Invalid tar archive"):
        ArchiveService().safe_extract_tar(str(bogus), str(tmp_path / "extract"))
