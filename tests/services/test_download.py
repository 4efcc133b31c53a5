import hashlib

import pytest
from rich.console import Console

from vectorpackager.errors import PackagerError
from vectorpackager.services.download import DownloadService


class FakeValidationService:
    def enforce_https_policy(self, *_args, **_kwargs):
        return None


class FakeResponse:
    def __init__(self, payload: bytes):
        self.payload = payload
        self.headers = {"Content-Length": str(len(payload))}

    def raise_for_status(self):
        return None

    def iter_content(self, chunk_size=8192):
        yield self.payload

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeRequestsModule:
    class RequestException(Exception):
        pass

    def __init__(self, payload: bytes, failures: int = 0):
        self.payload = payload
        self.failures = failures
        self.calls = 0

    def get(self, *_args, **_kwargs):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.RequestException("temporary download error")
        return FakeResponse(self.payload)


def _service(dummy_logger, requests_module, **kwargs):
    return DownloadService(
        validation_service=FakeValidationService(),
        logger=dummy_logger,
        console=Console(record=True),
        requests_module=requests_module,
        **kwargs,
    )


def test_download_file_writes_payload(tmp_path, dummy_logger):
    service = _service(dummy_logger, FakeRequestsModule(b"tarball"))
    dest = tmp_path / "pgbuild" / "postgresql-15.4.tar.bz2"

    service.download_file("https://example.com/postgresql-15.4.tar.bz2", str(dest))

    assert dest.read_bytes() == b"tarball"


def test_download_file_accepts_matching_checksum(tmp_path, dummy_logger):
    payload = b"checksum-ok"
    service = _service(dummy_logger, FakeRequestsModule(payload))
    dest = tmp_path / "download.tar.bz2"

    service.download_file(
        "https://example.com/download.tar.bz2",
        str(dest),
        expected_sha256=hashlib.sha256(payload).hexdigest(),
    )

    assert dest.read_bytes() == payload


def test_download_file_rejects_checksum_mismatch(tmp_path, dummy_logger):
    service = _service(dummy_logger, FakeRequestsModule(b"hello"))
    dest = tmp_path / "download.tar.bz2"

    with pytest.raises(PackagerError, match="Checksum mismatch"):
        service.download_file(
            "https://example.com/download.tar.bz2",
            str(dest),
            expected_sha256="0" * 64,
        )

    assert not dest.exists()


def test_download_service_wraps_request_errors(tmp_path, dummy_logger):
    requests_module = FakeRequestsModule(b"never", failures=1)
    service = _service(dummy_logger, requests_module)

    with pytest.raises(PackagerError, match="Download failed"):
        service.download_file("https://example.com/download.tar.bz2", str(tmp_path / "x"))

    assert requests_module.calls == 1
