"""Tests for CA bundle resolution and staging out of zip archives."""

import hashlib
import zipfile
from pathlib import Path

import pytest

from braintree_gateway.ca_file import (
    STAGED_CA_FILENAME,
    resolve_ca_file,
    split_archive_path,
)
from braintree_gateway.exceptions import SSLCaFileNotFoundError

CA_CONTENT = b"-----BEGIN CERTIFICATE-----\nMIIBfake\n-----END CERTIFICATE-----\n"


@pytest.fixture
def temp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the system temp directory used for staging."""
    staging = tmp_path / "systemp"
    staging.mkdir()
    monkeypatch.setattr("braintree_gateway.ca_file.tempfile.gettempdir", lambda: str(staging))
    return staging


def _make_bundle(tmp_path: Path, content: bytes = CA_CONTENT) -> Path:
    archive = tmp_path / "app.pyz"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("certifi/cacert.pem", content)
    return archive


def _sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


class TestSplitArchivePath:
    def test_plain_file_is_not_packed(self, tmp_path: Path) -> None:
        ca = tmp_path / "ca.pem"
        ca.write_bytes(CA_CONTENT)
        assert split_archive_path(str(ca)) is None

    def test_missing_plain_path_is_not_packed(self, tmp_path: Path) -> None:
        assert split_archive_path(str(tmp_path / "nowhere" / "ca.pem")) is None

    def test_path_inside_zip(self, tmp_path: Path) -> None:
        archive = _make_bundle(tmp_path)
        packed = split_archive_path(str(archive / "certifi" / "cacert.pem"))
        assert packed == (archive, "certifi/cacert.pem")

    def test_path_under_regular_file_is_not_packed(self, tmp_path: Path) -> None:
        regular = tmp_path / "notes.txt"
        regular.write_text("not an archive")
        assert split_archive_path(str(regular / "ca.pem")) is None


class TestResolveCaFile:
    def test_plain_path_returned_unchanged(self, tmp_path: Path, temp_dir: Path) -> None:
        ca = tmp_path / "ca.pem"
        ca.write_bytes(CA_CONTENT)
        assert resolve_ca_file(str(ca)) == str(ca)
        assert not (temp_dir / STAGED_CA_FILENAME).exists()

    def test_packed_file_is_staged_with_same_hash(self, tmp_path: Path, temp_dir: Path) -> None:
        archive = _make_bundle(tmp_path)
        resolved = resolve_ca_file(str(archive / "certifi" / "cacert.pem"))

        assert resolved == str(temp_dir / STAGED_CA_FILENAME)
        assert _sha1(Path(resolved).read_bytes()) == _sha1(CA_CONTENT)

    def test_stale_staged_copy_is_replaced(self, tmp_path: Path, temp_dir: Path) -> None:
        (temp_dir / STAGED_CA_FILENAME).write_bytes(b"stale")
        archive = _make_bundle(tmp_path)

        resolved = resolve_ca_file(str(archive / "certifi" / "cacert.pem"))
        assert Path(resolved).read_bytes() == CA_CONTENT

    def test_matching_staged_copy_is_not_rewritten(
        self, tmp_path: Path, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (temp_dir / STAGED_CA_FILENAME).write_bytes(CA_CONTENT)
        archive = _make_bundle(tmp_path)

        def fail_write(self, data):
            raise AssertionError("staged CA file should not be rewritten")

        monkeypatch.setattr(Path, "write_bytes", fail_write)
        resolved = resolve_ca_file(str(archive / "certifi" / "cacert.pem"))
        assert resolved == str(temp_dir / STAGED_CA_FILENAME)

    def test_missing_member_raises(self, tmp_path: Path, temp_dir: Path) -> None:
        archive = _make_bundle(tmp_path)
        with pytest.raises(SSLCaFileNotFoundError):
            resolve_ca_file(str(archive / "certifi" / "missing.pem"))

    def test_unwritable_staging_raises(
        self, tmp_path: Path, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        archive = _make_bundle(tmp_path)

        def fail_write(self, data):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, "write_bytes", fail_write)
        with pytest.raises(SSLCaFileNotFoundError):
            resolve_ca_file(str(archive / "certifi" / "cacert.pem"))
