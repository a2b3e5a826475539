"""CA bundle resolution for TLS verification.

OpenSSL can only load CA bundles from real files. When the library runs from
a packed bundle (a zipapp, or site-packages shipped as a zip), the configured
CA path points inside the archive, e.g. ``/opt/app.pyz/certifi/cacert.pem``.
Such files are staged once into the system temp directory and the staged
copy is used instead.
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
import zipfile
from pathlib import Path, PurePosixPath

from braintree_gateway.exceptions import SSLCaFileNotFoundError

logger = logging.getLogger(__name__)

# Stable name so every process reuses the same staged copy
STAGED_CA_FILENAME = "api_braintreegateway_com.ca.crt"


def staged_ca_path() -> Path:
    return Path(tempfile.gettempdir()) / STAGED_CA_FILENAME


def split_archive_path(ca_file: str) -> tuple[Path, str] | None:
    """Split a path that points inside a zip archive.

    Returns:
        ``(archive_path, member_name)`` when some ancestor of *ca_file* is a
        zip file, otherwise None.
    """
    path = Path(ca_file)
    if path.is_file():
        return None

    for archive in path.parents:
        if archive.is_file():
            if not zipfile.is_zipfile(archive):
                return None
            member = PurePosixPath(*path.relative_to(archive).parts)
            return archive, str(member)
    return None


def resolve_ca_file(ca_file: str) -> str:
    """Return a filesystem path the TLS library can load *ca_file* from.

    Plain paths are returned unchanged. Paths inside an archive are copied to
    staged_ca_path(), re-copying only when the staged content's SHA-1 differs
    from the source.

    Raises:
        SSLCaFileNotFoundError: If the packed CA file cannot be read or staged.
    """
    packed = split_archive_path(ca_file)
    if packed is None:
        return ca_file

    archive, member = packed
    try:
        with zipfile.ZipFile(archive) as zf:
            content = zf.read(member)
    except (KeyError, OSError, zipfile.BadZipFile) as e:
        raise SSLCaFileNotFoundError(f"CA file not found in {archive}: {member}") from e

    staged = staged_ca_path()
    if staged.is_file() and _sha1_file(staged) == hashlib.sha1(content).hexdigest():
        return str(staged)

    try:
        staged.write_bytes(content)
    except OSError as e:
        raise SSLCaFileNotFoundError(f"Could not stage CA file at {staged}: {e}") from e

    logger.debug("Staged packed CA file %s to %s", ca_file, staged)
    return str(staged)


def _sha1_file(path: Path) -> str:
    return hashlib.sha1(path.read_bytes()).hexdigest()
