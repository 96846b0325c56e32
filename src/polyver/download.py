# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Download, checksum and unpack runtime archives."""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import stat
import tarfile
import tempfile
import urllib.error
import urllib.parse
import urllib.request
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO, Final

from .errors import ChecksumMismatchError, PolyverError

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 64 * 1024
DOWNLOAD_TIMEOUT_SECONDS: Final[float] = 300.0
USER_AGENT: Final[str] = "polyver"
CHECKSUM_TIMEOUT_SECONDS: Final[float] = 30.0
SHA256_HEX_LENGTH: Final[int] = 64

TAR_EXTENSIONS: Final[tuple[str, ...]] = (".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar.bz2", ".tbz2", ".tar")
ZIP_EXTENSIONS: Final[tuple[str, ...]] = (".zip",)
ARCHIVE_EXTENSIONS: Final[tuple[str, ...]] = TAR_EXTENSIONS + ZIP_EXTENSIONS

ProgressCallback = Callable[[int, int | None], None]
Opener = Callable[..., BinaryIO]


def compute_sha256(path: Path) -> str:
    """Return the lowercase hex SHA-256 digest of ``path``."""

    hasher = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def verify_file(path: Path, expected: str) -> None:
    """Check ``path`` against ``expected``.

    Raises:
        ChecksumMismatchError: If the digests differ.
    """

    actual = compute_sha256(path)
    if actual.lower() != expected.strip().lower():
        raise ChecksumMismatchError(expected, actual)


def _content_length(response: object) -> int | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    value = headers.get("Content-Length")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def download_verified(
    url: str,
    dest: Path,
    sha256: str = "",
    *,
    opener: Opener | None = None,
    timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
    progress: ProgressCallback | None = None,
) -> str:
    """Stream ``url`` into ``dest`` while hashing it.

    Args:
        url: Location of the archive.
        dest: File to write; its parent directory is created.
        sha256: Expected digest. Verification is skipped when empty.
        opener: Callable compatible with :func:`urllib.request.urlopen`.
        timeout: Socket timeout in seconds.
        progress: Called with ``(bytes_read, total_or_None)`` after each chunk.

    Returns:
        str: Hex digest of the downloaded bytes.

    Raises:
        PolyverError: If the download fails.
        ChecksumMismatchError: If ``sha256`` is given and does not match. The
            partial file is removed first.
    """

    open_url = opener or urllib.request.urlopen
    dest.parent.mkdir(parents=True, exist_ok=True)
    hasher = hashlib.sha256()
    LOGGER.debug("downloading url=%s dest=%s", url, dest)
    try:
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with open_url(request, timeout=timeout) as response, dest.open("wb") as handle:
            total = _content_length(response)
            read = 0
            for chunk in iter(lambda: response.read(CHUNK_SIZE), b""):
                handle.write(chunk)
                hasher.update(chunk)
                read += len(chunk)
                if progress is not None:
                    progress(read, total)
    except (urllib.error.URLError, OSError, ValueError) as exc:
        dest.unlink(missing_ok=True)
        raise PolyverError(f"failed to download {url}: {exc}") from exc

    actual = hasher.hexdigest()
    if sha256 and actual != sha256.strip().lower():
        dest.unlink(missing_ok=True)
        raise ChecksumMismatchError(sha256, actual)
    return actual


def parse_checksum_listing(text: str, filename: str) -> str | None:
    """Return the digest ``text`` lists for ``filename``.

    ``text`` uses the ``sha256sum`` layout, one ``<hex>  <name>`` or
    ``<hex> *<name>`` pair per line. A listing holding a single bare digest
    applies to any file.
    """

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    for line in lines:
        digest, _, name = line.partition(" ")
        name = name.strip().lstrip("*")
        if not name:
            if len(lines) == 1 and _is_sha256(digest):
                return digest.lower()
            continue
        if name.rsplit("/", 1)[-1] == filename and _is_sha256(digest):
            return digest.lower()
    return None


def _is_sha256(value: str) -> bool:
    return len(value) == SHA256_HEX_LENGTH and all(char in "0123456789abcdefABCDEF" for char in value)


def url_filename(url: str) -> str:
    return urllib.parse.unquote(urllib.parse.urlparse(url).path.rsplit("/", 1)[-1])


def fetch_expected_sha256(
    listing_url: str,
    archive_url: str,
    *,
    opener: Opener | None = None,
    timeout: float = CHECKSUM_TIMEOUT_SECONDS,
) -> str:
    """Look up the published digest of ``archive_url`` in a checksum listing.

    Args:
        listing_url: Location of a ``SHASUMS256.txt`` style file.
        archive_url: Archive whose file name is searched for.
        opener: Callable compatible with :func:`urllib.request.urlopen`.
        timeout: Socket timeout in seconds.

    Returns:
        str: Lowercase hex digest.

    Raises:
        PolyverError: If the listing cannot be fetched or has no entry for the
            archive.
    """

    open_url = opener or urllib.request.urlopen
    filename = url_filename(archive_url)
    LOGGER.debug("fetching checksum listing url=%s file=%s", listing_url, filename)
    try:
        request = urllib.request.Request(listing_url, headers={"User-Agent": USER_AGENT})
        with open_url(request, timeout=timeout) as response:
            text = response.read().decode("utf-8", errors="replace")
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise PolyverError(f"failed to fetch checksums from {listing_url}: {exc}") from exc
    digest = parse_checksum_listing(text, filename)
    if digest is None:
        raise PolyverError(f"no checksum for {filename} in {listing_url}")
    return digest


def archive_extension(url: str) -> str:
    """Return the archive extension of ``url`` (``".tar.gz"``, ``".zip"``...).

    Raises:
        PolyverError: If the URL does not name a supported archive.
    """

    name = urllib.parse.urlparse(url).path.rsplit("/", 1)[-1].lower()
    for extension in ARCHIVE_EXTENSIONS:
        if name.endswith(extension):
            return extension
    raise PolyverError(f"unsupported archive format: {name or url}")


def _extract_zip(archive: Path, target: Path) -> None:
    with zipfile.ZipFile(archive) as bundle:
        root = target.resolve()
        for member in bundle.infolist():
            destination = (target / member.filename).resolve()
            if not destination.is_relative_to(root):
                raise PolyverError(f"refusing to extract {member.filename} outside {target}")
            bundle.extract(member, target)
            mode = (member.external_attr >> 16) & 0o777
            if mode and not member.is_dir():
                os.chmod(destination, mode | stat.S_IRUSR)


def _flatten_single_directory(scratch: Path, dest: Path) -> None:
    entries = list(scratch.iterdir())
    source = entries[0] if len(entries) == 1 and entries[0].is_dir() else scratch
    dest.mkdir(parents=True, exist_ok=True)
    for entry in source.iterdir():
        shutil.move(str(entry), str(dest / entry.name))


def extract_archive(archive: Path, dest: Path, *, extension: str | None = None) -> None:
    """Unpack ``archive`` into ``dest``.

    When the archive holds a single top-level directory its contents are
    moved up so that ``dest`` becomes that directory.

    Raises:
        PolyverError: If the format is unsupported or the archive is corrupt.
    """

    kind = extension or archive_extension(archive.name)
    dest.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(dir=dest.parent, prefix=".extract-") as tmpdir:
        scratch = Path(tmpdir)
        try:
            if kind in ZIP_EXTENSIONS:
                _extract_zip(archive, scratch)
            elif kind in TAR_EXTENSIONS:
                with tarfile.open(archive, "r:*") as bundle:
                    bundle.extractall(scratch, filter="data")
            else:
                raise PolyverError(f"unsupported archive format: {kind}")
        except (tarfile.TarError, zipfile.BadZipFile, OSError) as exc:
            raise PolyverError(f"failed to extract {archive.name}: {exc}") from exc
        _flatten_single_directory(scratch, dest)
    LOGGER.debug("extracted archive=%s dest=%s", archive, dest)


__all__ = [
    "ARCHIVE_EXTENSIONS",
    "ProgressCallback",
    "archive_extension",
    "compute_sha256",
    "download_verified",
    "extract_archive",
    "fetch_expected_sha256",
    "parse_checksum_listing",
    "url_filename",
    "verify_file",
]
