# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install and remove runtime versions using manifest download metadata."""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .context import AppContext
from .download import ProgressCallback, archive_extension, download_verified, extract_archive, fetch_expected_sha256
from .errors import ConfigurationError, PlatformUnavailableError, PolyverError
from .manifest.models import Availability, Download
from .platform import VALID_PLATFORMS, current_platform, is_valid_platform
from .runtime.version import AvailableVersion, Version, sort_versions_desc
from .shim.manager import RehashResult

LOGGER = logging.getLogger(__name__)

Downloader = Callable[..., str]
ChecksumLookup = Callable[[str, str], str]


def target_platform(platform: str | None) -> str:
    """Return ``platform`` or the host key when it is ``None``.

    Raises:
        PolyverError: If ``platform`` is not a supported platform key.
    """

    if platform is None:
        return current_platform()
    if not is_valid_platform(platform):
        raise PolyverError(f"unsupported platform '{platform}' (supported: {', '.join(VALID_PLATFORMS)})")
    return platform


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Outcome of a successful installation."""

    runtime: str
    version: str
    path: Path
    verified: bool
    shims: RehashResult | None = None
    set_global: bool = False


class Installer:
    """Drive manifest lookup, verified download, extraction and shim rebuild.

    Args:
        context: Application context.
        downloader: Callable with the signature of :func:`download_verified`.
        checksum_lookup: Called with ``(listing_url, archive_url)`` to find the
            published digest of builds whose manifest entry has none.
    """

    def __init__(
        self,
        context: AppContext,
        *,
        downloader: Downloader = download_verified,
        checksum_lookup: ChecksumLookup = fetch_expected_sha256,
    ) -> None:
        self._context = context
        self._download = downloader
        self._checksum_lookup = checksum_lookup

    def resolve_download(self, runtime: str, version: str, platform: str) -> Download:
        """Return the download for ``runtime`` ``version`` on ``platform``.

        Raises:
            PlatformUnavailableError: If the manifest lists the version without a
                build for the platform, or has no information at all.
        """

        manifest = self._context.manifests.get_manifest(runtime)
        availability = manifest.check_availability(version, platform)
        if availability is Availability.UNAVAILABLE:
            raise PlatformUnavailableError(runtime, version, platform, known=True)
        download = manifest.get_download(version, platform)
        if availability is Availability.UNKNOWN or download is None:
            raise PlatformUnavailableError(runtime, version, platform, known=False)
        return download

    def expected_sha256(self, download: Download) -> str:
        """Return the digest to verify ``download`` against, or ``""``."""

        if download.sha256:
            return download.sha256
        if download.sha256_url:
            return self._checksum_lookup(download.sha256_url, download.url)
        return ""

    def install(
        self,
        runtime: str,
        version: str,
        platform: str | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> InstallResult:
        """Install ``version`` of ``runtime`` and regenerate shims.

        The first version installed for a runtime with no global default
        becomes that default.

        Raises:
            UnknownRuntimeError: If ``runtime`` has no provider.
            PolyverError: If the version is already installed, or the download
                or extraction fails.
            ChecksumMismatchError: If the archive does not match its checksum.
        """

        provider = self._context.registry.get(runtime)
        if provider.is_installed(version):
            raise PolyverError(f"{provider.display_name} {version} is already installed")
        download = self.resolve_download(runtime, version, target_platform(platform))
        extension = archive_extension(download.url)
        expected = self.expected_sha256(download)
        install_path = provider.install_path(version)

        self._context.paths.ensure()
        with tempfile.TemporaryDirectory(prefix=f"polyver-{runtime}-") as tmpdir:
            archive = Path(tmpdir) / f"{runtime}-{version}{extension}"
            self._download(download.url, archive, expected, progress=progress)
            try:
                extract_archive(archive, install_path, extension=extension)
            except PolyverError:
                shutil.rmtree(install_path, ignore_errors=True)
                raise
        LOGGER.debug("installed runtime=%s version=%s path=%s", runtime, version, install_path)

        shims = self._context.shim_manager().rehash()
        set_global = False
        try:
            provider.global_version()
        except ConfigurationError:
            provider.set_global_version(version)
            set_global = True
        return InstallResult(
            runtime=runtime,
            version=version,
            path=install_path,
            verified=bool(expected),
            shims=shims,
            set_global=set_global,
        )

    def uninstall(self, runtime: str, version: str) -> Path:
        """Remove an installed version and regenerate shims for what remains.

        Raises:
            UnknownRuntimeError: If ``runtime`` has no provider.
            PolyverError: If the version is not installed, is the active global
                version, or cannot be removed.
        """

        provider = self._context.registry.get(runtime)
        if not provider.is_installed(version):
            raise PolyverError(f"{provider.display_name} {version} is not installed")
        try:
            active_global = provider.global_version()
        except ConfigurationError:
            active_global = ""
        if active_global == version:
            raise PolyverError(
                f"cannot uninstall {provider.display_name} {version}, it is the active global version; "
                f"set a different global version first: polyver global {runtime} <version>"
            )
        install_path = provider.install_path(version)
        try:
            shutil.rmtree(install_path)
        except OSError as exc:
            raise PolyverError(f"failed to remove {install_path}: {exc}") from exc
        try:
            self._context.shim_manager().rehash()
        except PolyverError as exc:
            LOGGER.debug("skipping shim rebuild after uninstall: %s", exc)
        return install_path

    def list_available(self, runtime: str, platform: str | None = None) -> list[AvailableVersion]:
        """Return installable versions of ``runtime`` for ``platform``, newest first."""

        self._context.registry.get(runtime)
        host = target_platform(platform)
        manifest = self._context.manifests.get_manifest(runtime)
        available = [
            AvailableVersion(version=Version(name), download=manifest.get_download(name, host))
            for name in manifest.list_available_versions(host)
        ]
        sort_versions_desc(available)
        return available


__all__ = ["InstallResult", "Installer", "target_platform"]
