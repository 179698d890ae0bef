"""
Cache keys — derive npm and Cypress cache keys from the lockfile.

Keys look like ``npm-linux-x64-<sha512 of package-lock.json>``. The
platform and architecture use Node's names so keys match caches saved
by the JavaScript flavour of this action on the same runner image.
"""

from __future__ import annotations

import hashlib
import logging
import platform
import sys
from pathlib import Path

from e2e_action.core.config.loader import ConfigError
from e2e_action.core.models.cache import CacheSpec

logger = logging.getLogger(__name__)

NPM_CACHE = "npm"
CYPRESS_CACHE = "cypress"

_CHUNK = 64 * 1024

# sys.platform prefix → process.platform
_PLATFORMS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "win32",
    "cygwin": "win32",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "sunos": "sunos",
    "aix": "aix",
}

# platform.machine() → process.arch
_ARCHES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64",
    "ppc64": "ppc64",
    "s390x": "s390x",
}


def hash_file(path: Path) -> str:
    """SHA-512 hex digest of a file's contents.

    Raises:
        ConfigError: If the file can't be read.
    """
    h = hashlib.sha512()
    try:
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK), b""):
                h.update(chunk)
    except OSError as e:
        raise ConfigError(f"Cannot hash lockfile {path}: {e}") from e
    return h.hexdigest()


def node_platform(sys_platform: str | None = None) -> str:
    """Map ``sys.platform`` to Node's ``process.platform``."""
    value = sys_platform or sys.platform
    for prefix, name in _PLATFORMS.items():
        if value.startswith(prefix):
            return name
    return value


def node_arch(machine: str | None = None) -> str:
    """Map ``platform.machine()`` to Node's ``process.arch``."""
    value = (machine or platform.machine()).lower()
    return _ARCHES.get(value, value)


def platform_and_arch(sys_platform: str | None = None, machine: str | None = None) -> str:
    """``{platform}-{arch}``, e.g. ``linux-x64``."""
    return f"{node_platform(sys_platform)}-{node_arch(machine)}"


def cache_spec(name: str, input_path: str, lockfile_hash: str, platform_arch: str) -> CacheSpec:
    """Build the spec for one cached directory."""
    restore_keys = f"{name}-{platform_arch}-"
    return CacheSpec(
        name=name,
        input_path=input_path,
        restore_keys=restore_keys,
        primary_key=restore_keys + lockfile_hash,
    )


def default_cache_specs(
    lockfile: Path,
    npm_path: str = "~/.npm",
    cypress_path: str = "~/.cache/Cypress",
    platform_arch: str | None = None,
) -> tuple[CacheSpec, CacheSpec]:
    """The npm-modules and Cypress-binary cache specs for a lockfile.

    Returns:
        ``(npm_spec, cypress_spec)``.
    """
    lockfile_hash = hash_file(lockfile)
    platform_arch = platform_arch or platform_and_arch()
    logger.debug("Lockfile %s hash %s (%s)", lockfile, lockfile_hash[:12], platform_arch)
    return (
        cache_spec(NPM_CACHE, npm_path, lockfile_hash, platform_arch),
        cache_spec(CYPRESS_CACHE, cypress_path, lockfile_hash, platform_arch),
    )
