"""Host platform normalisation for binary artifact classifiers.

Published compiler binaries are classified with names such as ``linux-x86_64``
or ``osx-aarch_64``. Those names differ from what :mod:`platform` reports, so
both the operating system and the architecture are mapped onto the
repository's vocabulary before a classifier is formed.
"""

from __future__ import annotations

import platform
import re
import warnings

OS_ALIASES = {
    "darwin": "osx",
    "macosx": "osx",
    "mac": "osx",
    "osx": "osx",
    "linux": "linux",
    "windows": "windows",
    "win32": "windows",
    "freebsd": "freebsd",
    "sunos": "sunos",
    "aix": "aix",
}

ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "x86": "x86_32",
    "i386": "x86_32",
    "i486": "x86_32",
    "i586": "x86_32",
    "i686": "x86_32",
    "aarch64": "aarch_64",
    "arm64": "aarch_64",
    "ppc64le": "ppcle_64",
    "ppc64": "ppc_64",
    "s390x": "s390_64",
}


class UnknownPlatformWarning(UserWarning):
    """Warning raised when a host name has no known classifier mapping."""


def normalize_os(name: str) -> str:
    key = name.strip().lower()
    if key.startswith("windows"):
        key = "windows"
    if key in OS_ALIASES:
        return OS_ALIASES[key]
    normalized = re.sub(r"[^a-z0-9]+", "", key)
    warnings.warn(
        f"Unrecognised operating system `{name}`; using `{normalized}` as classifier.",
        UnknownPlatformWarning,
        stacklevel=2,
    )
    return normalized


def normalize_arch(name: str) -> str:
    key = name.strip().lower()
    if key in ARCH_ALIASES:
        return ARCH_ALIASES[key]
    normalized = re.sub(r"[^a-z0-9_]+", "", key)
    warnings.warn(
        f"Unrecognised architecture `{name}`; using `{normalized}` as classifier.",
        UnknownPlatformWarning,
        stacklevel=2,
    )
    return normalized


def platform_classifier(*, system: str | None = None, machine: str | None = None) -> str:
    """Return the ``{os}-{arch}`` classifier for the given or current host."""
    os_name = normalize_os(system if system is not None else platform.system())
    arch = normalize_arch(machine if machine is not None else platform.machine())
    return f"{os_name}-{arch}"
