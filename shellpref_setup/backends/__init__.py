"""
Package manager backends, one per supported distribution family.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from shellpref_setup.backends.apt import AptBackend
from shellpref_setup.backends.dnf import DnfBackend
from shellpref_setup.backends.pacman import PacmanBackend
from shellpref_setup.detect import PlatformFamily
from shellpref_setup.errors import UnsupportedPlatform
from shellpref_setup.util import CommandRunner


class PackageBackend(Protocol):
    manager: str

    def is_installed(self, package: str) -> bool: ...

    def refresh(self) -> None:
        """Bring package metadata up to date before install; may do nothing."""
        ...

    def install(self, packages: Sequence[str]) -> None: ...


_BACKENDS = {
    PlatformFamily.APT: AptBackend,
    PlatformFamily.PACMAN: PacmanBackend,
    PlatformFamily.DNF: DnfBackend,
}


def backend_for(family: PlatformFamily, *, runner: CommandRunner, logger: logging.Logger) -> PackageBackend:
    cls = _BACKENDS.get(family)
    if cls is None:
        raise UnsupportedPlatform(f"No package manager backend for family {family.value!r}")
    return cls(runner=runner, logger=logger)


__all__ = [
    "AptBackend",
    "DnfBackend",
    "PacmanBackend",
    "PackageBackend",
    "backend_for",
]
