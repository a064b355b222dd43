"""
Failures that stop a provisioning run.

Everything fatal derives from ProvisionError so the CLI can turn it into a
non-zero exit with a readable message. Backup failures are not
represented here: they are logged and the run continues.
"""

from __future__ import annotations

import shlex
from typing import Sequence


class ProvisionError(RuntimeError):
    """Base class for fatal provisioning errors."""


class UnsupportedPlatform(ProvisionError):
    """The identity descriptor is missing, unreadable or names an unknown distribution."""


class UnmappedCapability(ProvisionError):
    """A capability has no package name for the detected family."""

    def __init__(self, capability: str, family: str) -> None:
        super().__init__(f"No package mapping for capability {capability!r} on {family} systems")
        self.capability = capability
        self.family = family


class PackageManagerFailure(ProvisionError):
    """The package manager exited non-zero or could not be started."""


class ConfigWriteFailed(ProvisionError):
    """A configuration file could not be written to its destination."""


class AssetFetchFailed(ProvisionError):
    """Downloading, unpacking or cloning an external asset failed."""


class CommandFailed(ProvisionError):
    def __init__(self, args: Sequence[str], returncode: int, stderr: str) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {shlex.join(self.args_list)}"
        if stderr.strip():
            msg += f"\n{stderr.rstrip()}"
        super().__init__(msg)
