from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from shellpref_setup.util import CommandRunner


@dataclass(frozen=True)
class DnfBackend:
    runner: CommandRunner
    logger: logging.Logger

    manager = "dnf"

    def is_installed(self, package: str) -> bool:
        # rpm -q exits 0 if installed
        res = self.runner.run(["rpm", "-q", package], sudo=False, check=False)
        return res.returncode == 0

    def refresh(self) -> None:
        # dnf refreshes expired metadata as part of install.
        return None

    def install(self, packages: Sequence[str]) -> None:
        self.runner.run(["dnf", "-y", "install", *packages], sudo=True, check=True)
