from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from shellpref_setup.util import CommandRunner


@dataclass(frozen=True)
class PacmanBackend:
    runner: CommandRunner
    logger: logging.Logger

    manager = "pacman"

    def is_installed(self, package: str) -> bool:
        # pacman -Qi exits 0 if installed
        res = self.runner.run(["pacman", "-Qi", package], sudo=False, check=False)
        return res.returncode == 0

    def refresh(self) -> None:
        # Folded into install: -Sy syncs the databases in the same transaction.
        return None

    def install(self, packages: Sequence[str]) -> None:
        self.runner.run(
            ["pacman", "-Sy", "--noconfirm", "--needed", *packages],
            sudo=True,
            check=True,
        )
