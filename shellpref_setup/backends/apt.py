from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from shellpref_setup.util import CommandRunner


@dataclass(frozen=True)
class AptBackend:
    runner: CommandRunner
    logger: logging.Logger

    manager = "apt"

    def is_installed(self, package: str) -> bool:
        # dpkg-query exits 0 for packages that were merely removed, so check the status too.
        res = self.runner.run(
            ["dpkg-query", "-W", "-f=${Status}", package],
            sudo=False,
            check=False,
        )
        return res.returncode == 0 and "ok installed" in res.stdout

    def refresh(self) -> None:
        self.runner.run(["apt", "update"], sudo=True, check=True)

    def install(self, packages: Sequence[str]) -> None:
        self.runner.run(["apt", "install", "-y", *packages], sudo=True, check=True)
