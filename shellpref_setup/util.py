from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from shellpref_setup.errors import CommandFailed


def xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def sh_join(args: Sequence[str]) -> str:
    return shlex.join(list(args))


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner:
    """
    Runs external programs against an explicit search path.

    The search path starts from $PATH and can be extended during a run (see
    `prepend_path`); every child process gets it through its environment, so
    the provisioner never edits os.environ.
    """

    def __init__(
        self,
        *,
        dry_run: bool,
        logger,
        search_path: str | None = None,
    ) -> None:
        self._dry_run = dry_run
        self._logger = logger
        raw = os.environ.get("PATH", os.defpath) if search_path is None else search_path
        self._search_path: list[str] = [p for p in raw.split(os.pathsep) if p]

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    @property
    def search_path(self) -> str:
        return os.pathsep.join(self._search_path)

    def prepend_path(self, directory: Path) -> bool:
        entry = str(directory)
        if self._search_path and self._search_path[0] == entry:
            return False
        self._search_path = [entry, *(p for p in self._search_path if p != entry)]
        self._logger.debug("PATH += %s", entry)
        return True

    def which(self, name: str) -> str | None:
        return shutil.which(name, path=self.search_path)

    def run(
        self,
        args: Iterable[str],
        *,
        sudo: bool = False,
        check: bool = False,
        capture: bool = True,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> RunResult:
        argv = list(args)
        if sudo and not is_root():
            argv = ["sudo", *argv]

        # Keep low-level process logs at DEBUG so high-level output can stay
        # "one log line per pipeline step".
        self._logger.debug("RUN %s", sh_join(argv))
        if self._dry_run:
            return RunResult(args=argv, returncode=0, stdout="", stderr="")

        merged_env = dict(os.environ)
        merged_env["PATH"] = self.search_path
        if env is not None:
            merged_env.update(dict(env))

        try:
            cp = subprocess.run(
                argv,
                text=True,
                capture_output=capture,
                check=False,  # we handle below to include logs
                cwd=str(cwd) if cwd is not None else None,
                env=merged_env,
            )
        except FileNotFoundError as e:
            if check:
                raise CommandFailed(argv, 127, str(e)) from e
            return RunResult(args=argv, returncode=127, stdout="", stderr=str(e))

        if check and cp.returncode != 0:
            raise CommandFailed(argv, cp.returncode, cp.stderr or "")
        return RunResult(
            args=argv,
            returncode=cp.returncode,
            stdout=cp.stdout or "",
            stderr=cp.stderr or "",
        )
