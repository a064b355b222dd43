"""Shared fixtures for shellpref-setup tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

import pytest

from shellpref_setup.core import Context, Options
from shellpref_setup.errors import CommandFailed
from shellpref_setup.util import CommandRunner, RunResult

Responder = Callable[[list[str]], "RunResult | None"]


class FakeRunner(CommandRunner):
    """CommandRunner that records argv instead of starting processes."""

    def __init__(self, *, dry_run: bool = False, search_path: str = "") -> None:
        super().__init__(dry_run=dry_run, logger=logging.getLogger("shellpref-setup.test"), search_path=search_path)
        self.calls: list[list[str]] = []
        self.responders: list[Responder] = []

    def respond(self, responder: Responder) -> None:
        self.responders.append(responder)

    def run(self, args: Iterable[str], *, sudo: bool = False, check: bool = False, **kwargs) -> RunResult:
        argv = list(args)
        if sudo:
            argv = ["sudo", *argv]
        self.calls.append(argv)
        result = RunResult(args=argv, returncode=0, stdout="", stderr="")
        if not self.dry_run:
            for responder in self.responders:
                got = responder(argv)
                if got is not None:
                    result = got
                    break
        if check and result.returncode != 0:
            raise CommandFailed(argv, result.returncode, result.stderr)
        return result

    def programs(self) -> list[str]:
        return [c[1] if c[0] == "sudo" else c[0] for c in self.calls]


def make_executable(directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    exe = directory / name
    exe.write_text("#!/bin/sh\nexit 0\n")
    exe.chmod(0o755)
    return exe


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def system_bin(tmp_path: Path) -> Path:
    d = tmp_path / "usr-bin"
    d.mkdir()
    return d


@pytest.fixture
def runner(system_bin: Path) -> FakeRunner:
    return FakeRunner(search_path=str(system_bin))


@pytest.fixture
def ctx(home: Path, runner: FakeRunner, tmp_path: Path) -> Context:
    os_release = tmp_path / "os-release"
    os_release.write_text('ID=ubuntu\nID_LIKE=debian\nPRETTY_NAME="Ubuntu 24.04 LTS"\n')
    return Context(
        home=home,
        logger=logging.getLogger("shellpref-setup.test"),
        runner=runner,
        options=Options(dry_run=False, os_release=os_release),
        environ={"SHELL": "/bin/bash"},
    )
