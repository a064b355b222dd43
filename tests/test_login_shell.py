from __future__ import annotations

import dataclasses

import pytest
from conftest import make_executable

from shellpref_setup.errors import ProvisionError
from shellpref_setup.login_shell import ensure_login_shell
from shellpref_setup.util import RunResult


def test_changes_shell_when_different(ctx, runner, system_bin):
    zsh = make_executable(system_bin, "zsh")
    msg = ensure_login_shell(ctx)
    assert runner.calls == [["chsh", "-s", str(zsh)]]
    assert msg == f"Changed login shell to {zsh}."


def test_already_zsh(ctx, runner, system_bin):
    zsh = make_executable(system_bin, "zsh")
    ctx = dataclasses.replace(ctx, environ={"SHELL": str(zsh)})
    assert "already" in ensure_login_shell(ctx)
    assert runner.calls == []


def test_missing_zsh_is_fatal(ctx):
    with pytest.raises(ProvisionError, match="not on PATH"):
        ensure_login_shell(ctx)


def test_chsh_failure_is_fatal(ctx, runner, system_bin):
    make_executable(system_bin, "zsh")
    runner.respond(lambda argv: RunResult(argv, 1, "", "chsh: PAM: Authentication failure"))
    with pytest.raises(ProvisionError, match="Authentication failure"):
        ensure_login_shell(ctx)
