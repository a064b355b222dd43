from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from shellpref_setup.util import CommandRunner


@dataclass(frozen=True)
class Options:
    dry_run: bool
    os_release: Path = Path("/etc/os-release")


@dataclass(frozen=True)
class Context:
    home: Path
    logger: logging.Logger
    runner: CommandRunner
    options: Options
    # Snapshot of the variables the run reads ($SHELL, ...); never written back.
    environ: Mapping[str, str] = field(default_factory=dict)


def build_context(
    *,
    options: Options,
    logger: logging.Logger,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Context:
    env = dict(os.environ if environ is None else environ)
    runner = CommandRunner(
        dry_run=options.dry_run,
        logger=logger,
        search_path=env.get("PATH", os.defpath),
    )
    return Context(
        home=home if home is not None else Path.home(),
        logger=logger,
        runner=runner,
        options=options,
        environ=env,
    )
