from __future__ import annotations

from typing import Sequence

from shellpref_setup.backends import backend_for
from shellpref_setup.core import Context
from shellpref_setup.detect import PlatformFamily
from shellpref_setup.errors import CommandFailed, PackageManagerFailure
from shellpref_setup.util import is_root


def install(ctx: Context, family: PlatformFamily, names: Sequence[str]) -> str:
    backend = backend_for(family, runner=ctx.runner, logger=ctx.logger)

    if not names:
        return "No packages requested."

    if ctx.runner.dry_run:
        missing = list(names)
    else:
        missing = [n for n in names if not backend.is_installed(n)]
    if not missing:
        return f"All {len(names)} packages are already installed ({backend.manager})."

    if not ctx.runner.dry_run and not is_root() and ctx.runner.which("sudo") is None:
        raise PackageManagerFailure("This setup needs sudo to install packages, but `sudo` is not on PATH.")

    # One batch call with the full list; the manager skips what is already present.
    try:
        backend.refresh()
        backend.install(list(names))
    except CommandFailed as e:
        raise PackageManagerFailure(f"{backend.manager} failed: {e}") from e

    if ctx.runner.dry_run:
        return f"Would install {len(missing)} packages with {backend.manager}: {', '.join(missing)}."
    return f"Installed {len(missing)} packages with {backend.manager}: {', '.join(missing)}."
