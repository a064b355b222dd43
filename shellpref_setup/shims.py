from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from shellpref_setup.core import Context
from shellpref_setup.errors import ProvisionError


@dataclass(frozen=True)
class ShimLink:
    source: str  # binary name as shipped by the distro, e.g. fdfind
    alias: str  # name the rest of the setup expects, e.g. fd
    destination_dir: Path


def default_shims(bin_dir: Path) -> list[ShimLink]:
    # Debian/Ubuntu rename these to avoid clashes with older packages.
    return [
        ShimLink(source="fdfind", alias="fd", destination_dir=bin_dir),
        ShimLink(source="batcat", alias="bat", destination_dir=bin_dir),
    ]


def _symlink_points_to(link: Path) -> Path | None:
    try:
        raw = os.readlink(link)
    except OSError:
        return None
    p = Path(raw)
    if not p.is_absolute():
        p = link.parent / p
    return Path(os.path.abspath(str(p)))


def _link(ctx: Context, shim: ShimLink, source_path: str) -> str:
    target = shim.destination_dir / shim.alias
    desired = Path(os.path.abspath(source_path))

    if target.is_symlink() and _symlink_points_to(target) == desired:
        return f"{shim.alias} -> {desired} (already linked)"

    if ctx.runner.dry_run:
        return f"would link {target} -> {desired}"

    try:
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.exists():
            raise ProvisionError(f"Cannot create shim {target}: a directory is in the way")
        target.symlink_to(desired)
    except OSError as e:
        raise ProvisionError(f"Cannot create shim {target} -> {desired}: {e}") from e
    return f"linked {target} -> {desired}"


def reconcile(ctx: Context, shims: Sequence[ShimLink]) -> list[str]:
    """
    Bridge distro-specific binary names to the names the shell config expects.

    Every destination directory is put at the front of the run's search path
    for the steps that follow.
    """
    notes: list[str] = []
    for shim in shims:
        if not ctx.runner.dry_run:
            try:
                shim.destination_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ProvisionError(f"Cannot create {shim.destination_dir}: {e}") from e
        ctx.runner.prepend_path(shim.destination_dir)

        if ctx.runner.which(shim.alias) is not None:
            ctx.logger.debug("%s already resolves; no shim needed", shim.alias)
            continue
        source_path = ctx.runner.which(shim.source)
        if source_path is None:
            ctx.logger.debug("Neither %s nor %s found; skipping shim", shim.alias, shim.source)
            continue
        notes.append(_link(ctx, shim, source_path))
    return notes
