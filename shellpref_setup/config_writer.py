from __future__ import annotations

import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from shellpref_setup.core import Context
from shellpref_setup.errors import ConfigWriteFailed


@dataclass(frozen=True)
class ConfigTemplate:
    destination: Path
    content: str
    mode: int = 0o644
    # Files fully owned by this tool (kitty.conf) are overwritten without a backup.
    backup: bool = True


def backup_path(path: Path, *, now: float | None = None) -> Path:
    stamp = int(time.time() if now is None else now)
    candidate = path.with_name(f"{path.name}.bak.{stamp}")
    # Two runs within the same second must not overwrite the earlier backup.
    n = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.bak.{stamp}.{n}")
        n += 1
    return candidate


def backup(ctx: Context, path: Path) -> Path | None:
    """Copy `path` next to itself; a failed copy is logged and reported as None."""
    dest = backup_path(path)
    try:
        shutil.copy2(path, dest)
    except OSError as e:
        ctx.logger.warning("Could not back up %s: %s", path, e)
        return None
    ctx.logger.debug("Backed up %s to %s", path, dest)
    return dest


def atomic_write(path: Path, content: str, *, mode: int = 0o644) -> None:
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise ConfigWriteFailed(f"Cannot write {path}: {e}") from e
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)


def _current_content(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def write(ctx: Context, template: ConfigTemplate) -> str:
    dest = template.destination
    exists = dest.exists() or dest.is_symlink()

    if exists and _current_content(dest) == template.content:
        return f"{dest} is up to date."

    if ctx.runner.dry_run:
        verb = "replace" if exists else "create"
        return f"Would {verb} {dest}."

    # A symlinked destination (dotfile managers) keeps its link; the target gets the new content.
    target = dest
    if dest.is_symlink():
        try:
            target = dest.resolve()
        except (OSError, RuntimeError) as e:
            raise ConfigWriteFailed(f"Cannot resolve symlink {dest}: {e}") from e
        ctx.logger.debug("%s is a symlink; writing through to %s", dest, target)

    saved: Path | None = None
    if exists and template.backup:
        saved = backup(ctx, dest)

    atomic_write(target, template.content, mode=template.mode)
    if saved is not None:
        return f"Wrote {dest} (previous version saved to {saved.name})."
    return f"Wrote {dest}."
