from __future__ import annotations

from shellpref_setup.core import Context
from shellpref_setup.errors import CommandFailed, ProvisionError


def ensure_login_shell(ctx: Context, shell: str = "zsh") -> str:
    path = ctx.runner.which(shell)
    if path is None:
        if ctx.runner.dry_run:
            return f"Would make {shell} the login shell."
        raise ProvisionError(f"`{shell}` is not on PATH; cannot make it the login shell")

    if ctx.environ.get("SHELL") == path:
        return f"{shell} is already the login shell."

    try:
        ctx.runner.run(["chsh", "-s", path], check=True, capture=False)
    except CommandFailed as e:
        raise ProvisionError(f"Cannot change login shell to {path}: {e}") from e
    if ctx.runner.dry_run:
        return f"Would change login shell to {path}."
    return f"Changed login shell to {path}."
