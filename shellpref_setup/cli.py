from __future__ import annotations

import argparse
import logging
from pathlib import Path

from shellpref_setup.config_loader import CONFIG_ENV, load_profile
from shellpref_setup.core import Options, build_context
from shellpref_setup.errors import ProvisionError
from shellpref_setup.pipeline import Provisioner
from shellpref_setup.util import xdg_config_home


def _setup_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("shellpref-setup")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="shellpref-setup",
        description="Install zsh, kitty and friends with the distro's package manager and write their config.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Profile file (*.toml, *.yaml, *.yml, *.json). Defaults to ${CONFIG_ENV}, "
        "then ~/.config/shellpref-setup/config.*, then built-in defaults.",
    )
    parser.add_argument(
        "--os-release",
        type=Path,
        default=Path("/etc/os-release"),
        help="Identity descriptor used to detect the distribution family.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log actions but do not change the system.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logs.",
    )
    args = parser.parse_args(argv)

    logger = _setup_logger(args.verbose)

    options = Options(dry_run=bool(args.dry_run), os_release=args.os_release)
    ctx = build_context(options=options, logger=logger)

    try:
        profile = load_profile(
            args.config,
            home=ctx.home,
            environ=ctx.environ,
            config_home=xdg_config_home(),
        )
    except ValueError as e:
        logger.error("Failed to load config: %s", e)
        return 2

    if profile.path is not None:
        logger.info("# %s @ %s", profile.description or "profile", profile.path)
    else:
        logger.info("# built-in profile")

    provisioner = Provisioner(ctx, profile)
    try:
        for step, msg in provisioner.run():
            logger.info("├─ %s: %s", step.value, msg)
    except ProvisionError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        return 130

    logger.info("└─ done")
    if provisioner.fzf_bindings is not None:
        logger.info("fzf key bindings sourced from: %s", provisioner.fzf_bindings)
    logger.info("")
    logger.info("Start a new kitty window or run: exec zsh")
    logger.info("- The first zsh start opens the Powerlevel10k wizard (choose lean/classic).")
    logger.info(
        "- Up/Down do prefix history. Ctrl+Left/Right move by words. "
        "Ctrl+Backspace/Ctrl+Delete kill words."
    )
    return 0
