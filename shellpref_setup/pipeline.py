"""
The provisioning run as a fixed sequence of steps.

Detect -> Resolve -> Install -> Reconcile -> WriteConfigs -> FetchAssets ->
LoginShell. Each step either completes and reports one line, or raises a
ProvisionError that ends the run; nothing loops back.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Iterator

import httpx

from shellpref_setup import assets, config_writer, installer, login_shell, packages, shims
from shellpref_setup.config_loader import Profile
from shellpref_setup.core import Context
from shellpref_setup.detect import PlatformFamily, detect
from shellpref_setup.templates import find_fzf_bindings, render_kitty_conf, render_zshrc, shell_path


class Step(enum.Enum):
    DETECT = "detect"
    RESOLVE = "resolve"
    INSTALL = "install"
    RECONCILE = "reconcile"
    WRITE_CONFIGS = "write-configs"
    FETCH_ASSETS = "fetch-assets"
    LOGIN_SHELL = "login-shell"


class Provisioner:
    def __init__(self, ctx: Context, profile: Profile, *, http_client: httpx.Client | None = None) -> None:
        self.ctx = ctx
        self.profile = profile
        self.http_client = http_client
        self.family: PlatformFamily | None = None
        self.packages: list[str] = []
        self.fzf_bindings: Path | None = None

    def run(self) -> Iterator[tuple[Step, str]]:
        yield Step.DETECT, self.detect()
        yield Step.RESOLVE, self.resolve()
        yield Step.INSTALL, self.install()
        yield Step.RECONCILE, self.reconcile()
        yield Step.WRITE_CONFIGS, self.write_configs()
        yield Step.FETCH_ASSETS, self.fetch_assets()
        if self.profile.login_shell:
            yield Step.LOGIN_SHELL, login_shell.ensure_login_shell(self.ctx)

    def detect(self) -> str:
        self.family = detect(self.ctx.options.os_release)
        return f"Detected {self.family.value}-based distribution."

    def resolve(self) -> str:
        assert self.family is not None
        table = packages.merge_table(packages.DEFAULT_TABLE, self.profile.package_overrides)
        self.packages = packages.resolve(self.family, self.profile.capabilities, table)
        return f"Resolved {len(self.profile.capabilities)} capabilities to {len(self.packages)} packages."

    def install(self) -> str:
        assert self.family is not None
        return installer.install(self.ctx, self.family, self.packages)

    def reconcile(self) -> str:
        notes = shims.reconcile(self.ctx, self.profile.shims)
        if not notes:
            return "No command shims needed."
        return "Shims: " + "; ".join(notes) + "."

    def templates(self) -> list[config_writer.ConfigTemplate]:
        home = self.profile.home
        theme = self.profile.theme
        out = [
            config_writer.ConfigTemplate(
                destination=self.profile.zshrc,
                content=render_zshrc(
                    self.profile.shell,
                    bin_dir=shell_path(self.profile.bin_dir, home),
                    theme_dir=shell_path(theme.destination, home) if theme is not None else None,
                ),
            )
        ]
        if self.profile.terminal:
            out.append(
                config_writer.ConfigTemplate(
                    destination=self.profile.kitty_conf,
                    content=render_kitty_conf(),
                    backup=False,
                )
            )
        return out

    def write_configs(self) -> str:
        self.fzf_bindings = find_fzf_bindings()
        if self.fzf_bindings is not None:
            self.ctx.logger.debug("fzf key bindings found at %s", self.fzf_bindings)
        return " ".join(config_writer.write(self.ctx, t) for t in self.templates())

    def fetch_assets(self) -> str:
        messages: list[str] = []
        if self.profile.font is not None:
            messages.append(assets.fetch(self.ctx, self.profile.font, client=self.http_client))
        if self.profile.theme is not None:
            messages.append(assets.clone_theme(self.ctx, self.profile.theme))
        if not messages:
            return "No assets configured."
        return " ".join(messages)
