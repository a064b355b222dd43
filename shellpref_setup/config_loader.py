from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Mapping

from shellpref_setup.assets import (
    DEFAULT_TIMEOUT,
    MESLO_MARKER,
    MESLO_URL,
    P10K_URL,
    FetchedAsset,
    ThemeCheckout,
)
from shellpref_setup.detect import PlatformFamily
from shellpref_setup.packages import DEFAULT_CAPABILITIES
from shellpref_setup.shims import ShimLink, default_shims
from shellpref_setup.templates import ShellOptions

CONFIG_ENV = "SHELLPREF_SETUP_CONFIG"
CONFIG_NAMES = ("config.toml", "config.yaml", "config.yml", "config.json")

_TOP_LEVEL_KEYS = {
    "version",
    "description",
    "capabilities",
    "packages",
    "bin_dir",
    "shims",
    "shell",
    "font",
    "theme",
    "terminal",
    "login_shell",
    "download_timeout",
}


@dataclass(frozen=True)
class Profile:
    """Everything one run needs to know; default_profile() gives the stock setup."""

    home: Path
    bin_dir: Path
    shims: tuple[ShimLink, ...]
    path: Path | None = None
    version: int | None = None
    description: str | None = None
    capabilities: tuple[str, ...] = DEFAULT_CAPABILITIES
    package_overrides: Mapping[PlatformFamily, Mapping[str, str]] = field(default_factory=dict)
    shell: ShellOptions = ShellOptions()
    font: FetchedAsset | None = None
    theme: ThemeCheckout | None = None
    terminal: bool = True
    login_shell: bool = True

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    @property
    def kitty_conf(self) -> Path:
        return self.home / ".config" / "kitty" / "kitty.conf"


def default_font(home: Path, *, timeout: float = DEFAULT_TIMEOUT) -> FetchedAsset:
    return FetchedAsset(
        url=MESLO_URL,
        destination_dir=home / ".local" / "share" / "fonts",
        marker=MESLO_MARKER,
        timeout=timeout,
        refresh_font_cache=True,
    )


def default_theme(home: Path) -> ThemeCheckout:
    return ThemeCheckout(repo_url=P10K_URL, destination=home / ".p10k")


def default_profile(home: Path) -> Profile:
    bin_dir = home / ".local" / "bin"
    return Profile(
        home=home,
        bin_dir=bin_dir,
        shims=tuple(default_shims(bin_dir)),
        font=default_font(home),
        theme=default_theme(home),
    )


def _home_path(value: Any, *, home: Path, what: str) -> Path:
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{what}' must be a non-empty string")
    if value == "~":
        return home
    if value.startswith("~/"):
        return home / value[2:]
    return Path(os.path.expandvars(value))


def _require_bool(value: Any, *, what: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"'{what}' must be a boolean")
    return value


def _require_str(value: Any, *, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{what}' must be a non-empty string")
    return value


def _require_table(value: Any, *, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"'{what}' must be a table/object")
    return value


def _parse_capabilities(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(x, str) and x for x in value):
        raise ValueError("'capabilities' must be a list of non-empty strings")
    return tuple(value)


def _parse_package_overrides(value: Any) -> dict[PlatformFamily, dict[str, str]]:
    table = _require_table(value, what="packages")
    out: dict[PlatformFamily, dict[str, str]] = {}
    for family_name, entries in table.items():
        try:
            family = PlatformFamily(family_name)
        except ValueError:
            raise ValueError(f"Unknown family in 'packages': {family_name!r} (expected apt, pacman or dnf)") from None
        if family is PlatformFamily.UNKNOWN:
            raise ValueError("'packages.unknown' is not a valid family")
        entries = _require_table(entries, what=f"packages.{family_name}")
        out[family] = {
            cap: _require_str(name, what=f"packages.{family_name}.{cap}") for cap, name in entries.items()
        }
    return out


def _parse_shims(value: Any, *, bin_dir: Path) -> tuple[ShimLink, ...]:
    if not isinstance(value, list):
        raise ValueError("'shims' must be a list of {source, alias} tables")
    shims: list[ShimLink] = []
    for i, raw in enumerate(value, start=1):
        raw = _require_table(raw, what=f"shims[{i}]")
        shims.append(
            ShimLink(
                source=_require_str(raw.get("source"), what=f"shims[{i}].source"),
                alias=_require_str(raw.get("alias"), what=f"shims[{i}].alias"),
                destination_dir=bin_dir,
            )
        )
    return tuple(shims)


def _parse_shell(value: Any) -> ShellOptions:
    raw = _require_table(value, what="shell")
    unknown = set(raw) - {"autosuggest_strategy", "popup_completion"}
    if unknown:
        raise ValueError(f"Unknown keys in 'shell': {', '.join(sorted(unknown))}")
    defaults = ShellOptions()
    strategy = raw.get("autosuggest_strategy", defaults.autosuggest_strategy)
    if isinstance(strategy, list) and all(isinstance(x, str) for x in strategy):
        strategy = " ".join(strategy)
    elif not isinstance(strategy, str):
        raise ValueError("'shell.autosuggest_strategy' must be a string or list of strings")
    popup = _require_bool(raw.get("popup_completion", defaults.popup_completion), what="shell.popup_completion")
    return ShellOptions(autosuggest_strategy=strategy, popup_completion=popup)


def _parse_font(value: Any, *, home: Path, timeout: float) -> FetchedAsset | None:
    if value is False:
        return None
    raw = _require_table(value, what="font")
    unknown = set(raw) - {"url", "destination", "marker", "refresh_cache"}
    if unknown:
        raise ValueError(f"Unknown keys in 'font': {', '.join(sorted(unknown))}")
    fallback = default_font(home, timeout=timeout)
    return FetchedAsset(
        url=_require_str(raw.get("url", fallback.url), what="font.url"),
        destination_dir=_home_path(raw["destination"], home=home, what="font.destination")
        if "destination" in raw
        else fallback.destination_dir,
        marker=_require_str(raw.get("marker", fallback.marker), what="font.marker"),
        timeout=timeout,
        refresh_font_cache=_require_bool(
            raw.get("refresh_cache", fallback.refresh_font_cache), what="font.refresh_cache"
        ),
    )


def _parse_theme(value: Any, *, home: Path) -> ThemeCheckout | None:
    if value is False:
        return None
    raw = _require_table(value, what="theme")
    unknown = set(raw) - {"repo_url", "destination", "depth"}
    if unknown:
        raise ValueError(f"Unknown keys in 'theme': {', '.join(sorted(unknown))}")
    fallback = default_theme(home)
    depth = raw.get("depth", fallback.depth)
    if not isinstance(depth, int) or isinstance(depth, bool) or depth < 1:
        raise ValueError("'theme.depth' must be an integer >= 1")
    return ThemeCheckout(
        repo_url=_require_str(raw.get("repo_url", fallback.repo_url), what="theme.repo_url"),
        destination=_home_path(raw["destination"], home=home, what="theme.destination")
        if "destination" in raw
        else fallback.destination,
        depth=depth,
    )


def _enabled_flag(value: Any, *, what: str) -> bool:
    # Accept both `terminal = false` and `[terminal] enabled = false`.
    if isinstance(value, dict):
        value = value.get("enabled", True)
    return _require_bool(value, what=what)


def build_profile(raw: Any, *, home: Path, path: Path | None = None) -> Profile:
    if not isinstance(raw, dict):
        raise ValueError("Config must be a table/object at the top level.")
    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"Unknown top-level keys: {', '.join(sorted(unknown))}")

    base = default_profile(home)

    version = raw.get("version")
    if version is not None and (not isinstance(version, int) or isinstance(version, bool)):
        raise ValueError("'version' must be an integer if present")
    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        raise ValueError("'description' must be a string if present")

    timeout = raw.get("download_timeout", DEFAULT_TIMEOUT)
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
        raise ValueError("'download_timeout' must be a positive number")
    timeout = float(timeout)

    bin_dir = home / ".local" / "bin"
    if "bin_dir" in raw:
        bin_dir = _home_path(raw["bin_dir"], home=home, what="bin_dir")

    if "shims" in raw:
        shims = _parse_shims(raw["shims"], bin_dir=bin_dir)
    else:
        shims = tuple(default_shims(bin_dir))

    if "font" in raw:
        font = _parse_font(raw["font"], home=home, timeout=timeout)
    else:
        font = default_font(home, timeout=timeout)

    return Profile(
        home=home,
        path=path,
        version=version,
        description=description,
        capabilities=_parse_capabilities(raw["capabilities"]) if "capabilities" in raw else base.capabilities,
        package_overrides=_parse_package_overrides(raw["packages"]) if "packages" in raw else {},
        bin_dir=bin_dir,
        shims=shims,
        shell=_parse_shell(raw["shell"]) if "shell" in raw else base.shell,
        font=font,
        theme=_parse_theme(raw["theme"], home=home) if "theme" in raw else base.theme,
        terminal=_enabled_flag(raw.get("terminal", True), what="terminal"),
        login_shell=_enabled_flag(raw.get("login_shell", True), what="login_shell"),
    )


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except JSONDecodeError as e:
        raise ValueError(
            f"Invalid JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def _load_toml(text: str, path: Path) -> Any:
    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(text: str, path: Path) -> Any:
    import yaml

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and hasattr(mark, "line") and hasattr(mark, "column"):
            line = int(mark.line) + 1
            col = int(mark.column) + 1
            raise ValueError(f"Invalid YAML in {path} at line {line}, column {col}: {e}") from e
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_config_file(path: Path, *, home: Path) -> Profile:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Cannot read config {path}: {e}") from e
    suffix = path.suffix.lower()

    if suffix == ".json":
        raw = _load_json(text, path)
    elif suffix == ".toml":
        raw = _load_toml(text, path)
    elif suffix in (".yaml", ".yml"):
        raw = _load_yaml(text, path)
        if raw is None:
            raw = {}
    else:
        raise ValueError(
            f"Unsupported config format for {path} (expected .json, .toml, .yaml, .yml)."
        )
    try:
        return build_profile(raw, home=home, path=path)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e


def discover_config_file(
    explicit: Path | None,
    *,
    environ: Mapping[str, str],
    config_home: Path,
) -> Path | None:
    if explicit is not None:
        return explicit
    from_env = environ.get(CONFIG_ENV)
    if from_env:
        return Path(from_env).expanduser()
    base = config_home / "shellpref-setup"
    for name in CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_profile(
    explicit: Path | None,
    *,
    home: Path,
    environ: Mapping[str, str],
    config_home: Path,
) -> Profile:
    path = discover_config_file(explicit, environ=environ, config_home=config_home)
    if path is None:
        return default_profile(home)
    return load_config_file(path, home=home)
