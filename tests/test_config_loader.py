from __future__ import annotations

import json
from pathlib import Path

import pytest

from shellpref_setup.config_loader import (
    CONFIG_ENV,
    default_profile,
    discover_config_file,
    load_config_file,
    load_profile,
)
from shellpref_setup.detect import PlatformFamily
from shellpref_setup.packages import DEFAULT_CAPABILITIES

TOML_PROFILE = """
version = 1
description = "laptop"
capabilities = ["zsh", "fuzzy-finder", "file-finder", "editor"]
download_timeout = 15
bin_dir = "~/bin"

[packages.apt]
editor = "neovim"

[packages.pacman]
editor = "neovim"

[shell]
autosuggest_strategy = "history"
popup_completion = true

[font]
url = "https://example.invalid/Hack.zip"
marker = "HackNerdFont-Regular.ttf"
refresh_cache = false

[theme]
destination = "~/.themes/p10k"
depth = 2

[terminal]
enabled = false
"""


def test_defaults_reproduce_stock_setup(home):
    p = default_profile(home)
    assert p.capabilities == DEFAULT_CAPABILITIES
    assert p.bin_dir == home / ".local" / "bin"
    assert [(s.source, s.alias) for s in p.shims] == [("fdfind", "fd"), ("batcat", "bat")]
    assert p.font is not None and p.font.url.endswith("/v3.2.1/Meslo.zip")
    assert p.font.destination_dir == home / ".local" / "share" / "fonts"
    assert p.theme is not None and p.theme.destination == home / ".p10k"
    assert p.shell.autosuggest_strategy == "history completion"
    assert p.terminal and p.login_shell
    assert p.zshrc == home / ".zshrc"
    assert p.kitty_conf == home / ".config" / "kitty" / "kitty.conf"


def test_toml_profile(tmp_path, home):
    path = tmp_path / "config.toml"
    path.write_text(TOML_PROFILE)

    p = load_config_file(path, home=home)

    assert p.path == path
    assert p.version == 1
    assert p.description == "laptop"
    assert p.capabilities == ("zsh", "fuzzy-finder", "file-finder", "editor")
    assert p.package_overrides == {
        PlatformFamily.APT: {"editor": "neovim"},
        PlatformFamily.PACMAN: {"editor": "neovim"},
    }
    assert p.bin_dir == home / "bin"
    assert all(s.destination_dir == home / "bin" for s in p.shims)
    assert p.shell.autosuggest_strategy == "history"
    assert p.shell.popup_completion is True
    assert p.font is not None
    assert p.font.url == "https://example.invalid/Hack.zip"
    assert p.font.marker == "HackNerdFont-Regular.ttf"
    assert p.font.timeout == 15.0
    assert p.font.refresh_font_cache is False
    assert p.theme is not None
    assert p.theme.destination == home / ".themes" / "p10k"
    assert p.theme.depth == 2
    assert p.terminal is False
    assert p.login_shell is True


def test_yaml_profile(tmp_path, home):
    path = tmp_path / "config.yaml"
    path.write_text(
        "shell:\n  autosuggest_strategy: [history, completion]\nfont: false\ntheme: false\nlogin_shell: false\n"
    )
    p = load_config_file(path, home=home)
    assert p.shell.autosuggest_strategy == "history completion"
    assert p.font is None
    assert p.theme is None
    assert p.login_shell is False


def test_json_profile_with_custom_shims(tmp_path, home):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"shims": [{"source": "nvim", "alias": "vim"}]}))
    p = load_config_file(path, home=home)
    assert [(s.source, s.alias, s.destination_dir) for s in p.shims] == [("nvim", "vim", home / ".local" / "bin")]


def test_empty_yaml_is_defaults(tmp_path, home):
    path = tmp_path / "config.yml"
    path.write_text("")
    assert load_config_file(path, home=home).capabilities == DEFAULT_CAPABILITIES


@pytest.mark.parametrize(
    "name, text, match",
    [
        ("c.json", '{"capabilities": [1, 2]}', "capabilities"),
        ("c.json", '{"frobnicate": true}', "Unknown top-level keys: frobnicate"),
        ("c.json", '{"packages": {"zypper": {"zsh": "zsh"}}}', "Unknown family"),
        ("c.json", '{"shell": {"autosuggest_strategy": "nope"}}', "autosuggest_strategy"),
        ("c.json", '{"shell": {"autosuggest_strategy": [1, 2]}}', "string or list of strings"),
        ("c.json", '{"shell": {"autosuggest_strategy": 3}}', "string or list of strings"),
        ("c.json", '{"font": {"destinaton": "~/f"}}', "Unknown keys in 'font': destinaton"),
        ("c.yaml", "theme:\n  branch: master\n", "Unknown keys in 'theme': branch"),
        ("c.json", '{"download_timeout": 0}', "download_timeout"),
        ("c.json", '{"theme": {"depth": 0}}', "theme.depth"),
        ("c.json", '{"terminal": "yes"}', "terminal"),
        ("c.json", "[1, 2]", "top level"),
        ("c.json", "{", "Invalid JSON"),
        ("c.toml", "capabilities = [", "Invalid TOML"),
        ("c.yaml", "shell: [unclosed", "Invalid YAML"),
        ("c.ini", "x=1", "Unsupported config format"),
    ],
)
def test_invalid_profiles(tmp_path, home, name, text, match):
    path = tmp_path / name
    path.write_text(text)
    with pytest.raises(ValueError, match=match):
        load_config_file(path, home=home)


def test_discovery_order(tmp_path):
    config_home = tmp_path / "xdg"
    explicit = tmp_path / "explicit.toml"
    from_env = tmp_path / "env.yaml"

    assert discover_config_file(None, environ={}, config_home=config_home) is None

    default = config_home / "shellpref-setup" / "config.yaml"
    default.parent.mkdir(parents=True)
    default.write_text("{}")
    assert discover_config_file(None, environ={}, config_home=config_home) == default

    env = {CONFIG_ENV: str(from_env)}
    assert discover_config_file(None, environ=env, config_home=config_home) == from_env
    assert discover_config_file(explicit, environ=env, config_home=config_home) == explicit


def test_load_profile_without_files_uses_defaults(tmp_path, home):
    p = load_profile(None, home=home, environ={}, config_home=tmp_path / "nothing")
    assert p.path is None
    assert p == default_profile(home)


def test_missing_explicit_file_is_an_error(tmp_path, home):
    with pytest.raises(ValueError, match="Cannot read config"):
        load_profile(Path(tmp_path / "absent.toml"), home=home, environ={}, config_home=tmp_path)
