from __future__ import annotations

from typing import Mapping, Sequence

from shellpref_setup.detect import PlatformFamily
from shellpref_setup.errors import UnmappedCapability

# capability -> family -> package name
PackageTable = Mapping[str, Mapping[PlatformFamily, str]]

_APT = PlatformFamily.APT
_PACMAN = PlatformFamily.PACMAN
_DNF = PlatformFamily.DNF


def _same(name: str) -> dict[PlatformFamily, str]:
    return {_APT: name, _PACMAN: name, _DNF: name}


DEFAULT_TABLE: dict[str, dict[PlatformFamily, str]] = {
    "zsh": _same("zsh"),
    "git": _same("git"),
    "curl": _same("curl"),
    "unzip": _same("unzip"),
    "fontconfig": _same("fontconfig"),
    "fuzzy-finder": _same("fzf"),
    "ripgrep": _same("ripgrep"),
    "pager": _same("bat"),
    # Debian and Fedora ship fd as fd-find (binary: fdfind on Debian).
    "file-finder": {_APT: "fd-find", _PACMAN: "fd", _DNF: "fd-find"},
    "smart-cd": _same("zoxide"),
    "zsh-autosuggestions": _same("zsh-autosuggestions"),
    "zsh-syntax-highlighting": _same("zsh-syntax-highlighting"),
    "terminal": _same("kitty"),
}

DEFAULT_CAPABILITIES: tuple[str, ...] = tuple(DEFAULT_TABLE)


def merge_table(
    base: PackageTable,
    overrides: Mapping[PlatformFamily, Mapping[str, str]],
) -> dict[str, dict[PlatformFamily, str]]:
    merged: dict[str, dict[PlatformFamily, str]] = {cap: dict(names) for cap, names in base.items()}
    for family, entries in overrides.items():
        for capability, name in entries.items():
            merged.setdefault(capability, {})[family] = name
    return merged


def resolve(
    family: PlatformFamily,
    capabilities: Sequence[str],
    table: PackageTable = DEFAULT_TABLE,
) -> list[str]:
    names: list[str] = []
    seen: set[str] = set()
    for capability in capabilities:
        name = table.get(capability, {}).get(family)
        if not name:
            raise UnmappedCapability(capability, family.value)
        if name in seen:
            continue
        seen.add(name)
        names.append(name)
    return names
