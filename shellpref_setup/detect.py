from __future__ import annotations

import enum
import shlex
from pathlib import Path
from typing import Mapping

from shellpref_setup.errors import UnsupportedPlatform

OS_RELEASE = Path("/etc/os-release")


class PlatformFamily(enum.Enum):
    APT = "apt"
    PACMAN = "pacman"
    DNF = "dnf"
    UNKNOWN = "unknown"


# Checked in order; the first family with a matching substring wins.
FAMILY_PATTERNS: tuple[tuple[PlatformFamily, tuple[str, ...]], ...] = (
    (PlatformFamily.APT, ("debian", "ubuntu", "linuxmint", "lmde")),
    (PlatformFamily.PACMAN, ("arch", "manjaro", "endeavouros", "arco", "artix")),
    (PlatformFamily.DNF, ("fedora", "rhel", "centos", "rocky", "alma")),
)


def parse_os_release(text: str) -> dict[str, str]:
    """
    Parse os-release(5) content into a dict.

    Values may be bare, single- or double-quoted; comments and blank lines are skipped.
    """
    fields: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        fields[key.strip()] = " ".join(parts)
    return fields


def read_os_release(path: Path = OS_RELEASE) -> dict[str, str]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise UnsupportedPlatform(f"Cannot detect distro: {path} is not readable ({e.strerror or e})") from e
    return parse_os_release(text)


def identity(fields: Mapping[str, str]) -> str:
    # ID_LIKE names the parent distribution(s); plain ID is the fallback.
    return (fields.get("ID_LIKE") or fields.get("ID") or "").lower()


def classify(fields: Mapping[str, str]) -> PlatformFamily:
    ident = identity(fields)
    if not ident:
        return PlatformFamily.UNKNOWN
    for family, patterns in FAMILY_PATTERNS:
        if any(p in ident for p in patterns):
            return family
    return PlatformFamily.UNKNOWN


def detect(path: Path = OS_RELEASE) -> PlatformFamily:
    fields = read_os_release(path)
    family = classify(fields)
    if family is PlatformFamily.UNKNOWN:
        name = fields.get("ID") or "<missing ID>"
        raise UnsupportedPlatform(
            f"Unsupported distro family (ID={name}). Need a Debian, Arch or Fedora derivative."
        )
    return family
