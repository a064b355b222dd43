from __future__ import annotations

from pathlib import Path

import pytest

from shellpref_setup.detect import PlatformFamily, classify, detect, parse_os_release, read_os_release
from shellpref_setup.errors import UnsupportedPlatform


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "os-release"
    p.write_text(text)
    return p


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({"ID": "ubuntu"}, PlatformFamily.APT),
        ({"ID": "debian"}, PlatformFamily.APT),
        ({"ID": "linuxmint", "ID_LIKE": "ubuntu debian"}, PlatformFamily.APT),
        ({"ID": "arch"}, PlatformFamily.PACMAN),
        ({"ID": "endeavouros", "ID_LIKE": "arch"}, PlatformFamily.PACMAN),
        ({"ID": "manjaro"}, PlatformFamily.PACMAN),
        ({"ID": "fedora"}, PlatformFamily.DNF),
        ({"ID": "rocky", "ID_LIKE": "rhel centos fedora"}, PlatformFamily.DNF),
        ({"ID": "almalinux"}, PlatformFamily.DNF),
        ({"ID": "plan9"}, PlatformFamily.UNKNOWN),
        ({}, PlatformFamily.UNKNOWN),
    ],
)
def test_classify(fields, expected):
    assert classify(fields) is expected


def test_id_like_takes_precedence_over_id():
    # pop!_os style: own ID, Debian parentage
    assert classify({"ID": "pop", "ID_LIKE": "ubuntu debian"}) is PlatformFamily.APT
    # ID_LIKE wins even if ID alone would match another family
    assert classify({"ID": "archlike", "ID_LIKE": "fedora"}) is PlatformFamily.DNF


def test_empty_id_like_falls_back_to_id():
    assert classify({"ID": "arch", "ID_LIKE": ""}) is PlatformFamily.PACMAN


def test_first_family_wins_on_overlap():
    assert classify({"ID_LIKE": "debian arch"}) is PlatformFamily.APT


def test_parse_os_release_handles_quotes_and_comments():
    fields = parse_os_release(
        '# comment\n\nNAME="Fedora Linux"\nID=fedora\nVERSION_ID=40\nID_LIKE=\'rhel centos\'\nbroken line\n'
    )
    assert fields["NAME"] == "Fedora Linux"
    assert fields["ID"] == "fedora"
    assert fields["ID_LIKE"] == "rhel centos"
    assert "broken line" not in fields


def test_detect_reads_descriptor(tmp_path):
    assert detect(_write(tmp_path, "ID=ubuntu\n")) is PlatformFamily.APT
    assert detect(_write(tmp_path, "ID=arch\n")) is PlatformFamily.PACMAN


def test_detect_unknown_id_is_unsupported(tmp_path):
    with pytest.raises(UnsupportedPlatform, match="plan9"):
        detect(_write(tmp_path, "ID=plan9\n"))


def test_missing_descriptor_is_unsupported(tmp_path):
    with pytest.raises(UnsupportedPlatform, match="not readable"):
        read_os_release(tmp_path / "missing")
