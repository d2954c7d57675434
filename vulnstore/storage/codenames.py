"""
Major version -> release codename tables.

Debian and Ubuntu identify releases by codename inside their feeds, while
callers ask by version number. The tables are read-only views; build a new
mapping and inject it into CveFilter to support additional releases.
"""
from types import MappingProxyType

DEBIAN_CODENAMES = MappingProxyType({
    "7": "wheezy",
    "8": "jessie",
    "9": "stretch",
    "10": "buster",
    "11": "bullseye",
    "12": "bookworm",
    "13": "trixie",
})

UBUNTU_CODENAMES = MappingProxyType({
    "12.04": "precise",
    "14.04": "trusty",
    "16.04": "xenial",
    "18.04": "bionic",
    "19.10": "eoan",
    "20.04": "focal",
    "20.10": "groovy",
    "21.04": "hirsute",
    "21.10": "impish",
    "22.04": "jammy",
    "22.10": "kinetic",
    "23.04": "lunar",
    "23.10": "mantic",
    "24.04": "noble",
    "24.10": "oracular",
})


def normalize_ubuntu_major(major: str) -> str:
    """Accept both "2004" and "20.04" spellings."""
    if "." not in major and len(major) == 4 and major.isdigit():
        return f"{major[:2]}.{major[2:]}"
    return major
