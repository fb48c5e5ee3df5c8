"""A version range is an inclusive interval of acceptable interpreter versions."""

from __future__ import annotations

import re
from typing import ClassVar

from ._errors import ConfigurationError
from ._version import Version, encode, encode_api

LOCK_MARKER = "!"
SEPARATOR = re.compile(r"[-,:]")
TOKEN_PATTERN = re.compile(
    r"""
    ^
    (?P<major>[0-9]+)               # major
    (?:\.(?P<minor>[0-9]+))?        # minor
    (?:\.(?P<patch>[0-9]+))?        # patch
    $
    """,
    re.VERBOSE,
)

RELEASE_MIN = Version(1, 0, 0)
RELEASE_MAX = Version(99, 99, 99)
API_MIN = Version(1, 0, 0)
API_MAX = Version(99, 99, 99)
JIT_MIN = Version(1, 0, 0)
JIT_MAX = Version(99, 99, 99)


def parse_version(token: str, default: Version = Version()) -> Version:
    """Parse ``major[.minor[.patch]]``, taking every missing component from *default*."""
    match = TOKEN_PATTERN.match(token)
    if match is None:
        msg = f"invalid version {token!r}, expected major[.minor[.patch]]"
        raise ConfigurationError(msg)
    parts = [default[at] if value is None else int(value) for at, value in enumerate(match.groups())]
    encode(*parts)
    return Version(*parts)


class VersionRange:
    """Inclusive ``[minimum, maximum]`` interval over encoded versions."""

    EMPTY: ClassVar[VersionRange]

    def __init__(self, minimum: int, maximum: int, *, locked: bool = False) -> None:
        self.minimum = minimum
        self.maximum = maximum
        self.locked = locked

    @classmethod
    def from_versions(cls, minimum: Version, maximum: Version, *, locked: bool = False) -> VersionRange:
        return cls(minimum.encoded, maximum.encoded, locked=locked)

    @property
    def excluded(self) -> bool:
        """``True`` when nothing at all can satisfy the range."""
        return self.maximum <= 0

    def contains(self, version: Version) -> bool:
        return self.minimum <= version.encoded <= self.maximum

    def contains_api(self, api: Version) -> bool:
        return encode_api(self.minimum) <= api.api <= encode_api(self.maximum)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionRange):
            return NotImplemented
        return (self.minimum, self.maximum, self.locked) == (other.minimum, other.maximum, other.locked)

    def __hash__(self) -> int:
        return hash((self.minimum, self.maximum, self.locked))

    def __str__(self) -> str:
        low, high = Version.decode(self.minimum), Version.decode(self.maximum)
        return f"{LOCK_MARKER if self.locked else ''}{low}-{high}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


VersionRange.EMPTY = VersionRange(0, 0)


def split_lock(text: str) -> tuple[str, bool]:
    """Strip the lock marker, reporting whether it was present."""
    text = text.strip()
    if text.startswith(LOCK_MARKER):
        return text[len(LOCK_MARKER) :].strip(), True
    return text, False


def parse_range(text: str, default_min: Version = RELEASE_MIN, default_max: Version = RELEASE_MAX) -> VersionRange:
    """Parse ``[MIN][-[MAX]]`` (``,`` and ``:`` are accepted as separators too) or a bare version."""
    body, locked = split_lock(text)
    parts = SEPARATOR.split(body, maxsplit=1)
    left, right = (parts[0], parts[0]) if len(parts) == 1 else parts
    left, right = left.strip(), right.strip()
    minimum = parse_version(left, default_min) if left else default_min
    maximum = parse_version(right, default_max) if right else default_max
    if maximum.encoded > 0 and minimum.encoded > maximum.encoded:
        msg = f"invalid version range {text!r}, {minimum} is above {maximum}"
        raise ConfigurationError(msg)
    return VersionRange.from_versions(minimum, maximum, locked=locked)


def parse_release_range(text: str | None) -> VersionRange:
    return parse_range(text or "", RELEASE_MIN, RELEASE_MAX)


def parse_api_range(text: str | None) -> VersionRange:
    return parse_range(text or "", API_MIN, API_MAX)


def parse_jit_range(text: str | None) -> VersionRange:
    return parse_range(text or "", JIT_MIN, JIT_MAX)


__all__ = [
    "API_MAX",
    "API_MIN",
    "JIT_MAX",
    "JIT_MIN",
    "LOCK_MARKER",
    "RELEASE_MAX",
    "RELEASE_MIN",
    "VersionRange",
    "parse_api_range",
    "parse_jit_range",
    "parse_range",
    "parse_release_range",
    "parse_version",
    "split_lock",
]
