"""Fixed-width decimal encoding of ``major.minor.patch`` versions into a single comparable integer."""

from __future__ import annotations

from typing import NamedTuple

from ._errors import ConfigurationError

COMPONENT_MAX = 99


def encode(major: int, minor: int = 0, patch: int = 0) -> int:
    for part in (major, minor, patch):
        if not isinstance(part, int) or isinstance(part, bool) or not 0 <= part <= COMPONENT_MAX:
            msg = f"version component {part!r} is not an integer within 0..{COMPONENT_MAX}"
            raise ConfigurationError(msg)
    return major * 10000 + minor * 100 + patch


def decode(value: int) -> tuple[int, int, int]:
    return value // 10000, value // 100 % 100, value % 100


def encode_api(value: int) -> int:
    """Drop the patch component of an encoded version."""
    return value // 100


def decode_api(value: int) -> str:
    return f"{value // 100}.{value % 100}"


class Version(NamedTuple):
    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def decode(cls, value: int) -> Version:
        return cls(*decode(value))

    @property
    def encoded(self) -> int:
        return encode(self.major, self.minor, self.patch)

    @property
    def api(self) -> int:
        return encode_api(self.encoded)

    @property
    def api_str(self) -> str:
        return decode_api(self.api)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


#: reported for anything that could not be probed
ZERO = Version()

__all__ = [
    "COMPONENT_MAX",
    "ZERO",
    "Version",
    "decode",
    "decode_api",
    "encode",
    "encode_api",
]
