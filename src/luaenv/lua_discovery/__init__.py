"""Self-contained Lua interpreter resolution -- no imports from luaenv internals."""

from __future__ import annotations

from ._builtin import Builtin, Resolution, resolve_interpreter
from ._candidates import CandidateEnumerator, Family, family_of, get_paths, normalize_name
from ._discover import Discover
from ._errors import ConfigurationError, NoInterpreterFoundError, PreloadUnavailableError, ResolutionError
from ._preload import HostOS, OsFamily, PreloadAdvisor, PreloadDecision, detect_host
from ._probe import ProbeRunner, ScratchDirectory
from ._range import VersionRange, parse_api_range, parse_jit_range, parse_range, parse_release_range
from ._select import Candidate, SelectionPolicy
from ._version import ZERO, Version, decode, decode_api, encode, encode_api

__all__ = [
    "ZERO",
    "Builtin",
    "Candidate",
    "CandidateEnumerator",
    "ConfigurationError",
    "Discover",
    "Family",
    "HostOS",
    "NoInterpreterFoundError",
    "OsFamily",
    "PreloadAdvisor",
    "PreloadDecision",
    "PreloadUnavailableError",
    "ProbeRunner",
    "Resolution",
    "ResolutionError",
    "ScratchDirectory",
    "SelectionPolicy",
    "Version",
    "VersionRange",
    "decode",
    "decode_api",
    "detect_host",
    "encode",
    "encode_api",
    "family_of",
    "get_paths",
    "normalize_name",
    "parse_api_range",
    "parse_jit_range",
    "parse_range",
    "parse_release_range",
    "resolve_interpreter",
]
