"""Decide whether the threading library has to be preloaded into the chosen interpreter.

Some hosts ship native thread support in a library the interpreter binary is not linked against, so Lua modules
that start threads only work when ``libpthread`` is injected through ``LD_PRELOAD``. Every possible library is
tried for real: the interpreter is started with the library preloaded and must print a sentinel, and nothing
else, for the library to be chosen.
"""

from __future__ import annotations

import glob
import logging
import os
import platform
import re
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from ._errors import PreloadUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ._probe import ProbeRunner

LOGGER = logging.getLogger(__name__)

PRELOAD_VARIABLE = "LD_PRELOAD"
SENTINEL = "luaenv-preload-ok"
SENTINEL_CHUNK = f"io.write('{SENTINEL}')"
LINUX_LIBRARY = "libpthread.so.0"
LIBRARY_GLOB = "libpthread.so*"
STRICT_BSD_NAMES = frozenset({"FreeBSD", "NetBSD", "OpenBSD"})
INTEGRATED_PREFIXES = ("Darwin", "CYGWIN", "MSYS", "Haiku")
VERSIONED_NAMES = frozenset({"SunOS"})
#: first SunOS release whose libc carries the threading support
INTEGRATED_SINCE = (5, 10)


class OsFamily(Enum):
    LINUX = "linux"
    STRICT_BSD = "strict-bsd"
    OTHER_BSD = "other-bsd"
    INTEGRATED = "integrated"
    VERSIONED = "versioned"
    UNKNOWN = "unknown"


class HostOS(NamedTuple):
    name: str
    release: str
    family: OsFamily


def classify(name: str) -> OsFamily:
    if name == "Linux":
        return OsFamily.LINUX
    if name in STRICT_BSD_NAMES:
        return OsFamily.STRICT_BSD
    if name.endswith("BSD") or name == "DragonFly":
        return OsFamily.OTHER_BSD
    if name.startswith(INTEGRATED_PREFIXES):
        return OsFamily.INTEGRATED
    if name in VERSIONED_NAMES:
        return OsFamily.VERSIONED
    return OsFamily.UNKNOWN


def detect_host(system: str | None = None, release: str | None = None) -> HostOS:
    name = platform.system() if system is None else system
    release = platform.release() if release is None else release
    host = HostOS(name, release, classify(name))
    LOGGER.debug("host %s %s classified as %s", host.name, host.release, host.family.value)
    return host


def release_tuple(release: str) -> tuple[int, ...]:
    """``"5.10"`` -> ``(5, 10)``; anything after the leading dotted number is ignored."""
    match = re.match(r"[0-9]+(?:\.[0-9]+)*", release.strip())
    return tuple(int(part) for part in match.group(0).split(".")) if match else ()


class PreloadDecision(NamedTuple):
    library: str | None = None

    @property
    def needed(self) -> bool:
        return self.library is not None


NO_PRELOAD = PreloadDecision()


def linux_library_dirs(machine: str | None = None) -> list[str]:
    machine = platform.machine() if machine is None else machine
    dirs = ["/lib64", "/usr/lib64"]
    if machine:
        dirs += [f"/lib/{machine}-linux-gnu", f"/usr/lib/{machine}-linux-gnu"]
    return [*dirs, "/lib", "/usr/lib"]


class PreloadAdvisor:
    def __init__(
        self,
        runner: ProbeRunner,
        host: HostOS,
        lib_dirs: Sequence[str] | None = None,
        bsd_lib_dirs: Sequence[str] = ("/usr/lib",),
    ) -> None:
        self.runner = runner
        self.host = host
        self.lib_dirs = linux_library_dirs() if lib_dirs is None else list(lib_dirs)
        self.bsd_lib_dirs = list(bsd_lib_dirs)

    def trial(self, interpreter: str, library: str) -> bool:
        output = self.runner.run([interpreter, "-e", SENTINEL_CHUNK], extra_env={PRELOAD_VARIABLE: library})
        if output == SENTINEL:
            LOGGER.debug("preloading %s works for %s", library, interpreter)
            return True
        LOGGER.debug("preloading %s fails for %s: %r", library, interpreter, output)
        return False

    def advise(self, interpreter: str) -> PreloadDecision:
        family = self.host.family
        if family is OsFamily.LINUX:
            return self._required(interpreter, [LINUX_LIBRARY, *self._libraries(self.lib_dirs)])
        if family is OsFamily.STRICT_BSD:
            return self._required(interpreter, self._libraries(self.bsd_lib_dirs))
        if family is OsFamily.OTHER_BSD:
            return self._best_effort(interpreter, self._libraries(self.bsd_lib_dirs))
        if family is OsFamily.INTEGRATED:
            return NO_PRELOAD
        if family is OsFamily.VERSIONED:
            if release_tuple(self.host.release) >= INTEGRATED_SINCE:
                return NO_PRELOAD
            return self._best_effort(interpreter, self._libraries(self.bsd_lib_dirs))
        if family is OsFamily.UNKNOWN:
            LOGGER.warning("do not know how to preload the threading library on %s, skipping it", self.host.name)
            return NO_PRELOAD
        msg = f"unhandled OS family {family!r}"
        raise AssertionError(msg)

    @staticmethod
    def _libraries(dirs: Iterable[str]) -> list[str]:
        found: list[str] = []
        for folder in dirs:
            for library in sorted(glob.glob(os.path.join(glob.escape(folder), LIBRARY_GLOB))):
                if library not in found:
                    found.append(library)
        return found

    def _find(self, interpreter: str, libraries: Iterable[str]) -> str | None:
        for library in libraries:
            if self.trial(interpreter, library):
                return library
        return None

    def _required(self, interpreter: str, libraries: Iterable[str]) -> PreloadDecision:
        library = self._find(interpreter, libraries)
        if library is None:
            msg = f"threading library not found: no {LIBRARY_GLOB} could be preloaded into {interpreter}"
            raise PreloadUnavailableError(msg)
        return PreloadDecision(library)

    def _best_effort(self, interpreter: str, libraries: Iterable[str]) -> PreloadDecision:
        library = self._find(interpreter, libraries)
        if library is None:
            LOGGER.warning("no threading library could be preloaded into %s on %s", interpreter, self.host.name)
            return NO_PRELOAD
        return PreloadDecision(library)


__all__ = [
    "NO_PRELOAD",
    "PRELOAD_VARIABLE",
    "SENTINEL",
    "HostOS",
    "OsFamily",
    "PreloadAdvisor",
    "PreloadDecision",
    "classify",
    "detect_host",
    "linux_library_dirs",
]
