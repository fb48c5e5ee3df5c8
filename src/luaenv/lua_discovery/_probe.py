"""Ask a candidate executable which Lua it is, without letting it touch anything."""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import tempfile
from contextlib import suppress
from typing import TYPE_CHECKING

from ._errors import ConfigurationError
from ._range import parse_version
from ._version import ZERO, Version

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
API_CHUNK = "print(_VERSION)"
API_PATTERN = re.compile(r"^Lua\s+(?P<version>\S*[0-9]\S*)\s*$", re.MULTILINE)
RELEASE_PATTERN = re.compile(r"^Lua(?:JIT)?\s+(?P<version>[0-9]+(?:\.[0-9]+){0,2})", re.MULTILINE)
DIGIT_DOT_RUN = re.compile(r"[0-9][0-9.]*")
# variables the stock interpreters consult while starting up
SEARCH_VARIABLES = ("LUA_INIT", "LUA_PATH", "LUA_CPATH")


def isolated_env(env: Mapping[str, str]) -> dict[str, str]:
    return {key: value for key, value in env.items() if not key.startswith(SEARCH_VARIABLES)}


class ScratchDirectory:
    """Non-writable temporary working directory, created on first use and removed by :meth:`close`."""

    def __init__(self) -> None:
        self._path: str | None = None

    @property
    def created(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> str:
        if self._path is None:
            self._path = tempfile.mkdtemp(prefix="luaenv-")
            os.chmod(self._path, 0o500)
            LOGGER.debug("created scratch directory %s", self._path)
        return self._path

    def close(self) -> None:
        if self._path is None:
            return
        path, self._path = self._path, None
        with suppress(OSError):
            os.chmod(path, 0o700)
        shutil.rmtree(path, ignore_errors=True)
        LOGGER.debug("removed scratch directory %s", path)

    def __enter__(self) -> ScratchDirectory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class ProbeRunner:
    """Runs candidates inside the scratch directory with a scrubbed environment and a bounded runtime."""

    def __init__(
        self,
        scratch: ScratchDirectory,
        env: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if timeout <= 0:
            msg = f"probe timeout must be positive, got {timeout!r}"
            raise ConfigurationError(msg)
        self.scratch = scratch
        self.env = isolated_env(os.environ if env is None else env)
        self.timeout = timeout

    def run(self, cmd: Sequence[str], extra_env: Mapping[str, str] | None = None) -> str | None:
        """:returns: combined stdout and stderr, or ``None`` when the command did not succeed"""
        env = {**self.env, **(extra_env or {})}
        LOGGER.debug("probe via cmd: %s", LogCmd(cmd, extra_env))
        try:
            process = subprocess.run(  # noqa: S603
                list(cmd),
                cwd=self.scratch.path,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                check=False,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.TimeoutExpired:
            LOGGER.debug("%s did not finish within %ss", cmd[0], self.timeout)
            return None
        except OSError as exception:
            LOGGER.debug("failed to execute %s: %r", cmd[0], exception)
            return None
        if process.returncode != 0:
            LOGGER.debug("%s exited with code %s: %s", cmd[0], process.returncode, process.stdout.strip())
            return None
        return process.stdout

    def probe_api(self, path: str) -> Version:
        output = self.run([path, "-e", API_CHUNK])
        match = API_PATTERN.search(output or "")
        if match is None:
            LOGGER.debug("no API version reported by %s", path)
            return ZERO
        run = max(DIGIT_DOT_RUN.findall(match["version"]), key=len).strip(".")
        try:
            version = parse_version(run)
        except ConfigurationError:
            LOGGER.debug("unusable API version %r reported by %s", run, path)
            return ZERO
        return Version(version.major, version.minor)

    def probe_release(self, path: str) -> Version:
        output = self.run([path, "-v"])
        match = RELEASE_PATTERN.search(output or "")
        if match is None:
            LOGGER.debug("no release version reported by %s", path)
            return ZERO
        try:
            return parse_version(match["version"])
        except ConfigurationError:
            LOGGER.debug("unusable release version %r reported by %s", match["version"], path)
            return ZERO


class LogCmd:
    def __init__(self, cmd: Sequence[str], env: Mapping[str, str] | None = None) -> None:
        self.cmd = cmd
        self.env = env

    def __repr__(self) -> str:
        cmd_repr = " ".join(repr(part) if " " in part else part for part in self.cmd)
        if self.env:
            cmd_repr = " ".join(f"{key}={value}" for key, value in self.env.items()) + f" {cmd_repr}"
        return cmd_repr


__all__ = [
    "DEFAULT_TIMEOUT",
    "LogCmd",
    "ProbeRunner",
    "ScratchDirectory",
    "isolated_env",
]
