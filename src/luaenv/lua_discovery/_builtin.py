from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._candidates import CandidateEnumerator, Family, family_of, get_paths
from ._compat import find_executable
from ._discover import Discover
from ._errors import ConfigurationError
from ._preload import NO_PRELOAD, HostOS, PreloadAdvisor, PreloadDecision, detect_host
from ._probe import DEFAULT_TIMEOUT, ProbeRunner, ScratchDirectory
from ._select import Candidate, SelectionPolicy
from ._version import ZERO

if TYPE_CHECKING:
    from collections.abc import Generator, Iterable, Mapping
    from pathlib import Path

    from ._range import VersionRange

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    interpreter: Candidate
    preload: PreloadDecision = NO_PRELOAD

    @property
    def path(self) -> str:
        return self.interpreter.path

    @property
    def api(self) -> str:
        return self.interpreter.api.api_str


class Builtin(Discover):
    def __init__(  # noqa: PLR0913
        self,
        release_range: VersionRange | None = None,
        jit_range: VersionRange | None = None,
        api_range: VersionRange | None = None,
        *,
        interpreter: str | None = None,
        preload: bool = False,
        host: HostOS | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        env: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(env=env)
        self.release_range = release_range
        self.jit_range = jit_range
        self.api_range = api_range
        self.interpreter = interpreter
        self.preload = preload
        self.host = host
        self.timeout = timeout

    def run(self) -> Resolution:
        return resolve_interpreter(
            self.release_range,
            self.jit_range,
            self.api_range,
            interpreter=self.interpreter,
            preload=self.preload,
            host=self.host,
            timeout=self.timeout,
            env=self._env,
        )

    def __repr__(self) -> str:
        if self.interpreter is not None:
            return f"{self.__class__.__name__} discover of interpreter={self.interpreter!r}"
        return (
            f"{self.__class__.__name__} discover of lua={self.release_range}, luajit={self.jit_range}, "
            f"api={self.api_range}"
        )


def resolve_interpreter(  # noqa: PLR0913
    release_range: VersionRange | None = None,
    jit_range: VersionRange | None = None,
    api_range: VersionRange | None = None,
    *,
    interpreter: str | None = None,
    preload: bool = False,
    host: HostOS | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    env: Mapping[str, str] | None = None,
) -> Resolution:
    """Find the Lua interpreter that best satisfies the ranges, and whether it needs the threading library.

    :param release_range: acceptable releases, a LuaJIT release may satisfy either this or *jit_range*
    :param jit_range: acceptable LuaJIT releases, :attr:`VersionRange.EMPTY` excludes LuaJIT entirely
    :param api_range: acceptable language versions (``_VERSION``)
    :param interpreter: skip the search and use this interpreter (path or name on ``PATH``)
    :param preload: decide whether ``libpthread`` has to be preloaded
    :param host: the host operating system, detected when not given
    :param timeout: seconds a single probe may take
    :param env: environment to search ``PATH`` in and to run probes with
    :raises ConfigurationError: the override is not an executable
    :raises NoInterpreterFoundError: nothing on the search path satisfies the ranges
    :raises PreloadUnavailableError: the host requires a preload but no library could be preloaded
    """
    env = os.environ if env is None else env
    policy = SelectionPolicy(api_range, release_range, jit_range)
    with ScratchDirectory() as scratch:
        runner = ProbeRunner(scratch, env=env, timeout=timeout)
        if interpreter is not None:
            chosen = validate_override(interpreter, runner, env)
        else:
            LOGGER.info("find interpreter for %r", policy)
            enumerator = CandidateEnumerator(
                include_reference=not policy.release_range.excluded,
                include_jit=not policy.jit_range.excluded,
            )
            chosen = policy.select(probe_candidates(enumerator.iter_candidates(get_paths(env), env), policy, runner))
        LOGGER.info("resolved %s", chosen)
        decision = NO_PRELOAD
        if preload:
            decision = PreloadAdvisor(runner, detect_host() if host is None else host).advise(chosen.path)
            LOGGER.info("preload decision for %s: %s", chosen.path, decision.library or "none needed")
    return Resolution(chosen, decision)


def probe_candidates(
    proposed: Iterable[tuple[Path, Family]],
    policy: SelectionPolicy,
    runner: ProbeRunner,
) -> Generator[Candidate, None, None]:
    """Probe proposed executables lazily; the release is only asked for when the API already qualifies."""
    for exe, family in proposed:
        path = str(exe)
        LOGGER.debug("proposed %s %s", family.value, path)
        api = runner.probe_api(path)
        if not policy.accepts_api(api):
            yield Candidate(path, family, api)
            continue
        yield Candidate(path, family, api, runner.probe_release(path))


def validate_override(interpreter: str, runner: ProbeRunner, env: Mapping[str, str]) -> Candidate:
    exe = find_executable(interpreter, env)
    if exe is None:
        msg = f"interpreter {interpreter!r} is not an executable file"
        raise ConfigurationError(msg)
    family = family_of(os.path.basename(exe))
    if family is None:
        LOGGER.debug("%s does not carry a Lua interpreter name, assuming the reference family", exe)
        family = Family.REFERENCE
    api = runner.probe_api(exe)
    if api == ZERO:
        LOGGER.warning("could not determine the Lua version of %s, using it as-is", exe)
    return Candidate(exe, family, api, runner.probe_release(exe))


__all__ = [
    "Builtin",
    "Resolution",
    "probe_candidates",
    "resolve_interpreter",
    "validate_override",
]
