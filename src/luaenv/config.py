"""Options of a resolution, gathered from the ini file, the environment and the command line.

Sources in increasing priority: the ``[luaenv]`` section of the ini file, ``LUAENV_*`` environment variables,
command line flags. A range prefixed with ``!`` is locked: it wins over every unlocked value whatever its
source, and between two locked values the higher priority source wins.
"""

from __future__ import annotations

import logging
import os
from configparser import ConfigParser, Error
from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from platformdirs import user_config_path

from luaenv.lua_discovery import Builtin, ConfigurationError, VersionRange
from luaenv.lua_discovery._probe import DEFAULT_TIMEOUT
from luaenv.lua_discovery._range import parse_api_range, parse_jit_range, parse_release_range, split_lock

if TYPE_CHECKING:
    from collections.abc import Mapping

LOGGER = logging.getLogger(__name__)

APP_NAME = "luaenv"
SECTION = APP_NAME
ENV_PREFIX = "LUAENV_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"
RANGE_KEYS = ("lua", "luajit", "api")
BOOLEAN_STATES = {"1": True, "yes": True, "true": True, "on": True, "0": False, "no": False, "false": False, "off": False}


def config_file(env: Mapping[str, str]) -> Path:
    if value := env.get(CONFIG_FILE_ENV):
        return Path(value).expanduser()
    return user_config_path(APP_NAME, appauthor=False) / f"{APP_NAME}.ini"


def read_ini(path: Path) -> dict[str, str]:
    parser = ConfigParser()
    try:
        with path.open(encoding="utf-8") as file_handler:
            parser.read_file(file_handler)
    except FileNotFoundError:
        LOGGER.debug("no config file at %s", path)
        return {}
    except (OSError, Error) as exception:
        msg = f"cannot read config file {path}: {exception}"
        raise ConfigurationError(msg) from exception
    if not parser.has_section(SECTION):
        return {}
    LOGGER.debug("loaded config file %s", path)
    return {key.replace("-", "_"): value for key, value in parser.items(SECTION)}


def read_env(env: Mapping[str, str]) -> dict[str, str]:
    values = {}
    for field in fields(LuaOptions):
        if (value := env.get(f"{ENV_PREFIX}{field.name.upper()}")) is not None:
            values[field.name] = value
    return values


def pick_range(*values: str | None) -> str | None:
    """Choose between range values given lowest priority first, honouring the lock marker."""
    given = [value for value in values if value is not None]
    locked = [value for value in given if split_lock(value)[1]]
    if locked:
        return locked[-1]
    return given[-1] if given else None


def to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    try:
        return BOOLEAN_STATES[str(value).strip().lower()]
    except KeyError:
        msg = f"{key} expects a boolean, got {value!r}"
        raise ConfigurationError(msg) from None


def to_depth(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        depth = int(value)
    except (TypeError, ValueError):
        msg = f"search depth must be an integer, got {value!r}"
        raise ConfigurationError(msg) from None
    if depth < 0:
        msg = f"search depth must not be negative, got {depth}"
        raise ConfigurationError(msg)
    return depth


def to_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        msg = f"probe timeout must be a number, got {value!r}"
        raise ConfigurationError(msg) from None
    if timeout <= 0:
        msg = f"probe timeout must be positive, got {timeout}"
        raise ConfigurationError(msg)
    return timeout


@dataclass
class LuaOptions:
    lua: str | None = None
    luajit: str | None = None
    api: str | None = None
    no_luajit: bool = False
    jit_only: bool = False
    interpreter: str | None = None
    pthread: bool = False
    #: recursion limit for the launcher's auxiliary directory scans, not used by the resolution itself
    depth: int | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def load(
        cls,
        cli: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
        *,
        use_config_file: bool = True,
    ) -> LuaOptions:
        env = os.environ if env is None else env
        sources = [
            read_ini(config_file(env)) if use_config_file else {},
            read_env(env),
            {key: value for key, value in (cli or {}).items() if value is not None},
        ]
        merged: dict[str, Any] = {}
        for source in sources:
            merged.update(source)
        for key in RANGE_KEYS:
            merged[key] = pick_range(*(source.get(key) for source in sources))
        unknown = sorted(set(merged) - {field.name for field in fields(cls)})
        if unknown:
            LOGGER.warning("ignoring unknown option(s) %s", ", ".join(unknown))
        options = cls(
            lua=merged.get("lua"),
            luajit=merged.get("luajit"),
            api=merged.get("api"),
            no_luajit=to_bool("no_luajit", merged.get("no_luajit", False)),
            jit_only=to_bool("jit_only", merged.get("jit_only", False)),
            interpreter=merged.get("interpreter") or None,
            pthread=to_bool("pthread", merged.get("pthread", False)),
            depth=to_depth(merged.get("depth")),
            timeout=to_timeout(merged.get("timeout", DEFAULT_TIMEOUT)),
        )
        if options.no_luajit and options.jit_only:
            msg = "cannot both exclude LuaJIT and accept nothing but LuaJIT"
            raise ConfigurationError(msg)
        LOGGER.debug("options %r", options)
        return options

    @property
    def release_range(self) -> VersionRange:
        parsed = parse_release_range(self.lua)
        if self.jit_only and not parsed.locked:
            return VersionRange.EMPTY
        return parsed

    @property
    def jit_range(self) -> VersionRange:
        parsed = parse_jit_range(self.luajit)
        if self.no_luajit and not parsed.locked:
            return VersionRange.EMPTY
        return parsed

    @property
    def api_range(self) -> VersionRange:
        return parse_api_range(self.api)

    def discover(self, env: Mapping[str, str] | None = None) -> Builtin:
        """Validate every range up front, so a malformed one fails before any filesystem walk."""
        return Builtin(
            self.release_range,
            self.jit_range,
            self.api_range,
            interpreter=self.interpreter,
            preload=self.pthread,
            timeout=self.timeout,
            env=env,
        )


__all__ = [
    "LuaOptions",
    "config_file",
    "pick_range",
    "read_env",
    "read_ini",
]
