from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING

import pytest

from luaenv.lua_discovery._preload import SENTINEL

if TYPE_CHECKING:
    from pathlib import Path

FAKE_LUA = """#!/bin/sh
echo "$1|$(pwd)|${LUA_INIT-unset}|$0" >> '@LOG@'
case "$1" in
  -v) @RELEASE@ ;;
  -e)
    case "$2" in
      *_VERSION*) @API@ ;;
      *) printf '%s' '@SENTINEL@' ;;
    esac ;;
  *) exit 1 ;;
esac
"""
LUA_RELEASE = "Lua {}  Copyright (C) 1994-2020 Lua.org, PUC-Rio"
LUAJIT_RELEASE = "LuaJIT {} -- Copyright (C) 2005-2017 Mike Pall. http://luajit.org/"


class FakeLua:
    """Writes shell scripts answering the version probes the way a Lua interpreter does."""

    def __init__(self, log: Path) -> None:
        self.log = log

    def __call__(  # noqa: PLR0913
        self,
        directory: Path,
        name: str,
        api: str | None = "Lua 5.3",
        release: str | None = None,
        *,
        stderr: bool = False,
        executable: bool = True,
    ) -> Path:
        if release is None:
            release = LUA_RELEASE.format(f"{api.split()[-1]}.6" if api else "5.3.6")
        release_cmd = "exit 1" if release == "" else f"echo '{release}'{' >&2' if stderr else ''}"
        api_cmd = "exit 1" if api is None else f"echo '{api}'"
        script = (
            FAKE_LUA.replace("@LOG@", str(self.log))
            .replace("@RELEASE@", release_cmd)
            .replace("@API@", api_cmd)
            .replace("@SENTINEL@", SENTINEL)
        )
        directory.mkdir(parents=True, exist_ok=True)
        exe = directory / name
        exe.write_text(script, encoding="utf-8")
        mode = stat.S_IRUSR | stat.S_IWUSR
        if executable:
            mode |= stat.S_IXUSR
        exe.chmod(mode)
        return exe

    def calls(self) -> list[list[str]]:
        if not self.log.exists():
            return []
        return [line.split("|") for line in self.log.read_text(encoding="utf-8").splitlines()]


@pytest.fixture
def fake_lua(tmp_path: Path) -> FakeLua:
    return FakeLua(tmp_path / "probes.log")


@pytest.fixture
def search_env():
    def _env(*dirs: Path, **extra: str) -> dict[str, str]:
        return {"PATH": os.pathsep.join(str(folder) for folder in dirs), **extra}

    return _env
