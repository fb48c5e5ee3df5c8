from __future__ import annotations

import logging

import pytest

from luaenv.config import LuaOptions, config_file, pick_range, read_env, read_ini
from luaenv.lua_discovery import Builtin, ConfigurationError, VersionRange, encode


@pytest.fixture
def ini(tmp_path):
    path = tmp_path / "luaenv.ini"

    def _write(content):
        path.write_text(f"[luaenv]\n{content}", encoding="utf-8")
        return {"LUAENV_CONFIG_FILE": str(path)}

    return _write


def test_config_file_location(tmp_path, mocker):
    assert config_file({"LUAENV_CONFIG_FILE": str(tmp_path / "x.ini")}) == tmp_path / "x.ini"
    user_config = mocker.patch("luaenv.config.user_config_path", return_value=tmp_path)
    assert config_file({}) == tmp_path / "luaenv.ini"
    user_config.assert_called_once_with("luaenv", appauthor=False)


def test_missing_ini_is_empty(tmp_path):
    assert read_ini(tmp_path / "missing.ini") == {}


def test_broken_ini_is_configuration_error(tmp_path):
    path = tmp_path / "broken.ini"
    path.write_text("lua = 5.1\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="cannot read config file"):
        read_ini(path)


def test_read_env():
    env = {"LUAENV_LUA": "5.1", "LUAENV_NO_LUAJIT": "1", "LUAENV_UNRELATED": "x", "LUA": "5.4"}
    assert read_env(env) == {"lua": "5.1", "no_luajit": "1"}


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ((None, None, None), None),
        (("5.1", None, None), "5.1"),
        (("5.1", "5.2", None), "5.2"),
        (("5.1", "5.2", "5.3"), "5.3"),
        (("!5.1", "5.2", "5.3"), "!5.1"),
        (("5.1", "!5.2", "5.3"), "!5.2"),
        (("!5.1", "!5.2", "5.3"), "!5.2"),
    ],
)
def test_pick_range(values, expected):
    assert pick_range(*values) == expected


def test_defaults():
    options = LuaOptions.load(env={}, use_config_file=False)
    assert options == LuaOptions()
    assert options.release_range.minimum == encode(1, 0, 0)
    assert not options.jit_range.excluded
    assert options.depth is None


def test_sources_priority(ini):
    env = ini("lua = 5.1\npthread = yes\ntimeout = 3\n")
    env["LUAENV_LUA"] = "5.2"
    env["LUAENV_API"] = "5.1-5.4"
    options = LuaOptions.load({"lua": "5.3"}, env)
    assert options.lua == "5.3"
    assert options.api == "5.1-5.4"
    assert options.pthread is True
    assert options.timeout == 3.0


def test_locked_env_wins_over_cli(ini):
    env = ini("luajit = 2.0\n")
    env["LUAENV_LUA"] = "!5.1"
    options = LuaOptions.load({"lua": "5.4", "luajit": "2.1"}, env)
    assert options.lua == "!5.1"
    assert options.release_range.locked
    assert options.luajit == "2.1"


def test_locked_ini_wins(ini):
    options = LuaOptions.load({"lua": "5.4"}, ini("lua = !5.3\n"))
    assert options.lua == "!5.3"


def test_no_luajit_excludes_jit():
    options = LuaOptions.load({"no_luajit": True}, {}, use_config_file=False)
    assert options.jit_range == VersionRange.EMPTY


def test_locked_jit_range_survives_exclusion():
    options = LuaOptions.load({"no_luajit": True}, {"LUAENV_LUAJIT": "!2.1"}, use_config_file=False)
    assert options.jit_range.locked
    assert not options.jit_range.excluded


def test_jit_only_excludes_reference():
    options = LuaOptions.load({"jit_only": True}, {}, use_config_file=False)
    assert options.release_range == VersionRange.EMPTY


def test_conflicting_jit_flags():
    with pytest.raises(ConfigurationError, match="LuaJIT"):
        LuaOptions.load({"jit_only": True, "no_luajit": True}, {}, use_config_file=False)


@pytest.mark.parametrize(
    ("env", "match"),
    [
        ({"LUAENV_DEPTH": "deep"}, "search depth must be an integer"),
        ({"LUAENV_DEPTH": "-1"}, "must not be negative"),
        ({"LUAENV_TIMEOUT": "soon"}, "probe timeout must be a number"),
        ({"LUAENV_TIMEOUT": "0"}, "probe timeout must be positive"),
        ({"LUAENV_PTHREAD": "maybe"}, "pthread expects a boolean"),
    ],
)
def test_invalid_values(env, match):
    with pytest.raises(ConfigurationError, match=match):
        LuaOptions.load({}, env, use_config_file=False)


def test_depth_parsed():
    assert LuaOptions.load({}, {"LUAENV_DEPTH": "3"}, use_config_file=False).depth == 3


def test_malformed_range_surfaces_on_discover():
    options = LuaOptions.load({"lua": "5.x"}, {}, use_config_file=False)
    with pytest.raises(ConfigurationError):
        options.discover()


def test_discover_builds_builtin():
    options = LuaOptions.load({"lua": "5.1-5.3", "pthread": True, "interpreter": "lua5.3"}, {}, use_config_file=False)
    builtin = options.discover({"PATH": ""})
    assert isinstance(builtin, Builtin)
    assert builtin.release_range == options.release_range
    assert builtin.preload is True
    assert builtin.interpreter == "lua5.3"


def test_unknown_ini_key_warns(ini, caplog):
    with caplog.at_level(logging.WARNING):
        LuaOptions.load({}, ini("colour = blue\n"))
    assert "ignoring unknown option(s) colour" in caplog.text
