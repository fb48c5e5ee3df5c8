from __future__ import annotations

import logging
import os
import sys
from argparse import ArgumentParser, Namespace
from typing import TYPE_CHECKING

from luaenv import __version__
from luaenv.config import LuaOptions
from luaenv.lua_discovery import ConfigurationError, NoInterpreterFoundError, PreloadUnavailableError, ResolutionError
from luaenv.lua_discovery._preload import PRELOAD_VARIABLE
from luaenv.report import DEFAULT_VERBOSITY, setup_report

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

LOGGER = logging.getLogger(__name__)

EXIT_CODES = (
    (ConfigurationError, 2),
    (NoInterpreterFoundError, 3),
    (PreloadUnavailableError, 4),
)
OPTION_FLAGS = ("lua", "luajit", "api", "no_luajit", "jit_only", "interpreter", "pthread", "depth", "timeout")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="luaenv",
        description="Find the Lua interpreter on PATH that best satisfies the requested versions.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="count", default=0, help="increase verbosity")
    verbosity.add_argument("-q", "--quiet", action="count", default=0, help="decrease verbosity")
    parser.add_argument("--lua", metavar="RANGE", help="acceptable releases, e.g. 5.1-5.4, 5.3- or !5.4")
    jit = parser.add_mutually_exclusive_group()
    jit.add_argument("--luajit", metavar="RANGE", help="acceptable LuaJIT releases, e.g. 2.0-")
    jit.add_argument("--no-luajit", action="store_true", default=None, help="never pick LuaJIT")
    parser.add_argument("--jit-only", action="store_true", default=None, help="accept nothing but LuaJIT")
    parser.add_argument("--api", metavar="RANGE", help="acceptable language versions (_VERSION), e.g. 5.1-5.3")
    parser.add_argument("--interpreter", metavar="PATH", help="skip the search and use this interpreter")
    parser.add_argument(
        "--pthread",
        action="store_true",
        default=None,
        help=f"work out whether libpthread must be added to {PRELOAD_VARIABLE}",
    )
    parser.add_argument("--depth", metavar="N", help="recursion limit for the launcher's directory scans")
    parser.add_argument("--timeout", metavar="SECONDS", help="how long a single interpreter probe may take")
    return parser


def run(args: Sequence[str] | None = None, env: Mapping[str, str] | None = None) -> int:
    env = os.environ if env is None else env
    parsed: Namespace = build_parser().parse_args(args)
    setup_report(DEFAULT_VERBOSITY + parsed.verbose - parsed.quiet)
    try:
        options = LuaOptions.load({key: getattr(parsed, key) for key in OPTION_FLAGS}, env)
        resolution = options.discover(env).resolution
    except ResolutionError as exception:
        LOGGER.error("%s", exception)  # noqa: TRY400
        return next((code for kind, code in EXIT_CODES if isinstance(exception, kind)), 1)
    print(f"path={resolution.path}")  # noqa: T201
    print(f"api={resolution.api}")  # noqa: T201
    if resolution.preload.needed:
        print(f"preload={resolution.preload.library}")  # noqa: T201
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
