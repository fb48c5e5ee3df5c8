"""Filesystem helpers shared by the enumeration and override code paths."""

from __future__ import annotations

import functools
import logging
import os
import shutil
import stat
import sys
import tempfile
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

IS_WIN = sys.platform == "win32"

LOGGER = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def fs_is_case_sensitive() -> bool:
    with tempfile.NamedTemporaryFile(prefix="LuA") as tmp_file:
        result = not os.path.exists(tmp_file.name.lower())
    LOGGER.debug("filesystem is %scase-sensitive", "" if result else "not ")
    return result


def fs_path_id(path: str) -> str:
    return path.casefold() if not fs_is_case_sensitive() else path


def is_executable(path: str | os.PathLike[str]) -> bool:
    """A regular file (or a link to one) the current user may execute."""
    try:
        mode = os.stat(path).st_mode
    except (OSError, ValueError):  # ValueError: embedded NUL byte
        return False
    return stat.S_ISREG(mode) and os.access(path, os.X_OK)


def find_executable(name: str, env: Mapping[str, str]) -> str | None:
    """Locate *name* the way a shell would: as a path when it has a separator, else on ``PATH``."""
    if os.sep in name or (os.altsep and os.altsep in name):
        exe = os.path.abspath(name)
        return exe if is_executable(exe) else None
    found = shutil.which(name, path=env.get("PATH", os.defpath))
    return os.path.abspath(found) if found else None


__all__ = [
    "IS_WIN",
    "find_executable",
    "fs_is_case_sensitive",
    "fs_path_id",
    "is_executable",
]
