from __future__ import annotations

import logging
import os
from pathlib import Path

from . import config as _config
from .config import GnupipeConfig, default_terminal, load_config
from .errors import (
    GnuplotArgumentError,
    GnuplotExecutableNotFoundError,
    GnuplotNotFoundError,
    GnuplotSetupError,
)


logger = logging.getLogger(__name__)

# Access bits, identical to os.F_OK/X_OK/W_OK/R_OK on POSIX.
MODE_EXISTS = 0
MODE_EXECUTE = 1
MODE_WRITE = 2
MODE_READ = 4


def file_exists(path: str | Path, mode: int = MODE_EXISTS) -> bool:
    """Return True when ``path`` passes the access check ``mode`` (bit mask 0..7)."""
    if isinstance(mode, bool) or not isinstance(mode, int) or mode < 0 or mode > 7:
        raise GnuplotArgumentError(f"mode has to be an integer between 0 and 7, got {mode!r}")
    return os.access(str(path), mode)


def file_available(path: str | Path) -> bool:
    if file_exists(path, MODE_EXISTS):
        if not file_exists(path, MODE_READ):
            raise GnuplotNotFoundError(f'No read permission for File "{path}"')
        return True
    raise GnuplotNotFoundError(f'File "{path}" does not exist')


def _is_runnable(candidate: Path) -> bool:
    if os.name == "nt":
        return file_exists(candidate, MODE_EXISTS)
    return candidate.is_file() and file_exists(candidate, MODE_EXECUTE)


def find_gnuplot(cfg: GnupipeConfig | None = None) -> Path:
    """Locate the gnuplot executable.

    The configured installation directory is tried first, then every entry of
    ``PATH`` in order.
    """
    cfg = cfg or load_config()
    if cfg.install_dir:
        candidate = Path(cfg.install_dir) / cfg.executable
        if _is_runnable(candidate):
            return candidate

    search_path = os.environ.get("PATH")
    if search_path is None:
        raise GnuplotExecutableNotFoundError("PATH is not set")
    for entry in search_path.split(os.pathsep):
        if not entry:
            continue
        candidate = Path(entry) / cfg.executable
        if _is_runnable(candidate):
            logger.debug("Found %s on PATH: %s", cfg.executable, candidate)
            return candidate

    raise GnuplotExecutableNotFoundError(
        f'Can\'t find {cfg.executable} neither in PATH nor in "{cfg.install_dir or ""}"'
    )


def set_gnuplot_path(path: str | Path) -> bool:
    """Use ``path`` as the gnuplot installation directory for new sessions.

    Returns False and drops any previous override when ``path`` does not
    contain a runnable gnuplot.
    """
    cfg = load_config()
    if _is_runnable(Path(path) / cfg.executable):
        _config.set_install_dir_override(str(path))
        return True
    _config.set_install_dir_override(None)
    return False


def set_terminal_std(terminal: str) -> None:
    """Set the terminal restored by ``Gnuplot.showonscreen``."""
    if not terminal:
        raise GnuplotArgumentError("terminal must not be empty.")
    check_display(terminal)
    _config.set_terminal_override(terminal)


def check_display(terminal: str | None = None) -> None:
    terminal = terminal or default_terminal()
    if os.name == "nt":
        return
    if "x11" in terminal and not os.environ.get("DISPLAY"):
        raise GnuplotSetupError("Can't find DISPLAY variable")
