from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass, replace

from .errors import GnuplotArgumentError


ENV_BIN = "GNUPIPE_GNUPLOT_BIN"
ENV_PATH = "GNUPIPE_GNUPLOT_PATH"
ENV_TERMINAL = "GNUPIPE_TERMINAL"
ENV_TMPDIR = "GNUPIPE_TMPDIR"
ENV_MAX_TMP_FILES = "GNUPIPE_MAX_TMP_FILES"


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def default_executable_name() -> str:
    return "gnuplot.exe" if _is_windows() else "gnuplot"


def default_install_dir() -> str:
    if _is_windows():
        return "C:/Program Files/gnuplot/bin"
    return "/usr/local/bin"


def default_terminal() -> str:
    if _is_windows():
        return "windows"
    if sys.platform == "darwin":
        return "aqua"
    return "x11"


def default_max_tmp_files() -> int:
    # The C runtime on Windows limits mktemp to 27 names per template.
    return 27 if _is_windows() else 64


@dataclass(frozen=True)
class GnupipeConfig:
    executable: str
    install_dir: str | None
    terminal: str
    tmp_dir: str
    max_tmp_files: int

    def __post_init__(self) -> None:
        if not self.executable:
            raise GnuplotArgumentError("executable name must not be empty.")
        if not self.terminal:
            raise GnuplotArgumentError("terminal must not be empty.")
        if self.max_tmp_files < 2:
            raise GnuplotArgumentError(
                f"max_tmp_files must be at least 2, got {self.max_tmp_files}"
            )

    def with_overrides(self, **changes: object) -> GnupipeConfig:
        return replace(self, **changes)


def _int_from_env(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise GnuplotArgumentError(f"{key} must be an integer, got {raw!r}") from None


_install_dir_override: str | None = None
_terminal_override: str | None = None


def set_install_dir_override(path: str | None) -> None:
    global _install_dir_override
    _install_dir_override = path


def set_terminal_override(terminal: str | None) -> None:
    global _terminal_override
    _terminal_override = terminal


def load_config() -> GnupipeConfig:
    """Build the configuration from platform defaults and GNUPIPE_* variables.

    Overrides set at runtime through ``set_gnuplot_path``/``set_terminal_std``
    take precedence over the environment.
    """
    install_dir = (
        _install_dir_override
        or os.environ.get(ENV_PATH, "").strip()
        or default_install_dir()
    )
    terminal = (
        _terminal_override
        or os.environ.get(ENV_TERMINAL, "").strip()
        or default_terminal()
    )
    return GnupipeConfig(
        executable=os.environ.get(ENV_BIN, "").strip() or default_executable_name(),
        install_dir=install_dir,
        terminal=terminal,
        tmp_dir=os.environ.get(ENV_TMPDIR, "").strip() or tempfile.gettempdir(),
        max_tmp_files=_int_from_env(ENV_MAX_TMP_FILES, default_max_tmp_files()),
    )
