"""gnupipe package."""

from .errors import (
    GnuplotArgumentError,
    GnuplotError,
    GnuplotExecutableNotFoundError,
    GnuplotNotFoundError,
    GnuplotSetupError,
    TempFileLimitError,
)
from .config import GnupipeConfig, load_config
from .paths import file_available, file_exists, find_gnuplot, set_gnuplot_path, set_terminal_std
from .session import Gnuplot

__all__ = [
    "Gnuplot",
    "GnupipeConfig",
    "GnuplotArgumentError",
    "GnuplotError",
    "GnuplotExecutableNotFoundError",
    "GnuplotNotFoundError",
    "GnuplotSetupError",
    "TempFileLimitError",
    "file_available",
    "file_exists",
    "find_gnuplot",
    "load_config",
    "set_gnuplot_path",
    "set_terminal_std",
]

__version__ = "0.1.0"
