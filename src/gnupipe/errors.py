from __future__ import annotations


class GnuplotError(RuntimeError):
    """Base class for every error raised by gnupipe."""


class GnuplotArgumentError(GnuplotError, ValueError):
    """Empty or mismatched sample collections, bad columns or mode values."""


class GnuplotNotFoundError(GnuplotError, FileNotFoundError):
    """Missing executable, or a data file that is missing or unreadable."""


class GnuplotSetupError(GnuplotError):
    """The gnuplot process could not be started or its display is unusable."""


class TempFileLimitError(GnuplotError):
    """Too many temporary data files are alive in this process."""


class GnuplotExecutableNotFoundError(GnuplotNotFoundError, GnuplotSetupError):
    """gnuplot is neither in the configured install directory nor on PATH."""
