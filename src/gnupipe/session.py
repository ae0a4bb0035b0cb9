from __future__ import annotations

import logging
import re
import subprocess
import weakref
from typing import Any

from . import commands
from .config import GnupipeConfig, load_config
from .errors import GnuplotArgumentError, GnuplotError, GnuplotSetupError
from .paths import check_display, file_available, find_gnuplot
from .tmpfiles import TempFileRegistry


logger = logging.getLogger(__name__)

DEFAULT_STYLE = "points"

# gnuplot accepts a range glued to the keyword, as in "plot[0:1] sin(x)".
_PLOT_KEYWORD = re.compile(r"\s*(replot|splot|plot)\b")


def _release(process: subprocess.Popen[str], tmpfiles: TempFileRegistry) -> None:
    """Tear down a session that was garbage collected without ``close()``."""
    try:
        if process.stdin is not None:
            process.stdin.close()
        process.wait(timeout=5)
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("Problem closing communication to gnuplot: %s", exc)
    while len(tmpfiles):
        try:
            tmpfiles.remove_all()
        except GnuplotError as exc:
            logger.warning("%s", exc)
        except OSError as exc:
            logger.warning("Cannot remove temporary files: %s", exc)
            break


class Gnuplot:
    """One gnuplot process fed through its standard input.

    Plot calls issue ``plot``/``splot`` for the first curve of a plot and
    ``replot`` for each further curve of the same dimensionality. Numeric data
    is handed over through temporary files that the session removes on
    ``close()`` unless asked to keep them.

    >>> with Gnuplot("lines") as g:           # doctest: +SKIP
    ...     g.set_title("squares").plot_x([1, 4, 9, 16], "n^2")
    """

    def __init__(self, style: str = DEFAULT_STYLE, *, config: GnupipeConfig | None = None) -> None:
        self.config = config or load_config()
        self._process: subprocess.Popen[str] | None = None
        self._valid = False
        self._two_dim = False
        self._nplots = 0
        self._pstyle = DEFAULT_STYLE
        self._smooth = ""
        self._tmpfiles = TempFileRegistry(self.config.tmp_dir, self.config.max_tmp_files)
        self._finalizer: weakref.finalize | None = None
        self._init()
        self.set_style(style)

    @classmethod
    def from_x(
        cls,
        x: Any,
        title: str = "",
        style: str = DEFAULT_STYLE,
        labelx: str = "x",
        labely: str = "y",
        *,
        config: GnupipeConfig | None = None,
    ) -> Gnuplot:
        session = cls(style, config=config)
        session.set_xlabel(labelx).set_ylabel(labely)
        return session.plot_x(x, title)

    @classmethod
    def from_xy(
        cls,
        x: Any,
        y: Any,
        title: str = "",
        style: str = DEFAULT_STYLE,
        labelx: str = "x",
        labely: str = "y",
        *,
        config: GnupipeConfig | None = None,
    ) -> Gnuplot:
        session = cls(style, config=config)
        session.set_xlabel(labelx).set_ylabel(labely)
        return session.plot_xy(x, y, title)

    @classmethod
    def from_xyz(
        cls,
        x: Any,
        y: Any,
        z: Any,
        title: str = "",
        style: str = DEFAULT_STYLE,
        labelx: str = "x",
        labely: str = "y",
        labelz: str = "z",
        *,
        config: GnupipeConfig | None = None,
    ) -> Gnuplot:
        session = cls(style, config=config)
        session.set_xlabel(labelx).set_ylabel(labely).set_zlabel(labelz)
        return session.plot_xyz(x, y, z, title)

    def _init(self) -> None:
        check_display(self.config.terminal)
        executable = find_gnuplot(self.config)
        try:
            self._process = subprocess.Popen(
                [str(executable)],
                stdin=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except OSError as exc:
            raise GnuplotSetupError(f"Couldn't open connection to gnuplot: {exc}") from exc
        self._finalizer = weakref.finalize(self, _release, self._process, self._tmpfiles)
        logger.info("Started gnuplot session: %s", executable)
        self._nplots = 0
        self._valid = True
        self._smooth = ""
        try:
            self.showonscreen()
        except GnuplotError:
            self.close()
            raise

    # -- state ------------------------------------------------------------

    @property
    def valid(self) -> bool:
        return self._valid

    def is_valid(self) -> bool:
        return self._valid

    @property
    def nplots(self) -> int:
        return self._nplots

    @property
    def two_dim(self) -> bool:
        return self._two_dim

    @property
    def pstyle(self) -> str:
        return self._pstyle

    @property
    def smooth(self) -> str:
        return self._smooth

    @property
    def tmpfiles(self) -> tuple[str, ...]:
        return self._tmpfiles.names

    def __repr__(self) -> str:
        mode = "2d" if self._two_dim else "3d"
        return (
            f"Gnuplot(valid={self._valid}, nplots={self._nplots}, mode={mode}, "
            f"style={self._pstyle!r}, smooth={self._smooth!r})"
        )

    # -- raw commands -----------------------------------------------------

    def cmd(self, cmdstr: str) -> Gnuplot:
        """Send one command line; a closed or invalid session ignores it."""
        if not self._valid or self._process is None or self._process.stdin is None:
            return self
        logger.debug("gnuplot> %s", cmdstr)
        try:
            self._process.stdin.write(cmdstr + "\n")
            self._process.stdin.flush()
        except (BrokenPipeError, ValueError) as exc:
            self._valid = False
            raise GnuplotSetupError(f"Connection to gnuplot was lost: {exc}") from exc

        # Only the leading keyword counts; paths and titles may contain "plot".
        match = _PLOT_KEYWORD.match(cmdstr)
        keyword = match.group(1) if match else ""
        if keyword == "replot":
            return self
        if keyword == "splot":
            self._two_dim = False
            self._nplots += 1
        elif keyword == "plot":
            self._two_dim = True
            self._nplots += 1
        return self

    def __lshift__(self, cmdstr: str) -> Gnuplot:
        return self.cmd(cmdstr)

    # -- output -----------------------------------------------------------

    def showonscreen(self) -> Gnuplot:
        self.cmd("set output")
        return self.cmd(f"set terminal {self.config.terminal}")

    def savetofigure(self, filename: str, terminal: str = "ps") -> Gnuplot:
        self.cmd(f"set terminal {terminal}")
        return self.cmd(f"set output {commands.quote(filename)}")

    # -- style ------------------------------------------------------------

    def set_style(self, stylestr: str = DEFAULT_STYLE) -> Gnuplot:
        """Line style for later plots: lines, points, linespoints, impulses, dots,
        steps, fsteps, histeps, boxes, histograms, filledcurves.
        """
        if stylestr:
            self._pstyle = stylestr
        return self

    def set_smooth(self, stylestr: str = "csplines") -> Gnuplot:
        """Interpolate data in ``plot_x``/``plot_xy`` and their file variants.

        Accepts csplines, acsplines, bezier, sbezier, unique and frequency;
        anything else turns smoothing off. While set, the line style is not
        used for those plots.
        """
        self._smooth = commands.normalize_smooth(stylestr)
        return self

    def unset_smooth(self) -> Gnuplot:
        self._smooth = ""
        return self

    def set_pointsize(self, pointsize: float = 1.0) -> Gnuplot:
        return self.cmd(f"set pointsize {commands.format_finite(pointsize, 'pointsize')}")

    def set_grid(self) -> Gnuplot:
        return self.cmd("set grid")

    def unset_grid(self) -> Gnuplot:
        return self.cmd("unset grid")

    def set_multiplot(self) -> Gnuplot:
        return self.cmd("set multiplot")

    def unset_multiplot(self) -> Gnuplot:
        return self.cmd("unset multiplot")

    def set_samples(self, samples: int = 100) -> Gnuplot:
        return self.cmd(f"set samples {commands.check_column(samples, 'samples')}")

    def set_isosamples(self, isolines: int = 10) -> Gnuplot:
        return self.cmd(f"set isosamples {commands.check_column(isolines, 'isolines')}")

    def set_hidden3d(self) -> Gnuplot:
        return self.cmd("set hidden3d")

    def unset_hidden3d(self) -> Gnuplot:
        return self.cmd("unset hidden3d")

    def set_contour(self, position: str = "base") -> Gnuplot:
        return self.cmd(f"set contour {commands.normalize_contour(position)}")

    def unset_contour(self) -> Gnuplot:
        return self.cmd("unset contour")

    def set_surface(self) -> Gnuplot:
        return self.cmd("set surface")

    def unset_surface(self) -> Gnuplot:
        return self.cmd("unset surface")

    def set_legend(self, position: str = "default") -> Gnuplot:
        return self.cmd(f"set key {position}")

    def unset_legend(self) -> Gnuplot:
        return self.cmd("unset key")

    def set_title(self, title: str = "") -> Gnuplot:
        return self.cmd(f"set title {commands.quote(title)}")

    def unset_title(self) -> Gnuplot:
        return self.set_title()

    # -- axes -------------------------------------------------------------

    def set_xlabel(self, label: str = "x") -> Gnuplot:
        return self.cmd(commands.set_label("x", label))

    def set_ylabel(self, label: str = "y") -> Gnuplot:
        return self.cmd(commands.set_label("y", label))

    def set_zlabel(self, label: str = "z") -> Gnuplot:
        return self.cmd(commands.set_label("z", label))

    def set_xrange(self, start: float, stop: float) -> Gnuplot:
        return self.cmd(commands.set_range("x", start, stop))

    def set_yrange(self, start: float, stop: float) -> Gnuplot:
        return self.cmd(commands.set_range("y", start, stop))

    def set_zrange(self, start: float, stop: float) -> Gnuplot:
        return self.cmd(commands.set_range("z", start, stop))

    def set_cbrange(self, start: float, stop: float) -> Gnuplot:
        return self.cmd(commands.set_range("cb", start, stop))

    def set_xautoscale(self) -> Gnuplot:
        self.cmd("set xrange restore")
        return self.cmd("set autoscale x")

    def set_yautoscale(self) -> Gnuplot:
        self.cmd("set yrange restore")
        return self.cmd("set autoscale y")

    def set_zautoscale(self) -> Gnuplot:
        self.cmd("set zrange restore")
        return self.cmd("set autoscale z")

    def set_xlogscale(self, base: float = 10) -> Gnuplot:
        return self.cmd(commands.set_logscale("x", base))

    def set_ylogscale(self, base: float = 10) -> Gnuplot:
        return self.cmd(commands.set_logscale("y", base))

    def set_zlogscale(self, base: float = 10) -> Gnuplot:
        return self.cmd(commands.set_logscale("z", base))

    def unset_xlogscale(self) -> Gnuplot:
        return self.cmd("unset logscale x")

    def unset_ylogscale(self) -> Gnuplot:
        return self.cmd("unset logscale y")

    def unset_zlogscale(self) -> Gnuplot:
        return self.cmd("unset logscale z")

    # -- plotting from files ----------------------------------------------

    def _prefix(self) -> str:
        return commands.plot_prefix(self._nplots, self._two_dim)

    def _prefix3d(self) -> str:
        return commands.splot_prefix(self._nplots, self._two_dim)

    def plotfile_x(self, filename: str, column: int = 1, title: str = "") -> Gnuplot:
        file_available(filename)
        column = commands.check_column(column)
        return self.cmd(
            commands.plotfile_x(
                str(filename),
                column,
                title,
                prefix=self._prefix(),
                pstyle=self._pstyle,
                smooth=self._smooth,
            )
        )

    def plotfile_xy(
        self,
        filename: str,
        column_x: int = 1,
        column_y: int = 2,
        title: str = "",
    ) -> Gnuplot:
        file_available(filename)
        return self.cmd(
            commands.plotfile_xy(
                str(filename),
                commands.check_column(column_x, "column_x"),
                commands.check_column(column_y, "column_y"),
                title,
                prefix=self._prefix(),
                pstyle=self._pstyle,
                smooth=self._smooth,
            )
        )

    def plotfile_xy_err(
        self,
        filename: str,
        column_x: int = 1,
        column_y: int = 2,
        column_dy: int = 3,
        title: str = "",
    ) -> Gnuplot:
        file_available(filename)
        return self.cmd(
            commands.plotfile_xy_err(
                str(filename),
                commands.check_column(column_x, "column_x"),
                commands.check_column(column_y, "column_y"),
                commands.check_column(column_dy, "column_dy"),
                title,
                prefix=self._prefix(),
            )
        )

    def plotfile_xyz(
        self,
        filename: str,
        column_x: int = 1,
        column_y: int = 2,
        column_z: int = 3,
        title: str = "",
    ) -> Gnuplot:
        file_available(filename)
        return self.cmd(
            commands.plotfile_xyz(
                str(filename),
                commands.check_column(column_x, "column_x"),
                commands.check_column(column_y, "column_y"),
                commands.check_column(column_z, "column_z"),
                title,
                prefix=self._prefix3d(),
                pstyle=self._pstyle,
            )
        )

    # -- plotting from data -----------------------------------------------

    def _write_columns(self, *named: tuple[str, Any]) -> str:
        columns = commands.as_columns(*named)
        return self._tmpfiles.write_rows(commands.format_rows(columns))

    def plot_x(self, x: Any, title: str = "") -> Gnuplot:
        name = self._write_columns(("x", x))
        return self.plotfile_x(name, 1, title)

    def plot_xy(self, x: Any, y: Any, title: str = "") -> Gnuplot:
        name = self._write_columns(("x", x), ("y", y))
        return self.plotfile_xy(name, 1, 2, title)

    def plot_xy_err(self, x: Any, y: Any, dy: Any, title: str = "") -> Gnuplot:
        name = self._write_columns(("x", x), ("y", y), ("dy", dy))
        return self.plotfile_xy_err(name, 1, 2, 3, title)

    def plot_xyz(self, x: Any, y: Any, z: Any, title: str = "") -> Gnuplot:
        name = self._write_columns(("x", x), ("y", y), ("z", z))
        return self.plotfile_xyz(name, 1, 2, 3, title)

    def plot_slope(self, a: float, b: float, title: str = "") -> Gnuplot:
        """Plot the line y = a * x + b."""
        return self.cmd(commands.slope(a, b, title, prefix=self._prefix(), pstyle=self._pstyle))

    def plot_equation(self, equation: str, title: str = "") -> Gnuplot:
        """Plot y = f(x); ``equation`` is the gnuplot expression f(x) in ``x``."""
        if not equation or not equation.strip():
            raise GnuplotArgumentError("equation must not be empty.")
        return self.cmd(
            commands.equation(equation, title, prefix=self._prefix(), pstyle=self._pstyle)
        )

    def plot_equation3d(self, equation: str, title: str = "") -> Gnuplot:
        """Plot z = f(x, y); ``equation`` is the gnuplot expression in ``x`` and ``y``."""
        if not equation or not equation.strip():
            raise GnuplotArgumentError("equation must not be empty.")
        return self.cmd(
            commands.equation3d(equation, title, prefix=self._prefix3d(), pstyle=self._pstyle)
        )

    def plot_image(
        self,
        pixels: Any,
        title: str = "",
        *,
        width: int | None = None,
        height: int | None = None,
    ) -> Gnuplot:
        """Plot a grey-level image given as a 2-D array indexed ``[row, column]``.

        A flat buffer is accepted together with ``width`` and ``height``.
        """
        arr = commands.as_numeric_array(pixels, "pixels")
        if width is not None or height is not None:
            if width is None or height is None or width < 1 or height < 1:
                raise GnuplotArgumentError("width and height must both be positive.")
            if arr.size != width * height:
                raise GnuplotArgumentError(
                    f"pixel buffer holds {arr.size} values, expected {width}x{height}"
                )
            arr = arr.reshape(height, width)
        if arr.ndim != 2 or arr.size == 0:
            raise GnuplotArgumentError(f"pixels must be a non-empty 2-D array, got shape {arr.shape}")

        rows = (
            f"{col} {row} {commands.format_number(arr[row, col])}"
            for row in range(arr.shape[0])
            for col in range(arr.shape[1])
        )
        name = self._tmpfiles.write_rows(rows)
        return self.cmd(commands.image(name, title, prefix=self._prefix()))

    # -- session lifetime -------------------------------------------------

    def replot(self) -> Gnuplot:
        if self._nplots > 0:
            return self.cmd("replot")
        return self

    def reset_plot(self) -> Gnuplot:
        """Make the next plot call start a new plot instead of adding to it."""
        self._nplots = 0
        return self

    def reset_all(self) -> Gnuplot:
        self._nplots = 0
        self.cmd("reset")
        self.cmd("clear")
        self._pstyle = DEFAULT_STYLE
        self._smooth = ""
        return self.showonscreen()

    def remove_tmpfiles(self) -> int:
        return self._tmpfiles.remove_all()

    def close(self, remove_tmpfiles: bool = True) -> None:
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        process, self._process = self._process, None
        self._valid = False
        if process is not None:
            try:
                if process.stdin is not None:
                    process.stdin.close()
                returncode = process.wait()
            except OSError as exc:
                logger.warning("Problem closing communication to gnuplot: %s", exc)
            else:
                if returncode != 0:
                    logger.warning("gnuplot exited with status %s", returncode)
                logger.info("Closed gnuplot session.")
        if remove_tmpfiles:
            self.remove_tmpfiles()

    def __enter__(self) -> Gnuplot:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
            return
        try:
            self.close()
        except GnuplotError as cleanup_exc:
            logger.warning("Cleanup after failed gnuplot session: %s", cleanup_exc)
