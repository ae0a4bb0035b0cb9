"""Pure builders for gnuplot command strings and data-file rows."""

from __future__ import annotations

import math
import numbers
from typing import Any, Iterable, Sequence

import numpy as np

from .errors import GnuplotArgumentError


SMOOTH_KEYWORDS = ("unique", "frequency", "csplines", "bezier")
CONTOUR_POSITIONS = ("base", "surface", "both")
NUMERIC_KINDS = "iuf"


def format_number(value: Any) -> str:
    """Shortest text gnuplot reads back as the same number."""
    if isinstance(value, (bool, np.bool_)):
        raise GnuplotArgumentError(f"Expected a number, got {value!r}")
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if not isinstance(value, numbers.Real):
        raise GnuplotArgumentError(f"Expected a number, got {value!r}")
    number = float(value)
    if number.is_integer() and abs(number) < 1e16:
        return str(int(number))
    return repr(number)


def format_finite(value: Any, name: str = "value") -> str:
    """Like ``format_number`` but also rejects NaN and infinities."""
    text = format_number(value)
    if not math.isfinite(float(value)):
        raise GnuplotArgumentError(f"{name} must be a finite number, got {value!r}")
    return text


def as_numeric_array(values: Any, name: str = "x") -> np.ndarray:
    """Coerce ``values`` to a float array, accepting only integer and real input."""
    try:
        arr = np.asarray(values)
    except (TypeError, ValueError) as exc:
        raise GnuplotArgumentError(f"{name}: samples must be numbers ({exc})") from None
    if arr.size and arr.dtype.kind not in NUMERIC_KINDS:
        raise GnuplotArgumentError(
            f"{name}: samples must be numbers, got values of type {arr.dtype}"
        )
    return arr.astype(float)


def as_samples(values: Any, name: str = "x") -> np.ndarray:
    """Validate one sample collection as a non-empty 1-D float array."""
    if values is None:
        raise GnuplotArgumentError(f"{name}: sample collection too small")
    arr = as_numeric_array(values, name)
    if arr.ndim != 1:
        raise GnuplotArgumentError(f"{name}: samples must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        raise GnuplotArgumentError(f"{name}: sample collection too small")
    return arr


def as_columns(*named: tuple[str, Any]) -> list[np.ndarray]:
    columns = [as_samples(values, name) for name, values in named]
    lengths = {len(col) for col in columns}
    if len(lengths) != 1:
        detail = ", ".join(f"{name}={len(col)}" for (name, _), col in zip(named, columns))
        raise GnuplotArgumentError(f"Length of the sample collections differs ({detail})")
    return columns


def format_rows(columns: Sequence[np.ndarray]) -> Iterable[str]:
    for row in zip(*columns):
        yield " ".join(format_number(v) for v in row)


def check_column(index: Any, name: str = "column") -> int:
    if isinstance(index, bool) or not isinstance(index, numbers.Integral) or index < 1:
        raise GnuplotArgumentError(f"{name} must be a positive integer, got {index!r}")
    return int(index)


def quote(text: str) -> str:
    return '"' + str(text) + '"'


def plot_prefix(nplots: int, two_dim: bool) -> str:
    return "replot " if nplots > 0 and two_dim else "plot "


def splot_prefix(nplots: int, two_dim: bool) -> str:
    return "replot " if nplots > 0 and not two_dim else "splot "


def title_clause(title: str) -> str:
    if not title:
        return " notitle "
    return f" title {quote(title)} "


def style_clause(pstyle: str, smooth: str) -> str:
    if smooth:
        return f"smooth {smooth}"
    return f"with {pstyle}"


def normalize_smooth(mode: str) -> str:
    """Return ``mode`` when it names a supported smoothing, else an empty string."""
    if any(keyword in mode for keyword in SMOOTH_KEYWORDS):
        return mode
    return ""


def normalize_contour(position: str) -> str:
    if any(keyword in position for keyword in CONTOUR_POSITIONS):
        return position
    return "base"


def set_label(axis: str, label: str) -> str:
    return f"set {axis}label {quote(label)}"


def set_range(axis: str, start: float, stop: float) -> str:
    low = format_finite(start, f"{axis}range start")
    high = format_finite(stop, f"{axis}range end")
    return f"set {axis}range[{low}:{high}]"


def set_logscale(axis: str, base: float) -> str:
    text = format_finite(base, "logscale base")
    if float(base) <= 1:
        raise GnuplotArgumentError(f"logscale base must be greater than 1, got {base!r}")
    return f"set logscale {axis} {text}"


def plotfile_x(filename: str, column: int, title: str, *, prefix: str, pstyle: str, smooth: str) -> str:
    return (
        f"{prefix}{quote(filename)} using {column}"
        f"{title_clause(title)}{style_clause(pstyle, smooth)}"
    )


def plotfile_xy(
    filename: str,
    column_x: int,
    column_y: int,
    title: str,
    *,
    prefix: str,
    pstyle: str,
    smooth: str,
) -> str:
    return (
        f"{prefix}{quote(filename)} using {column_x}:{column_y}"
        f"{title_clause(title)}{style_clause(pstyle, smooth)}"
    )


def plotfile_xy_err(
    filename: str,
    column_x: int,
    column_y: int,
    column_dy: int,
    title: str,
    *,
    prefix: str,
) -> str:
    return (
        f"{prefix}{quote(filename)} using {column_x}:{column_y}:{column_dy}"
        f" with errorbars {title_clause(title)}"
    )


def plotfile_xyz(
    filename: str,
    column_x: int,
    column_y: int,
    column_z: int,
    title: str,
    *,
    prefix: str,
    pstyle: str,
) -> str:
    head = f"{prefix}{quote(filename)} using {column_x}:{column_y}:{column_z}"
    if not title:
        return f"{head} notitle with {pstyle}"
    return f"{head} title {quote(title)} with {pstyle}"


def slope(a: float, b: float, title: str, *, prefix: str, pstyle: str) -> str:
    expr = f"{format_finite(a, 'slope')} * x + {format_finite(b, 'intercept')}"
    label = title if title else f"f(x) = {expr}"
    return f"{prefix}{expr} title {quote(label)} with {pstyle}"


def equation(expr: str, title: str, *, prefix: str, pstyle: str) -> str:
    if not title:
        return f"{prefix}{expr} notitle with {pstyle}"
    return f"{prefix}{expr} title {quote(title)} with {pstyle}"


def equation3d(expr: str, title: str, *, prefix: str, pstyle: str) -> str:
    label = title if title else f"f(x,y) = {expr}"
    return f"{prefix}{expr} title {quote(label)} with {pstyle}"


def image(filename: str, title: str, *, prefix: str) -> str:
    if not title:
        return f"{prefix}{quote(filename)} with image"
    return f"{prefix}{quote(filename)} title {quote(title)} with image"
