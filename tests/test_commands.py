import numpy as np
import pytest

from gnupipe import commands
from gnupipe.errors import GnuplotArgumentError


def test_format_number_uses_shortest_round_trip_text() -> None:
    assert commands.format_number(3) == "3"
    assert commands.format_number(2.0) == "2"
    assert commands.format_number(0.1) == "0.1"
    assert commands.format_number(np.float64(-1.25)) == "-1.25"
    assert commands.format_number(np.int64(7)) == "7"
    assert float(commands.format_number(1 / 3)) == 1 / 3


def test_format_number_rejects_booleans() -> None:
    with pytest.raises(GnuplotArgumentError):
        commands.format_number(True)


@pytest.mark.parametrize("empty", [[], (), np.array([])])
def test_as_samples_rejects_empty_collections(empty) -> None:
    with pytest.raises(GnuplotArgumentError, match="too small"):
        commands.as_samples(empty)


def test_as_samples_rejects_non_numeric_and_nested_input() -> None:
    with pytest.raises(GnuplotArgumentError, match="numbers"):
        commands.as_samples(["a", "b"])
    with pytest.raises(GnuplotArgumentError, match="one-dimensional"):
        commands.as_samples([[1, 2], [3, 4]])


def test_as_columns_rejects_mismatched_lengths() -> None:
    with pytest.raises(GnuplotArgumentError, match="differs"):
        commands.as_columns(("x", [1, 2, 3]), ("y", [1, 2]))
    with pytest.raises(GnuplotArgumentError, match="differs"):
        commands.as_columns(("x", [1, 2]), ("y", [1, 2]), ("z", [1]))


def test_format_rows_joins_columns_with_spaces() -> None:
    cols = commands.as_columns(("x", [1, 2]), ("y", [0.5, 4]))
    assert list(commands.format_rows(cols)) == ["1 0.5", "2 4"]


def test_prefixes_follow_plot_count_and_dimension() -> None:
    assert commands.plot_prefix(0, True) == "plot "
    assert commands.plot_prefix(2, True) == "replot "
    assert commands.plot_prefix(2, False) == "plot "
    assert commands.splot_prefix(0, False) == "splot "
    assert commands.splot_prefix(1, False) == "replot "
    assert commands.splot_prefix(1, True) == "splot "


def test_plotfile_commands_use_title_and_style_clauses() -> None:
    assert (
        commands.plotfile_x("d.dat", 1, "", prefix="plot ", pstyle="lines", smooth="")
        == 'plot "d.dat" using 1 notitle with lines'
    )
    assert (
        commands.plotfile_xy("d.dat", 1, 2, "T", prefix="replot ", pstyle="lines", smooth="bezier")
        == 'replot "d.dat" using 1:2 title "T" smooth bezier'
    )
    assert (
        commands.plotfile_xy_err("d.dat", 1, 2, 3, "", prefix="plot ")
        == 'plot "d.dat" using 1:2:3 with errorbars  notitle '
    )
    assert (
        commands.plotfile_xyz("d.dat", 1, 2, 3, "S", prefix="splot ", pstyle="points")
        == 'splot "d.dat" using 1:2:3 title "S" with points'
    )


def test_expression_commands() -> None:
    assert (
        commands.slope(2, 1.5, "", prefix="plot ", pstyle="lines")
        == 'plot 2 * x + 1.5 title "f(x) = 2 * x + 1.5" with lines'
    )
    assert commands.equation("sin(x)", "", prefix="plot ", pstyle="lines") == "plot sin(x) notitle with lines"
    assert (
        commands.equation3d("x*y", "", prefix="splot ", pstyle="lines")
        == 'splot x*y title "f(x,y) = x*y" with lines'
    )
    assert commands.image("img.dat", "pic", prefix="plot ") == 'plot "img.dat" title "pic" with image'


def test_smooth_and_contour_normalization() -> None:
    assert commands.normalize_smooth("acsplines") == "acsplines"
    assert commands.normalize_smooth("sbezier") == "sbezier"
    assert commands.normalize_smooth("wiggly") == ""
    assert commands.normalize_contour("both") == "both"
    assert commands.normalize_contour("nowhere") == "base"


def test_setting_commands() -> None:
    assert commands.set_range("x", -1, 2.5) == "set xrange[-1:2.5]"
    assert commands.set_label("y", "volts") == 'set ylabel "volts"'
    assert commands.set_logscale("z", 10) == "set logscale z 10"


@pytest.mark.parametrize("bad", [0, -1, 1.5, True, "2"])
def test_check_column_rejects_non_positive_integers(bad) -> None:
    with pytest.raises(GnuplotArgumentError):
        commands.check_column(bad)


@pytest.mark.parametrize("values", [["1", "2", "3"], [True, False], [1, None, 3]])
def test_as_samples_rejects_strings_booleans_and_missing_values(values) -> None:
    with pytest.raises(GnuplotArgumentError, match="numbers"):
        commands.as_samples(values)


@pytest.mark.parametrize("bad", ["abc", None, [1, 2], float("nan"), float("inf")])
def test_set_range_rejects_non_numbers_and_non_finite_values(bad) -> None:
    with pytest.raises(GnuplotArgumentError):
        commands.set_range("x", bad, 1)
    with pytest.raises(GnuplotArgumentError):
        commands.set_range("x", 0, bad)


@pytest.mark.parametrize("bad", ["10", float("nan"), 1, 0.5, -2])
def test_set_logscale_rejects_invalid_bases(bad) -> None:
    with pytest.raises(GnuplotArgumentError):
        commands.set_logscale("x", bad)


def test_slope_rejects_non_finite_coefficients() -> None:
    with pytest.raises(GnuplotArgumentError, match="finite"):
        commands.slope(float("inf"), 1, "", prefix="plot ", pstyle="lines")
    with pytest.raises(GnuplotArgumentError):
        commands.slope(1, "b", "", prefix="plot ", pstyle="lines")
