from __future__ import annotations

import argparse
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from . import __version__
from .paths import file_available
from .session import Gnuplot


def _parse_using(raw: str) -> list[int]:
    try:
        columns = [int(x.strip()) for x in raw.split(":") if x.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"--using expects colon separated integers, got {raw!r}")
    if not 1 <= len(columns) <= 3:
        raise argparse.ArgumentTypeError("--using takes one to three columns, e.g. 1:2")
    return columns


def _add_output_options(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--title", default="", help="Curve title (omitted from the key when empty).")
    sub.add_argument("--plot-title", default=None, help="Title of the whole plot.")
    sub.add_argument("--style", default="lines", help="gnuplot line style, e.g. lines, points.")
    sub.add_argument("--smooth", default=None, help="csplines, acsplines, bezier, sbezier, unique, frequency.")
    sub.add_argument("--output", default=None, metavar="FILE", help="Write the figure to FILE.")
    sub.add_argument("--terminal", default="pngcairo", help="Terminal used with --output.")
    sub.add_argument("--grid", action="store_true")
    sub.add_argument("--keep-tmpfiles", action="store_true")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gnupipe",
        description="gnupipe: drive gnuplot from Python through a command pipe.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for every command sent.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("doctor", help="Check that gnuplot can be started from this environment.")

    plot = subparsers.add_parser("plot", help="Plot columns of a whitespace separated data file.")
    plot.add_argument("file", metavar="DATA")
    plot.add_argument("--using", type=_parse_using, default=[1, 2], metavar="X[:Y[:Z]]")
    _add_output_options(plot)

    plot_csv = subparsers.add_parser("plot-csv", help="Plot named columns of a CSV file.")
    plot_csv.add_argument("file", metavar="CSV")
    plot_csv.add_argument("--x", default=None, metavar="COLUMN")
    plot_csv.add_argument("--y", nargs="+", required=True, metavar="COLUMN")
    plot_csv.add_argument("--sep", default=",")
    _add_output_options(plot_csv)

    equation = subparsers.add_parser("equation", help="Plot a gnuplot expression in x (or x and y with --3d).")
    equation.add_argument("expression")
    equation.add_argument("--3d", dest="three_d", action="store_true")
    equation.add_argument("--xrange", nargs=2, type=float, default=None, metavar=("FROM", "TO"))
    _add_output_options(equation)

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@contextmanager
def _plot_session(args: argparse.Namespace) -> Iterator[Gnuplot]:
    session = Gnuplot(args.style)
    try:
        if args.output:
            session.savetofigure(args.output, args.terminal)
        if args.smooth:
            session.set_smooth(args.smooth)
        if args.grid:
            session.set_grid()
        if args.plot_title is not None:
            session.set_title(args.plot_title)
        yield session
        if args.output:
            session.cmd("set output")
        else:
            session.cmd("pause mouse close")
    finally:
        session.close(remove_tmpfiles=not args.keep_tmpfiles)
    if args.output:
        print(f"Figure: {Path(args.output).resolve()}")


def _cmd_doctor(args: argparse.Namespace) -> int:
    from .doctor import run_doctor

    report = run_doctor()
    print(report.render())
    return 1 if report.has_failures else 0


def _cmd_plot(args: argparse.Namespace) -> int:
    columns = args.using
    with _plot_session(args) as session:
        if len(columns) == 1:
            session.plotfile_x(args.file, columns[0], args.title)
        elif len(columns) == 2:
            session.plotfile_xy(args.file, columns[0], columns[1], args.title)
        else:
            session.plotfile_xyz(args.file, columns[0], columns[1], columns[2], args.title)
    return 0


def _cmd_plot_csv(args: argparse.Namespace) -> int:
    import pandas as pd

    file_available(args.file)
    frame = pd.read_csv(args.file, sep=args.sep)
    wanted = ([args.x] if args.x else []) + list(args.y)
    missing = [name for name in wanted if name not in frame.columns]
    if missing:
        raise ValueError(
            f"Columns not found in {args.file}: {', '.join(missing)}. "
            f"Available: {', '.join(map(str, frame.columns))}"
        )

    x = None
    if args.x:
        x = pd.to_numeric(frame[args.x], errors="raise").to_numpy(dtype=float)
    with _plot_session(args) as session:
        if args.x:
            session.set_xlabel(args.x)
        for name in args.y:
            title = args.title if args.title and len(args.y) == 1 else name
            y = pd.to_numeric(frame[name], errors="raise").to_numpy(dtype=float)
            if x is None:
                session.plot_x(y, title)
            else:
                session.plot_xy(x, y, title)
    return 0


def _cmd_equation(args: argparse.Namespace) -> int:
    with _plot_session(args) as session:
        if args.xrange:
            session.set_xrange(args.xrange[0], args.xrange[1])
        if args.three_d:
            session.plot_equation3d(args.expression, args.title)
        else:
            session.plot_equation(args.expression, args.title)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        if args.command == "doctor":
            return _cmd_doctor(args)
        if args.command == "plot":
            return _cmd_plot(args)
        if args.command == "plot-csv":
            return _cmd_plot_csv(args)
        if args.command == "equation":
            return _cmd_equation(args)
    except Exception as exc:
        parser.exit(status=2, message=f"error: {exc}\n")
    parser.exit(status=2, message="error: unknown command\n")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
