from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from .config import ENV_PATH, ENV_TERMINAL, GnupipeConfig, load_config
from .errors import GnuplotError
from .paths import check_display, find_gnuplot
from .tmpfiles import TempFileRegistry


@dataclass
class DoctorCheck:
    name: str
    status: str  # PASS | WARN | FAIL
    message: str
    fix: str | None = None


@dataclass
class DoctorReport:
    checks: list[DoctorCheck]

    @property
    def has_failures(self) -> bool:
        return any(check.status == "FAIL" for check in self.checks)

    def render(self) -> str:
        lines = []
        for check in self.checks:
            line = f"[{check.status}] {check.name}: {check.message}"
            lines.append(line)
            if check.fix:
                lines.append(f"  fix: {check.fix}")
        summary = "FAIL" if self.has_failures else "PASS"
        lines.append(f"\nDoctor summary: {summary}")
        return "\n".join(lines)


def get_gnuplot_version(executable: str | Path) -> str | None:
    try:
        out = subprocess.check_output(
            [str(executable), "--version"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=10,
        ).strip()
        return out or None
    except (OSError, subprocess.SubprocessError):
        return None


def run_doctor(cfg: GnupipeConfig | None = None) -> DoctorReport:
    checks: list[DoctorCheck] = []
    try:
        cfg = cfg or load_config()
    except GnuplotError as exc:
        checks.append(
            DoctorCheck(
                "Configuration",
                "FAIL",
                str(exc),
                "Fix or unset the GNUPIPE_* environment variables.",
            )
        )
        return DoctorReport(checks=checks)
    checks.append(
        DoctorCheck(
            "Configuration",
            "PASS",
            f"executable={cfg.executable} terminal={cfg.terminal} tmp_dir={cfg.tmp_dir}",
        )
    )

    try:
        executable = find_gnuplot(cfg)
    except GnuplotError as exc:
        checks.append(
            DoctorCheck(
                "gnuplot executable",
                "FAIL",
                str(exc),
                f"Install gnuplot, add it to PATH or set {ENV_PATH} to its directory.",
            )
        )
    else:
        version = get_gnuplot_version(executable)
        if version:
            checks.append(DoctorCheck("gnuplot executable", "PASS", f"{executable} ({version})"))
        else:
            checks.append(
                DoctorCheck(
                    "gnuplot executable",
                    "WARN",
                    f"{executable} found but `--version` did not answer.",
                    "Check that the file is a working gnuplot binary.",
                )
            )

    try:
        check_display(cfg.terminal)
        checks.append(DoctorCheck("Display", "PASS", f"terminal {cfg.terminal} is usable."))
    except GnuplotError as exc:
        checks.append(
            DoctorCheck(
                "Display",
                "FAIL",
                str(exc),
                f"Export DISPLAY or set {ENV_TERMINAL} to a file terminal such as pngcairo.",
            )
        )

    outdir = Path(cfg.tmp_dir)
    try:
        probe = outdir / ".gnupipe_doctor_write_test"
        probe.write_text("ok\n", encoding="utf-8")
        probe.unlink()
        checks.append(DoctorCheck("Temporary directory writable", "PASS", str(outdir.resolve())))
    except OSError as exc:
        checks.append(
            DoctorCheck(
                "Temporary directory writable",
                "FAIL",
                str(exc),
                "Choose a writable directory with GNUPIPE_TMPDIR.",
            )
        )

    alive = TempFileRegistry.alive_count()
    budget = cfg.max_tmp_files - 1
    if alive >= budget:
        checks.append(
            DoctorCheck(
                "Temporary file budget",
                "FAIL",
                f"{alive} of {budget} temporary files in use.",
                "Call remove_tmpfiles() or close() on finished sessions.",
            )
        )
    else:
        checks.append(DoctorCheck("Temporary file budget", "PASS", f"{alive} of {budget} in use."))

    return DoctorReport(checks=checks)
