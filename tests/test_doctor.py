from __future__ import annotations

import os

import pytest

from gnupipe.config import GnupipeConfig
from gnupipe.doctor import run_doctor
from gnupipe.tmpfiles import TempFileRegistry


@pytest.mark.skipif(os.name == "nt", reason="fake gnuplot is a shell script")
def test_doctor_passes_with_runnable_gnuplot(cfg: GnupipeConfig) -> None:
    report = run_doctor(cfg)
    assert not report.has_failures
    statuses = {check.name: check.status for check in report.checks}
    assert statuses["Configuration"] == "PASS"
    assert statuses["gnuplot executable"] in {"PASS", "WARN"}
    assert statuses["Display"] == "PASS"
    assert statuses["Temporary directory writable"] == "PASS"
    assert "Doctor summary: PASS" in report.render()


def test_doctor_fails_without_gnuplot(cfg: GnupipeConfig, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    report = run_doctor(cfg.with_overrides(executable="no-such-gnuplot"))
    assert report.has_failures
    failed = [check for check in report.checks if check.status == "FAIL"]
    assert [check.name for check in failed] == ["gnuplot executable"]
    assert failed[0].fix
    assert "Doctor summary: FAIL" in report.render()


def test_doctor_flags_exhausted_temp_file_budget(cfg: GnupipeConfig, monkeypatch) -> None:
    monkeypatch.setattr(TempFileRegistry, "_alive_count", cfg.max_tmp_files - 1)
    report = run_doctor(cfg)
    budget = [check for check in report.checks if check.name == "Temporary file budget"][0]
    assert budget.status == "FAIL"


def test_doctor_reports_bad_environment(monkeypatch) -> None:
    monkeypatch.setenv("GNUPIPE_MAX_TMP_FILES", "many")
    report = run_doctor()
    assert report.has_failures
    assert report.checks[0].name == "Configuration"
