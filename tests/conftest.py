from __future__ import annotations

import stat
from pathlib import Path

import pytest

from gnupipe import config as gnupipe_config
from gnupipe import session as gnupipe_session
from gnupipe.config import GnupipeConfig
from gnupipe.tmpfiles import TempFileRegistry


class FakeStdin:
    def __init__(self) -> None:
        self.chunks: list[str] = []
        self.closed = False

    def write(self, text: str) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        self.chunks.append(text)
        return len(text)

    def flush(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def close(self) -> None:
        self.closed = True


class FakePopen:
    instances: list["FakePopen"] = []

    def __init__(self, args, **kwargs) -> None:
        self.args = list(args)
        self.kwargs = kwargs
        self.stdin = FakeStdin()
        self.returncode: int | None = None
        FakePopen.instances.append(self)

    def wait(self, timeout=None) -> int:
        self.returncode = 0
        return 0

    @property
    def lines(self) -> list[str]:
        return "".join(self.stdin.chunks).splitlines()


def make_fake_gnuplot(directory: Path, name: str = "gnuplot") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    exe = directory / name
    exe.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return exe


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(TempFileRegistry, "_alive_count", 0)
    monkeypatch.setattr(gnupipe_config, "_install_dir_override", None)
    monkeypatch.setattr(gnupipe_config, "_terminal_override", None)
    for key in (
        gnupipe_config.ENV_BIN,
        gnupipe_config.ENV_PATH,
        gnupipe_config.ENV_TERMINAL,
        gnupipe_config.ENV_TMPDIR,
        gnupipe_config.ENV_MAX_TMP_FILES,
    ):
        monkeypatch.delenv(key, raising=False)
    FakePopen.instances = []


@pytest.fixture
def gnuplot_bin(tmp_path: Path) -> Path:
    return make_fake_gnuplot(tmp_path / "bin")


@pytest.fixture
def cfg(tmp_path: Path, gnuplot_bin: Path) -> GnupipeConfig:
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    return GnupipeConfig(
        executable="gnuplot",
        install_dir=str(gnuplot_bin.parent),
        terminal="dumb",
        tmp_dir=str(tmp_dir),
        max_tmp_files=64,
    )


@pytest.fixture
def fake_popen(monkeypatch: pytest.MonkeyPatch) -> type[FakePopen]:
    monkeypatch.setattr(gnupipe_session.subprocess, "Popen", FakePopen)
    return FakePopen


@pytest.fixture
def session(cfg: GnupipeConfig, fake_popen: type[FakePopen]):
    g = gnupipe_session.Gnuplot(config=cfg)
    yield g
    g.close(remove_tmpfiles=False)


@pytest.fixture
def make_gnuplot():
    return make_fake_gnuplot
