"""Shared pytest fixtures for configuration loader tests."""
from __future__ import annotations

import pathlib
import sys
import textwrap
from typing import Callable

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from proxyconf import reload as reload_module  # noqa: E402
from proxyconf.config import Config, load_config  # noqa: E402


@pytest.fixture
def write_doc(tmp_path: pathlib.Path) -> Callable[..., pathlib.Path]:
    """Write a dedented document to a file under tmp_path and return its path."""

    def _write(body: str, name: str = "proxy.yaml") -> pathlib.Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def load_yaml() -> Callable[[str], Config]:
    """Load an in-memory YAML document without binding a source file."""

    def _load(body: str) -> Config:
        return load_config(data=textwrap.dedent(body), doc_format="yaml")

    return _load


@pytest.fixture
def fake_clock(monkeypatch: pytest.MonkeyPatch):
    """Replace the staleness monitor's monotonic clock with a settable one."""

    class Clock:
        now = 1000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += seconds

    clock = Clock()
    monkeypatch.setattr("proxyconf.config._monotonic", clock)
    return clock


@pytest.fixture(autouse=True)
def _reset_live_config():
    yield
    reload_module.reset_config()
