from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    src = repo_root / "scenario-harness" / "src"
    src_str = str(src)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_src_on_path()


@pytest.fixture(autouse=True)
def _isolated_tmpdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep player config dirs under the test's tmp_path."""
    base = tmp_path / "harness-tmp"
    monkeypatch.setenv("SCENARIO_HARNESS_TMPDIR", str(base))
    monkeypatch.delenv("SCENARIO_HARNESS_TIMEOUT_S", raising=False)
    monkeypatch.delenv("SCENARIO_HARNESS_REPORTER", raising=False)
    return base
