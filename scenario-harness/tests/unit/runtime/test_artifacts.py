from __future__ import annotations

import os
from pathlib import Path

import pytest

from scenario_harness.runtime.artifacts import (
    DEFAULT_WORKDIR_OFFSET,
    ArtifactNotFoundError,
    bundle_path_to_id,
    locate_artifact,
)


def test_locate_artifact_applies_offset_to_module_directory(tmp_path: Path) -> None:
    module_file = tmp_path / "app" / "tests" / "src" / "utils.py"

    located = locate_artifact(module_file, *DEFAULT_WORKDIR_OFFSET, "test_conf.dna")

    assert located == tmp_path / "app" / "dna" / "workdir" / "test_conf.dna"
    assert located.is_absolute()


def test_locate_artifact_is_stable_across_calls(tmp_path: Path) -> None:
    module_file = tmp_path / "tests" / "src" / "utils.py"

    first = locate_artifact(module_file, "..", "..", "dna", "workdir", "x.dna")
    second = locate_artifact(module_file, "..", "..", "dna", "workdir", "x.dna")

    assert first == second


def test_locate_artifact_accepts_relative_module_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    located = locate_artifact(os.path.join("tests", "src", "utils.py"), "..", "bundle.dna")

    assert located == tmp_path / "tests" / "bundle.dna"


def test_locate_artifact_does_not_require_target_to_exist(tmp_path: Path) -> None:
    located = locate_artifact(tmp_path / "utils.py", "missing.dna")

    assert not located.exists()
    assert located.name == "missing.dna"


def test_bundle_path_to_id_strips_all_suffixes() -> None:
    assert bundle_path_to_id("/x/workdir/tragedy-commons.dna") == "tragedy-commons"
    assert bundle_path_to_id(Path("a/b/test_conf.dna.gz")) == "test_conf"


def test_artifact_not_found_is_a_file_not_found_error() -> None:
    assert issubclass(ArtifactNotFoundError, FileNotFoundError)
