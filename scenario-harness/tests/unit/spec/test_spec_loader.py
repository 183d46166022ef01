from __future__ import annotations

from pathlib import Path

import pytest

from scenario_harness.spec.schemas import INSTALLATION_SCHEMA_V1
from scenario_harness.spec.spec_loader import (
    SpecValidationError,
    load_yaml_or_json,
    load_yaml_or_json_any,
    validate_against_schema,
)


def test_load_yaml_and_json_objects(tmp_path: Path) -> None:
    y = tmp_path / "a.yaml"
    y.write_text("name: x\nitems: [1, 2]\n", encoding="utf-8")
    j = tmp_path / "b.json"
    j.write_text('{"name": "x", "items": [1, 2]}', encoding="utf-8")

    assert load_yaml_or_json(y) == load_yaml_or_json(j) == {"name": "x", "items": [1, 2]}


def test_dna_files_load_as_yaml(tmp_path: Path) -> None:
    p = tmp_path / "app.dna"
    p.write_text("name: app\n", encoding="utf-8")

    assert load_yaml_or_json(p) == {"name": "app"}


def test_top_level_must_be_an_object(tmp_path: Path) -> None:
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")

    assert load_yaml_or_json_any(p) == [1, 2]
    with pytest.raises(SpecValidationError, match=r"Top-level spec must be an object"):
        load_yaml_or_json(p)


def test_unparseable_and_unsupported_files(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(SpecValidationError, match=r"Unparseable"):
        load_yaml_or_json(bad)

    txt = tmp_path / "x.txt"
    txt.write_text("name: x", encoding="utf-8")
    with pytest.raises(ValueError, match=r"Unsupported spec file extension"):
        load_yaml_or_json(txt)

    with pytest.raises(FileNotFoundError):
        load_yaml_or_json(tmp_path / "missing.yaml")


def test_validate_against_schema_reports_locations() -> None:
    with pytest.raises(SpecValidationError) as ei:
        validate_against_schema([["ok.dna", 3]], INSTALLATION_SCHEMA_V1, where="inst.yaml")

    assert "inst.yaml:0/1" in str(ei.value)


def test_validate_against_schema_caps_error_list() -> None:
    instance = [[[i] for i in range(30)]]
    with pytest.raises(SpecValidationError) as ei:
        validate_against_schema(instance, INSTALLATION_SCHEMA_V1, where="w")

    assert "... (10 more)" in str(ei.value)
