"""Spec loading utilities (bundle manifests, schemas, YAML/JSON files)."""

from __future__ import annotations

from scenario_harness.spec.bundle import (
    ArtifactBundle,
    BundleManifest,
    BundleValidationError,
    ZomeManifest,
    load_bundle,
)
from scenario_harness.spec.spec_loader import (
    SpecValidationError,
    load_yaml_or_json,
    validate_against_schema,
)

__all__ = [
    "ArtifactBundle",
    "BundleManifest",
    "BundleValidationError",
    "SpecValidationError",
    "ZomeManifest",
    "load_bundle",
    "load_yaml_or_json",
    "validate_against_schema",
]
