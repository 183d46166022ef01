"""Runtime pieces of a run: artifacts, installations, networks and the orchestrator."""

from __future__ import annotations

from scenario_harness.runtime.artifacts import (
    DEFAULT_WORKDIR_OFFSET,
    ArtifactNotFoundError,
    bundle_path_to_id,
    locate_artifact,
)
from scenario_harness.runtime.installation import (
    InstallationError,
    load_installation,
    normalize_installation,
    replicate_agents,
    single_agent_installation,
)
from scenario_harness.runtime.util import delay

__all__ = [
    "DEFAULT_WORKDIR_OFFSET",
    "ArtifactNotFoundError",
    "InstallationError",
    "bundle_path_to_id",
    "delay",
    "load_installation",
    "locate_artifact",
    "normalize_installation",
    "replicate_agents",
    "single_agent_installation",
]
