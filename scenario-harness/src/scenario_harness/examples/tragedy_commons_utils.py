"""Shared setup for the tragedy of the commons suite."""

from __future__ import annotations

from scenario_harness.config.seed import gen_config
from scenario_harness.examples import EXAMPLES_WORKDIR_OFFSET
from scenario_harness.runtime.artifacts import locate_artifact
from scenario_harness.runtime.installation import InstallAgentsHapps
from scenario_harness.runtime.util import delay

tragedy_commons_dna = locate_artifact(
    __file__, *EXAMPLES_WORKDIR_OFFSET, "tragedy-commons.dna"
)

config = gen_config()

installation: InstallAgentsHapps = [
    # one agent
    [
        [
            tragedy_commons_dna,  # holding this bundle
        ]
    ]
]

sleep = delay
