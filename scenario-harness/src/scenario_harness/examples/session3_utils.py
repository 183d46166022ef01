"""Shared setup for the suites that run against the `test_conf` bundle."""

from __future__ import annotations

from scenario_harness.config.seed import gen_config
from scenario_harness.examples import EXAMPLES_WORKDIR_OFFSET
from scenario_harness.runtime.artifacts import locate_artifact
from scenario_harness.runtime.installation import InstallAgentsHapps
from scenario_harness.runtime.util import delay

test_conf_dna = locate_artifact(__file__, *EXAMPLES_WORKDIR_OFFSET, "test_conf.dna")

config = gen_config()

installation: InstallAgentsHapps = [
    # one agent
    [
        [
            test_conf_dna,  # holding this bundle
        ]
    ]
]

sleep = delay
