"""Conductor configuration: seed factories, seed args and logger presets."""

from __future__ import annotations

from scenario_harness.config.common import (
    ConfigSeedArgs,
    local_config_seed_args,
    mkdir_idempotent,
    temp_dir,
)
from scenario_harness.config.logger import (
    QUIET_LOGGER_CONFIG,
    SANE_LOGGER_CONFIG,
    LoggerConfig,
    LogRule,
    apply_logger_config,
    remove_logger_config,
)
from scenario_harness.config.seed import ConfigSeed, NetworkConfig, gen_config, load_config_seed

__all__ = [
    "ConfigSeed",
    "ConfigSeedArgs",
    "LogRule",
    "LoggerConfig",
    "NetworkConfig",
    "QUIET_LOGGER_CONFIG",
    "SANE_LOGGER_CONFIG",
    "apply_logger_config",
    "gen_config",
    "load_config_seed",
    "local_config_seed_args",
    "mkdir_idempotent",
    "remove_logger_config",
    "temp_dir",
]
