from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from scenario_harness.config.common import ConfigSeedArgs
from scenario_harness.config.logger import LOGGER_PRESETS, LoggerConfig
from scenario_harness.spec.schemas import CONFIG_SEED_SCHEMA_V1
from scenario_harness.spec.spec_loader import load_yaml_or_json, validate_against_schema

NETWORK_TYPES = ("quic_bootstrap", "quic_mdns", "mem")
DEFAULT_BOOTSTRAP_SERVICE = "https://bootstrap-staging.holo.host"


@dataclass(frozen=True)
class NetworkConfig:
    network_type: str = "quic_bootstrap"
    bootstrap_service: Optional[str] = DEFAULT_BOOTSTRAP_SERVICE
    transport_pool: Tuple[Dict[str, Any], ...] = ({"type": "quic"},)

    def __post_init__(self) -> None:
        if self.network_type not in NETWORK_TYPES:
            raise ValueError(
                f"network_type must be one of {', '.join(NETWORK_TYPES)} (got {self.network_type!r})"
            )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "network_type": self.network_type,
            "bootstrap_service": self.bootstrap_service,
            "transport_pool": [dict(t) for t in self.transport_pool],
        }


@dataclass(frozen=True)
class ConfigSeed:
    """Turns per-player seed args into a conductor config."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    logger: Optional[LoggerConfig] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __call__(self, args: ConfigSeedArgs) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "environment_path": str(args.config_dir),
            "admin_interfaces": [
                {"driver": {"type": "websocket", "port": int(args.admin_interface_port)}}
            ],
            "network": self.network.as_dict(),
            "uid": args.uid,
            "player_name": args.player_name,
            "scenario_name": args.scenario_name,
        }
        if self.logger is not None:
            config["logger"] = self.logger.as_dict()
        config.update(dict(self.extra))
        return config


def gen_config(
    *,
    network: Optional[NetworkConfig] = None,
    logger: Optional[LoggerConfig] = None,
    **extra: Any,
) -> ConfigSeed:
    return ConfigSeed(network=network or NetworkConfig(), logger=logger, extra=dict(extra))


def load_config_seed(path: Path) -> ConfigSeed:
    data = load_yaml_or_json(path)
    validate_against_schema(data, CONFIG_SEED_SCHEMA_V1, where=str(path))

    network: Optional[NetworkConfig] = None
    raw_network = data.get("network")
    if isinstance(raw_network, dict):
        defaults = NetworkConfig()
        pool = raw_network.get("transport_pool")
        network = NetworkConfig(
            network_type=str(raw_network.get("network_type") or defaults.network_type),
            bootstrap_service=raw_network.get("bootstrap_service", defaults.bootstrap_service),
            transport_pool=tuple(dict(t) for t in pool) if pool else defaults.transport_pool,
        )

    logger_name = data.get("logger")
    logger = LOGGER_PRESETS[logger_name] if logger_name else None
    return gen_config(network=network, logger=logger, **dict(data.get("extra") or {}))
