from __future__ import annotations

from pathlib import Path

import pytest

from scenario_harness.config.common import ConfigSeedArgs
from scenario_harness.config.logger import QUIET_LOGGER_CONFIG, SANE_LOGGER_CONFIG
from scenario_harness.config.seed import (
    DEFAULT_BOOTSTRAP_SERVICE,
    NetworkConfig,
    gen_config,
    load_config_seed,
)
from scenario_harness.spec.spec_loader import SpecValidationError


def _args(tmp_path: Path, name: str = "player0") -> ConfigSeedArgs:
    return ConfigSeedArgs(
        player_name=name,
        scenario_name="scenario",
        uid="uid-1",
        admin_interface_port=4444,
        config_dir=tmp_path / name,
    )


def test_gen_config_produces_conductor_config(tmp_path: Path) -> None:
    seed = gen_config()

    config = seed(_args(tmp_path))

    assert config["environment_path"] == str(tmp_path / "player0")
    assert config["admin_interfaces"] == [{"driver": {"type": "websocket", "port": 4444}}]
    assert config["network"]["network_type"] == "quic_bootstrap"
    assert config["network"]["bootstrap_service"] == DEFAULT_BOOTSTRAP_SERVICE
    assert config["uid"] == "uid-1"
    assert config["player_name"] == "player0"
    assert "logger" not in config


def test_seed_is_reusable_across_players(tmp_path: Path) -> None:
    seed = gen_config()

    a = seed(_args(tmp_path, "alice"))
    b = seed(_args(tmp_path, "bob"))

    assert a["player_name"] == "alice"
    assert b["player_name"] == "bob"
    assert a["environment_path"] != b["environment_path"]


def test_gen_config_with_logger_and_extras(tmp_path: Path) -> None:
    seed = gen_config(
        network=NetworkConfig(network_type="mem", bootstrap_service=None, transport_pool=()),
        logger=SANE_LOGGER_CONFIG,
        db_sync_level="Off",
    )

    config = seed(_args(tmp_path))

    assert config["network"] == {
        "network_type": "mem",
        "bootstrap_service": None,
        "transport_pool": [],
    }
    assert config["logger"]["state_dump"] is True
    assert config["db_sync_level"] == "Off"


def test_load_config_seed_from_yaml(tmp_path: Path) -> None:
    p = tmp_path / "seed.yaml"
    p.write_text(
        "network:\n  network_type: quic_mdns\nlogger: quiet\nextra:\n  keystore: lair\n",
        encoding="utf-8",
    )

    seed = load_config_seed(p)

    assert seed.network.network_type == "quic_mdns"
    assert seed.network.bootstrap_service == DEFAULT_BOOTSTRAP_SERVICE
    assert seed.logger == QUIET_LOGGER_CONFIG
    assert seed(_args(tmp_path))["keystore"] == "lair"


def test_load_config_seed_rejects_unknown_network_type(tmp_path: Path) -> None:
    p = tmp_path / "seed.json"
    p.write_text('{"network": {"network_type": "carrier-pigeon"}}', encoding="utf-8")

    with pytest.raises(SpecValidationError, match=r"network/network_type"):
        load_config_seed(p)


def test_network_config_rejects_unknown_type() -> None:
    with pytest.raises(ValueError, match=r"network_type must be one of"):
        NetworkConfig(network_type="smoke-signals")
