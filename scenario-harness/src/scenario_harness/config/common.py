from __future__ import annotations

import os
import socket
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

TMPDIR_ENV = "SCENARIO_HARNESS_TMPDIR"


@dataclass(frozen=True)
class ConfigSeedArgs:
    player_name: str
    scenario_name: str
    uid: str
    admin_interface_port: int
    config_dir: Path


def temp_dir_base() -> Path:
    raw = os.environ.get(TMPDIR_ENV)
    base = Path(raw) if raw else Path(tempfile.gettempdir()) / "scenario-harness"
    return mkdir_idempotent(base)


def mkdir_idempotent(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def temp_dir() -> Path:
    return Path(tempfile.mkdtemp(dir=temp_dir_base()))


def _free_port(host: str = "127.0.0.1") -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def local_config_seed_args(*, config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Partial seed args for a conductor on this machine.

    The port is released before the conductor binds it, so two players
    picking ports at the same moment can race.
    """
    return {
        "admin_interface_port": _free_port(),
        "config_dir": Path(config_dir) if config_dir is not None else temp_dir(),
    }
