"""Installation descriptors: which agents install which artifact bundles.

Shape: agents -> app groups -> artifact paths. Order is meaningful at every
level (the first slot becomes the first agent of the player), and the same
path may appear any number of times.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from scenario_harness.runtime.artifacts import PathLike
from scenario_harness.spec.schemas import INSTALLATION_SCHEMA_V1
from scenario_harness.spec.spec_loader import load_yaml_or_json_any, validate_against_schema

AppGroup = Sequence[PathLike]
AgentSlot = Sequence[AppGroup]
InstallAgentsHapps = Sequence[AgentSlot]

NormalizedInstallation = Tuple[Tuple[Tuple[Path, ...], ...], ...]


class InstallationError(RuntimeError):
    pass


def single_agent_installation(*paths: PathLike) -> List[List[List[PathLike]]]:
    """One agent installing one app made of `paths`."""
    return [[list(paths)]]


def replicate_agents(installation: InstallAgentsHapps, count: int) -> List[List[List[PathLike]]]:
    """Repeat the agent slots of `installation` `count` times, in order."""
    out: List[List[List[PathLike]]] = []
    for _ in range(int(count)):
        for slot in installation:
            out.append([list(group) for group in slot])
    return out


def load_installation(path: Path, *, base_dir: Optional[Path] = None) -> List[List[List[Path]]]:
    data = load_yaml_or_json_any(path)
    validate_against_schema(data, INSTALLATION_SCHEMA_V1, where=str(path))

    root = Path(base_dir) if base_dir is not None else Path(path).resolve().parent
    out: List[List[List[Path]]] = []
    for slot in data:
        groups: List[List[Path]] = []
        for group in slot:
            resolved: List[Path] = []
            for raw in group:
                p = Path(raw)
                resolved.append(p if p.is_absolute() else Path(os.path.normpath(root / p)))
            groups.append(resolved)
        out.append(groups)
    return out


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _as_path(value: object, *, where: str) -> Path:
    if isinstance(value, Path):
        return value
    if isinstance(value, (str, os.PathLike)):
        raw = os.fspath(value)
        if isinstance(raw, str) and raw.strip():
            return Path(raw)
    raise InstallationError(f"{where}: artifact path must be a non-empty path, got {value!r}")


def normalize_installation(raw: Union[InstallAgentsHapps, object]) -> NormalizedInstallation:
    if not _is_sequence(raw):
        raise InstallationError(f"installation must be a sequence of agents, got {type(raw).__name__}")

    agents: List[Tuple[Tuple[Path, ...], ...]] = []
    for a_idx, slot in enumerate(raw):  # type: ignore[arg-type]
        if not _is_sequence(slot):
            raise InstallationError(f"installation[{a_idx}] must be a sequence of app groups")
        groups: List[Tuple[Path, ...]] = []
        for g_idx, group in enumerate(slot):
            where = f"installation[{a_idx}][{g_idx}]"
            if not _is_sequence(group):
                raise InstallationError(f"{where} must be a sequence of artifact paths")
            groups.append(
                tuple(_as_path(p, where=f"{where}[{p_idx}]") for p_idx, p in enumerate(group))
            )
        agents.append(tuple(groups))
    return tuple(agents)
