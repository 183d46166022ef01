"""The per-scenario test network: players, installed apps and their cells."""

from __future__ import annotations

import asyncio
import inspect
import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from scenario_harness.config.common import ConfigSeedArgs, local_config_seed_args
from scenario_harness.config.seed import ConfigSeed
from scenario_harness.hashes import new_agent_pub_key
from scenario_harness.runtime.hdk import Dht, SourceChain, ZomeContext, ZomeError, wire_copy
from scenario_harness.runtime.installation import InstallAgentsHapps, normalize_installation
from scenario_harness.runtime.util import serial_gather, serial_gather_mapping
from scenario_harness.runtime.zomes import Zome, ZomeLoadError, load_zome
from scenario_harness.spec.bundle import ArtifactBundle, load_bundle

logger = logging.getLogger(__name__)

CONDUCTOR_CONFIG_FILE = "conductor-config.yml"

_NO_PAYLOAD = object()


class PlayerError(RuntimeError):
    pass


@dataclass(frozen=True)
class CellId:
    dna_hash: str
    agent_pub_key: str


class Cell:
    def __init__(
        self,
        *,
        player: "Player",
        bundle: ArtifactBundle,
        dna_hash: str,
        agent_pub_key: str,
        zomes: Mapping[str, Zome],
        dht: Dht,
    ) -> None:
        self.player = player
        self.bundle = bundle
        self.cell_id = CellId(dna_hash=dna_hash, agent_pub_key=agent_pub_key)
        self.zomes = dict(zomes)
        self.chain = SourceChain(agent_pub_key=agent_pub_key)
        self._dht = dht

    @property
    def dna_hash(self) -> str:
        return self.cell_id.dna_hash

    @property
    def agent_pub_key(self) -> str:
        return self.cell_id.agent_pub_key

    async def call(self, zome_name: str, fn_name: str, payload: Any = _NO_PAYLOAD) -> Any:
        """Call an extern; payload and result cross a serialization boundary."""
        self.player.require_running()
        zome = self.zomes.get(zome_name)
        if zome is None:
            raise ZomeError(f"no zome {zome_name!r} in bundle {self.bundle.manifest.name!r}")
        try:
            fn = zome.extern_fn(fn_name)
        except ZomeLoadError as e:
            raise ZomeError(str(e)) from e

        ctx = ZomeContext(
            agent_pub_key=self.agent_pub_key,
            zome_name=zome_name,
            chain=self.chain,
            dht=self._dht,
            properties=self.bundle.manifest.properties,
        )
        if payload is _NO_PAYLOAD:
            result = fn(ctx)
        else:
            result = fn(ctx, wire_copy(payload))
        if inspect.isawaitable(result):
            result = await result
        # Let other scenario tasks interleave between calls.
        await asyncio.sleep(0)
        return wire_copy(result)


@dataclass(frozen=True)
class InstalledHapp:
    happ_id: str
    agent_pub_key: str
    cells: Tuple[Cell, ...]


class Player:
    def __init__(
        self,
        *,
        name: str,
        seed: ConfigSeed,
        network: "Network",
    ) -> None:
        self.name = name
        self.seed = seed
        self._network = network
        seed_args = local_config_seed_args()
        self.config_dir: Path = seed_args["config_dir"]
        self.admin_interface_port: int = seed_args["admin_interface_port"]
        self.conductor_config: Dict[str, Any] = seed(
            ConfigSeedArgs(
                player_name=name,
                scenario_name=network.scenario_name,
                uid=network.uid,
                admin_interface_port=self.admin_interface_port,
                config_dir=self.config_dir,
            )
        )
        self.happs: List[InstalledHapp] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def require_running(self) -> None:
        if not self._running:
            raise PlayerError(f"player {self.name!r} is not running")

    async def startup(self) -> None:
        if self._running:
            return
        self.config_dir.mkdir(parents=True, exist_ok=True)
        (self.config_dir / CONDUCTOR_CONFIG_FILE).write_text(
            yaml.safe_dump(self.conductor_config, sort_keys=True), encoding="utf-8"
        )
        self._running = True
        logger.info("player %s started (admin port %s)", self.name, self.admin_interface_port)

    async def shutdown(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info("player %s stopped", self.name)

    async def install_happ(
        self,
        paths: Sequence[Path],
        *,
        agent_pub_key: Optional[str] = None,
        happ_id: Optional[str] = None,
    ) -> InstalledHapp:
        self.require_running()
        agent = agent_pub_key or new_agent_pub_key()
        cells: List[Cell] = []
        for path in paths:
            bundle = self._network.bundle(path)
            dna_hash = bundle.dna_hash(self._network.uid)
            zomes = {
                z.name: load_zome(z, bundle_dir=bundle.path.parent) for z in bundle.manifest.zomes
            }
            cells.append(
                Cell(
                    player=self,
                    bundle=bundle,
                    dna_hash=dna_hash,
                    agent_pub_key=agent,
                    zomes=zomes,
                    dht=self._network.dht(dna_hash),
                )
            )
        happ = InstalledHapp(
            happ_id=happ_id or f"{self.name}-happ-{len(self.happs)}",
            agent_pub_key=agent,
            cells=tuple(cells),
        )
        self.happs.append(happ)
        logger.debug("player %s installed %s (%d cells)", self.name, happ.happ_id, len(cells))
        return happ

    async def install_agents_happs(
        self, installation: InstallAgentsHapps
    ) -> List[List[InstalledHapp]]:
        """Install apps per agent; the result mirrors the descriptor's order."""
        self.require_running()
        normalized = normalize_installation(installation)
        out: List[List[InstalledHapp]] = []
        for slot in normalized:
            agent = new_agent_pub_key()
            out.append([await self.install_happ(group, agent_pub_key=agent) for group in slot])
        return out


PlayerConfigs = Union[Sequence[ConfigSeed], Mapping[str, ConfigSeed]]


class Network:
    """Handle passed to every scenario as its first argument."""

    def __init__(self, *, scenario_name: str, uid: Optional[str] = None) -> None:
        self.scenario_name = scenario_name
        self.uid = uid or uuid.uuid4().hex
        self._players: List[Player] = []
        self._dhts: Dict[str, Dht] = {}
        self._bundles: Dict[Path, ArtifactBundle] = {}

    @property
    def all_players(self) -> List[Player]:
        return list(self._players)

    def bundle(self, path: Path) -> ArtifactBundle:
        key = Path(path)
        if key not in self._bundles:
            self._bundles[key] = load_bundle(key)
        return self._bundles[key]

    def dht(self, dna_hash: str) -> Dht:
        if dna_hash not in self._dhts:
            self._dhts[dna_hash] = Dht(dna_hash)
        return self._dhts[dna_hash]

    def _new_player(self, name: str, seed: ConfigSeed) -> Player:
        if not callable(seed):
            raise PlayerError(f"config for player {name!r} must be a ConfigSeed")
        player = Player(name=name, seed=seed, network=self)
        self._players.append(player)
        return player

    async def _spawn(self, name: str, seed: ConfigSeed, start: bool) -> Player:
        player = self._new_player(name, seed)
        if start:
            await player.startup()
        return player

    async def players(
        self, configs: PlayerConfigs, *, start: bool = True
    ) -> Union[List[Player], Dict[str, Player]]:
        """Spawn one player per config, in order.

        A sequence yields a list of players named `player0`, `player1`, ...;
        a mapping yields a dict keyed (and named) like the mapping.
        """
        if isinstance(configs, Mapping):
            return await serial_gather_mapping(
                {name: self._spawn(str(name), seed, start) for name, seed in configs.items()}
            )
        offset = len(self._players)
        return await serial_gather(
            self._spawn(f"player{offset + i}", seed, start) for i, seed in enumerate(configs)
        )

    async def consistency(self) -> None:
        """Wait until published data is visible to every player.

        All players share in-process DHTs, so one scheduler pass is enough.
        """
        await asyncio.sleep(0)

    async def shutdown(self) -> None:
        for player in self._players:
            await player.shutdown()
        for player in self._players:
            shutil.rmtree(player.config_dir, ignore_errors=True)
