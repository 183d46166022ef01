"""In-process host API handed to zome functions.

Cells of one bundle hash share a `Dht` for the lifetime of a scenario; each
cell also keeps its own `SourceChain`. Entries are stored as canonical JSON
copies, so callers never alias stored data.
"""

from __future__ import annotations

import itertools
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from scenario_harness.hashes import (
    ENTRY_HASH_PREFIX,
    HEADER_HASH_PREFIX,
    json_dumps_canonical,
    typed_hash,
)

logger = logging.getLogger(__name__)

ANCHOR_ENTRY_TYPE = "anchor"
ANCHOR_LINK_TAG = "anchor"


class ZomeError(RuntimeError):
    pass


@dataclass(frozen=True)
class AgentInfo:
    agent_initial_pubkey: str
    agent_latest_pubkey: str


@dataclass(frozen=True)
class Element:
    header_hash: str
    entry_hash: str
    entry_type: str
    entry: Any
    author: str
    seq: int


@dataclass(frozen=True)
class Link:
    base: str
    target: str
    tag: str
    author: str
    header_hash: str
    seq: int


def wire_copy(entry: Any) -> Any:
    try:
        return json.loads(json_dumps_canonical(entry))
    except (TypeError, ValueError) as e:
        raise ZomeError(f"entry is not serializable: {e}") from e


def entry_hash_of(entry: Any) -> str:
    return typed_hash(ENTRY_HASH_PREFIX, wire_copy(entry))


class Dht:
    def __init__(self, dna_hash: str) -> None:
        self.dna_hash = dna_hash
        self._seq = itertools.count(1)
        self._by_entry: Dict[str, Element] = {}
        self._by_header: Dict[str, Element] = {}
        self._links: Dict[str, List[Link]] = {}

    def next_seq(self) -> int:
        return next(self._seq)

    def publish(self, element: Element) -> None:
        self._by_header[element.header_hash] = element
        # First write wins for an entry hash; later identical writes only add headers.
        self._by_entry.setdefault(element.entry_hash, element)

    def get(self, address: str) -> Optional[Element]:
        return self._by_entry.get(address) or self._by_header.get(address)

    def add_link(self, link: Link) -> None:
        self._links.setdefault(link.base, []).append(link)

    def get_links(self, base: str, tag: Optional[str] = None) -> List[Link]:
        links = self._links.get(base, [])
        if tag is None:
            return list(links)
        return [lk for lk in links if lk.tag == tag]


@dataclass
class SourceChain:
    agent_pub_key: str
    elements: List[Element] = field(default_factory=list)

    def append(self, element: Element) -> None:
        self.elements.append(element)

    def query(self, entry_type: Optional[str] = None) -> List[Element]:
        if entry_type is None:
            return list(self.elements)
        return [el for el in self.elements if el.entry_type == entry_type]


class ZomeContext:
    def __init__(
        self,
        *,
        agent_pub_key: str,
        zome_name: str,
        chain: SourceChain,
        dht: Dht,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.agent_pub_key = agent_pub_key
        self.zome_name = zome_name
        self.chain = chain
        self.dht = dht
        self.properties = dict(properties or {})

    @property
    def dna_hash(self) -> str:
        return self.dht.dna_hash

    def agent_info(self) -> AgentInfo:
        return AgentInfo(
            agent_initial_pubkey=self.agent_pub_key,
            agent_latest_pubkey=self.agent_pub_key,
        )

    def hash_entry(self, entry: Any) -> str:
        return entry_hash_of(entry)

    def create_entry(self, entry: Any, *, entry_type: str) -> str:
        stored = wire_copy(entry)
        seq = self.dht.next_seq()
        entry_hash = typed_hash(ENTRY_HASH_PREFIX, stored)
        header_hash = typed_hash(
            HEADER_HASH_PREFIX,
            {"author": self.agent_pub_key, "entry_hash": entry_hash, "seq": seq},
        )
        element = Element(
            header_hash=header_hash,
            entry_hash=entry_hash,
            entry_type=entry_type,
            entry=stored,
            author=self.agent_pub_key,
            seq=seq,
        )
        self.chain.append(element)
        self.dht.publish(element)
        logger.debug("create_entry %s %s by %s", entry_type, entry_hash, self.agent_pub_key)
        return header_hash

    def get(self, address: str) -> Optional[Element]:
        return self.dht.get(address)

    def must_get_entry(self, address: str, *, entry_type: Optional[str] = None) -> Any:
        element = self.get(address)
        if element is None:
            raise ZomeError(f"entry not found: {address}")
        if entry_type is not None and element.entry_type != entry_type:
            raise ZomeError(f"the targeted entry is not {entry_type}: {address}")
        return wire_copy(element.entry)

    def create_link(self, base: str, target: str, tag: str = "") -> str:
        seq = self.dht.next_seq()
        header_hash = typed_hash(
            HEADER_HASH_PREFIX,
            {"author": self.agent_pub_key, "base": base, "target": target, "tag": tag, "seq": seq},
        )
        self.dht.add_link(
            Link(
                base=base,
                target=target,
                tag=tag,
                author=self.agent_pub_key,
                header_hash=header_hash,
                seq=seq,
            )
        )
        return header_hash

    def get_links(self, base: str, tag: Optional[str] = None) -> List[Link]:
        return self.dht.get_links(base, tag)

    def anchor(self, anchor_type: str, anchor_text: Optional[str] = None) -> str:
        """Return the entry hash of the anchor, creating it on first use.

        Named anchors are linked from their type's root anchor, so the root
        lists every anchor text created under it.
        """
        root = {"anchor_type": anchor_type, "anchor_text": None}
        root_hash = self.hash_entry(root)
        if self.get(root_hash) is None:
            self.create_entry(root, entry_type=ANCHOR_ENTRY_TYPE)
        if anchor_text is None:
            return root_hash

        named = {"anchor_type": anchor_type, "anchor_text": anchor_text}
        named_hash = self.hash_entry(named)
        if self.get(named_hash) is None:
            self.create_entry(named, entry_type=ANCHOR_ENTRY_TYPE)
            self.create_link(root_hash, named_hash, ANCHOR_LINK_TAG)
        return named_hash

    def query(self, entry_type: Optional[str] = None) -> List[Element]:
        return self.chain.query(entry_type)

    def debug(self, msg: str, *args: Any) -> None:
        logger.debug("[%s] " + msg, self.zome_name, *args)
