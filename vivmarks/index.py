from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from .errors import ParseError
from .log import get_logger
from .model import (
    Address,
    BookmarksData,
    FieldKind,
    FieldTag,
    FolderNode,
    MetaAddress,
    Node,
    PrimaryAddress,
    UrlNode,
)

log = get_logger(__name__)

_BOOKMARK_KINDS = {
    None: FieldKind.BOOKMARK,
    FieldTag.DESCRIPTION: FieldKind.BOOKMARK_DESCRIPTION,
    FieldTag.NICKNAME: FieldKind.BOOKMARK_SHORT_NAME,
}

_FOLDER_KINDS = {
    None: FieldKind.FOLDER,
    FieldTag.DESCRIPTION: FieldKind.FOLDER_DESCRIPTION,
    FieldTag.NICKNAME: FieldKind.FOLDER_SHORT_NAME,
}


@dataclass(frozen=True)
class IndexEntry:
    address: Address
    node: Node
    kind: FieldKind

    @property
    def key(self) -> str:
        return str(self.address)


def kind_of(node: Node, tag: Optional[FieldTag] = None) -> FieldKind:
    if isinstance(node, UrlNode):
        return _BOOKMARK_KINDS[tag]
    if isinstance(node, FolderNode):
        return _FOLDER_KINDS[tag]
    raise TypeError(f"unhandled node variant {type(node).__name__}")


def build_index(data: BookmarksData) -> Dict[Address, IndexEntry]:
    """Map every editable field of the visible roots to its node and kind.

    Walks bookmark bar, other and synced pre-order. Each node gets its primary
    address; populated Description/Nickname meta fields get a composite one.
    The tree is never modified. A node object reached twice is a cycle and
    fails the build.
    """
    out: Dict[Address, IndexEntry] = {}
    visited: Set[int] = set()
    for root in data.visible_roots():
        _index_node(root, out, visited)
    return out


def _index_node(node: Node, out: Dict[Address, IndexEntry], visited: Set[int]) -> None:
    if id(node) in visited:
        raise ParseError(f"Bookmark tree contains a cycle at guid {node.guid}")
    visited.add(id(node))

    _register(out, PrimaryAddress(node.guid), node, None)
    for tag in FieldTag:
        if node.meta_value(tag):
            _register(out, MetaAddress(node.guid, tag), node, tag)

    if isinstance(node, FolderNode):
        for child in node.children:
            _index_node(child, out, visited)
    elif not isinstance(node, UrlNode):
        raise TypeError(f"unhandled node variant {type(node).__name__}")


def _register(out: Dict[Address, IndexEntry], address: Address, node: Node, tag: Optional[FieldTag]) -> None:
    if address in out:
        raise ParseError(f"Duplicate address key {address}")
    out[address] = IndexEntry(address=address, node=node, kind=kind_of(node, tag))


class AddressIndex:
    """Lookup table over a built index, addressable by ``Address`` or its string key."""

    def __init__(self, entries: Dict[Address, IndexEntry]):
        self._entries = entries
        self._by_key: Dict[str, IndexEntry] = {}
        for address, entry in entries.items():
            key = str(address)
            if key in self._by_key:
                raise ParseError(f"Address key collision: {key}")
            self._by_key[key] = entry

    @classmethod
    def build(cls, data: BookmarksData) -> "AddressIndex":
        idx = cls(build_index(data))
        log.debug("Indexed %d address keys.", len(idx))
        return idx

    def get(self, key: Union[str, Address]) -> Optional[IndexEntry]:
        if isinstance(key, str):
            return self._by_key.get(key)
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (str, PrimaryAddress, MetaAddress)):
            return self.get(key) is not None
        return False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries.values())

    def keys(self) -> List[str]:
        return list(self._by_key)

    def kinds(self) -> Dict[str, FieldKind]:
        return {k: e.kind for k, e in self._by_key.items()}

    def entries_for(self, guid: str) -> List[Tuple[str, FieldKind]]:
        return [(k, e.kind) for k, e in self._by_key.items() if e.node.guid == guid]
