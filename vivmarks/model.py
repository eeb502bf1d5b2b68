from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Chromium stores times as microseconds since 1601-01-01 UTC.
_WEBKIT_EPOCH_DELTA_S = 11_644_473_600

PRIMARY_ROOT = "bookmark_bar"
SECONDARY_ROOT = "other"
SYNCED_ROOT = "synced"
TRASH_ROOT = "trash"

# Traversal order for the index and for bookmark listings. Trash is never visited.
VISIBLE_ROOTS = (PRIMARY_ROOT, SECONDARY_ROOT, SYNCED_ROOT)


class NodeType(str, Enum):
    URL = "url"
    FOLDER = "folder"


class FieldTag(str, Enum):
    DESCRIPTION = "Description"
    NICKNAME = "Nickname"


class FieldKind(str, Enum):
    BOOKMARK = "Bookmark"
    BOOKMARK_DESCRIPTION = "Bookmark Description"
    BOOKMARK_SHORT_NAME = "Bookmark Short Name"
    FOLDER = "Folder"
    FOLDER_DESCRIPTION = "Folder Description"
    FOLDER_SHORT_NAME = "Folder Short Name"

    @property
    def tag(self) -> Optional[FieldTag]:
        if self in (FieldKind.BOOKMARK_DESCRIPTION, FieldKind.FOLDER_DESCRIPTION):
            return FieldTag.DESCRIPTION
        if self in (FieldKind.BOOKMARK_SHORT_NAME, FieldKind.FOLDER_SHORT_NAME):
            return FieldTag.NICKNAME
        return None


@dataclass
class Node(ABC):
    id: str
    guid: str
    name: str
    date_added: str = "0"
    date_modified: Optional[str] = None
    meta_info: Optional[Dict[str, Any]] = None
    # Source JSON object as loaded. Keys not modeled above survive a save untouched.
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)
    # Modeled values as they were right after loading; unchanged ones keep their raw form.
    loaded: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    @abstractmethod
    def node_type(self) -> NodeType:
        ...

    @property
    def description(self) -> str:
        return self.meta_value(FieldTag.DESCRIPTION)

    @property
    def short_name(self) -> str:
        return self.meta_value(FieldTag.NICKNAME)

    def meta_value(self, tag: FieldTag) -> str:
        v = (self.meta_info or {}).get(tag.value)
        return v if isinstance(v, str) else ""

    def set_meta(self, tag: FieldTag, value: str) -> None:
        if self.meta_info is None:
            self.meta_info = {}
        self.meta_info[tag.value] = value

    def modeled_values(self) -> Dict[str, Any]:
        return {
            "date_added": self.date_added,
            "date_modified": self.date_modified,
            "guid": self.guid,
            "id": self.id,
            "meta_info": dict(self.meta_info) if self.meta_info is not None else None,
            "name": self.name,
            "type": self.node_type.value,
        }

    def mark_loaded(self) -> None:
        self.loaded = self.modeled_values()

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.raw)
        for key, value in self.modeled_values().items():
            if key in self.loaded and self.loaded[key] == value:
                continue
            if value is None:
                continue
            out[key] = value
        return out


@dataclass
class UrlNode(Node):
    url: str = ""

    @property
    def node_type(self) -> NodeType:
        return NodeType.URL

    def modeled_values(self) -> Dict[str, Any]:
        out = super().modeled_values()
        out["url"] = self.url
        return out


@dataclass
class FolderNode(Node):
    children: List[Node] = field(default_factory=list)

    @property
    def node_type(self) -> NodeType:
        return NodeType.FOLDER

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["children"] = [c.to_dict() for c in self.children]
        return out


@dataclass
class BookmarksData:
    roots: Dict[str, FolderNode]
    # Top-level keys besides "roots" (checksum, version, sync_metadata, ...).
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def bookmark_bar(self) -> FolderNode:
        return self.roots[PRIMARY_ROOT]

    @property
    def other(self) -> FolderNode:
        return self.roots[SECONDARY_ROOT]

    @property
    def synced(self) -> FolderNode:
        return self.roots[SYNCED_ROOT]

    @property
    def trash(self) -> Optional[FolderNode]:
        return self.roots.get(TRASH_ROOT)

    def visible_roots(self) -> List[FolderNode]:
        return [self.roots[name] for name in VISIBLE_ROOTS]

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.raw)
        roots = dict(out.get("roots") or {})
        for name, node in self.roots.items():
            roots[name] = node.to_dict()
        out["roots"] = roots
        return out


@dataclass(frozen=True)
class PrimaryAddress:
    """Addresses a node's name (and url, for bookmarks)."""

    guid: str

    def __str__(self) -> str:
        return self.guid


@dataclass(frozen=True)
class MetaAddress:
    """Addresses exactly one meta field of a node."""

    guid: str
    tag: FieldTag

    def __str__(self) -> str:
        return f"{self.guid}_{self.tag.value}"


Address = Union[PrimaryAddress, MetaAddress]

_TAGS_BY_VALUE = {t.value: t for t in FieldTag}


def parse_address(key: str) -> Address:
    guid, sep, tag = key.rpartition("_")
    if sep and guid and tag in _TAGS_BY_VALUE:
        return MetaAddress(guid, _TAGS_BY_VALUE[tag])
    return PrimaryAddress(key)


def chrome_time_now() -> str:
    return str(int((time.time() + _WEBKIT_EPOCH_DELTA_S) * 1_000_000))


def chrome_time_to_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        us = int(value)
    except (TypeError, ValueError):
        return None
    if us <= 0:
        return None
    return datetime.fromtimestamp(us / 1_000_000 - _WEBKIT_EPOCH_DELTA_S, tz=timezone.utc)
