from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .directives import ProjectionOptions
from .errors import BookmarksIOError, KeyNotFoundError, NotLoadedError
from .index import AddressIndex, IndexEntry
from .loader import backup_bookmarks_file, read_bookmarks, write_bookmarks
from .log import get_logger
from .markdown import render_markdown
from .model import (
    Address,
    BookmarksData,
    FieldKind,
    FieldTag,
    FolderNode,
    Node,
    UrlNode,
    chrome_time_now,
)

log = get_logger(__name__)


class BookmarkPatch(BaseModel):
    """Partial edit payload. Empty or missing fields leave the node unchanged."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: Optional[str] = Field(None, description="New name of the bookmark or folder.")
    url: Optional[str] = Field(None, description="New url; bookmarks only.")
    description: Optional[str] = Field(None, description="New Description meta field.")
    short_name: Optional[str] = Field(None, alias="shortName", description="New Nickname meta field.")


@dataclass(frozen=True)
class EditDefaults:
    """Initial values for an edit form opened on an address key."""

    kind: FieldKind
    title: str
    url: str = ""


class BookmarkStore:
    """Owns one loaded bookmark tree and the address index derived from it.

    ``load``, ``rebuild_index`` and ``apply`` run under one re-entrant lock so
    a mutation, its save and the index rebuild never interleave with another.
    """

    def __init__(self, path: Union[str, Path], *, backup: bool = False):
        self.path = Path(path)
        self.backup = backup
        self.data: Optional[BookmarksData] = None
        self.index: Optional[AddressIndex] = None
        self._lock = threading.RLock()
        self._backed_up = False

    @property
    def loaded(self) -> bool:
        return self.data is not None

    def load(self) -> BookmarksData:
        with self._lock:
            # Nothing is replaced until both the tree and its index are built.
            data = read_bookmarks(self.path)
            index = AddressIndex.build(data)
            self.data = data
            self.index = index
            self._backed_up = False
            log.info("Indexed %d address keys from %s", len(index), self.path)
            return data

    reload = load

    def rebuild_index(self) -> AddressIndex:
        with self._lock:
            self.index = AddressIndex.build(self._require_data())
            return self.index

    def lookup(self, key: Union[str, Address]) -> IndexEntry:
        entry = self._require_index().get(key)
        if entry is None:
            raise KeyNotFoundError(f"Unknown address key: {key}")
        return entry

    def edit_defaults(self, key: Union[str, Address]) -> EditDefaults:
        entry = self.lookup(key)
        node, kind = entry.node, entry.kind
        if kind is FieldKind.BOOKMARK:
            if not isinstance(node, UrlNode):
                raise TypeError(f"bookmark key {entry.key} points at a {node.node_type.value}")
            return EditDefaults(kind=kind, title=node.name, url=node.url)
        if kind is FieldKind.FOLDER:
            return EditDefaults(kind=kind, title=node.name)
        tag = kind.tag
        if tag is None:
            raise TypeError(f"unhandled field kind {kind}")
        return EditDefaults(kind=kind, title=node.meta_value(tag))

    def entries(self) -> List[IndexEntry]:
        return list(self._require_index())

    def all_bookmarks(self) -> List[UrlNode]:
        out: List[UrlNode] = []
        for root in self._require_data().visible_roots():
            _collect_urls(root, out)
        return out

    def render(self, options: Optional[ProjectionOptions] = None) -> str:
        data = self._require_data()
        opts = options or ProjectionOptions()
        bar = data.bookmark_bar
        return render_markdown(
            bar.children,
            root_folder=opts.root_folder,
            editable=opts.editable,
            big_description=opts.big_description,
            title=bar.name,
        )

    def apply(self, key: Union[str, Address], patch: Union[BookmarkPatch, Dict[str, Any]]) -> None:
        """Apply ``patch`` to the field ``key`` addresses, save, and re-index.

        If saving fails the tree keeps the edit in memory, the index is left
        as it was and ``BookmarksIOError`` propagates.
        """
        with self._lock:
            entry = self.lookup(key)
            if not isinstance(patch, BookmarkPatch):
                patch = BookmarkPatch.model_validate(patch)

            changed = _apply_patch(entry, patch)
            entry.node.date_modified = chrome_time_now()
            log.info(
                "Edited %s (%s): %s",
                entry.key,
                entry.kind.value,
                ", ".join(changed) if changed else "no field changes",
            )

            self._persist()
            self.index = AddressIndex.build(self._require_data())

    def _persist(self) -> None:
        data = self._require_data()
        if self.backup and not self._backed_up:
            backup_bookmarks_file(self.path)
            self._backed_up = True
        try:
            write_bookmarks(self.path, data)
        except BookmarksIOError as e:
            log.error("Edit kept in memory but not saved: %s", e)
            raise

    def _require_data(self) -> BookmarksData:
        if self.data is None:
            raise NotLoadedError("Bookmarks data not loaded. Call load() first.")
        return self.data

    def _require_index(self) -> AddressIndex:
        self._require_data()
        if self.index is None:
            raise NotLoadedError("Address index not built. Call load() first.")
        return self.index


def _apply_patch(entry: IndexEntry, patch: BookmarkPatch) -> List[str]:
    node, kind = entry.node, entry.kind
    changed: List[str] = []

    if kind in (FieldKind.BOOKMARK, FieldKind.FOLDER):
        if _given(patch.title):
            node.name = patch.title  # type: ignore[assignment]
            changed.append("name")
        if kind is FieldKind.BOOKMARK and _given(patch.url):
            if not isinstance(node, UrlNode):
                raise TypeError(f"bookmark key {entry.key} points at a {node.node_type.value}")
            node.url = patch.url  # type: ignore[assignment]
            changed.append("url")
        _set_meta(node, FieldTag.DESCRIPTION, patch.description, changed)
        _set_meta(node, FieldTag.NICKNAME, patch.short_name, changed)
    elif kind in (FieldKind.BOOKMARK_DESCRIPTION, FieldKind.FOLDER_DESCRIPTION):
        _set_meta(node, FieldTag.DESCRIPTION, patch.description, changed)
    elif kind in (FieldKind.BOOKMARK_SHORT_NAME, FieldKind.FOLDER_SHORT_NAME):
        _set_meta(node, FieldTag.NICKNAME, patch.short_name, changed)
    else:
        raise TypeError(f"unhandled field kind {kind}")
    return changed


def _set_meta(node: Node, tag: FieldTag, value: Optional[str], changed: List[str]) -> None:
    if _given(value):
        node.set_meta(tag, value)  # type: ignore[arg-type]
        changed.append(tag.value)


def _given(value: Optional[str]) -> bool:
    # Blank values never clear an existing field.
    return bool(value and value.strip())


def _collect_urls(node: Node, out: List[UrlNode]) -> None:
    if isinstance(node, UrlNode):
        out.append(node)
    elif isinstance(node, FolderNode):
        for child in node.children:
            _collect_urls(child, out)
    else:
        raise TypeError(f"unhandled node variant {type(node).__name__}")
