from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, Dict, Optional, Set

from .errors import BookmarksIOError, ParseError
from .log import get_logger
from .model import (
    TRASH_ROOT,
    VISIBLE_ROOTS,
    BookmarksData,
    FolderNode,
    Node,
    NodeType,
    UrlNode,
)

log = get_logger(__name__)

_NODE_TYPES = {t.value: t for t in NodeType}


def read_bookmarks(path: Path) -> BookmarksData:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise BookmarksIOError(f"Cannot read bookmarks file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Bookmarks file is not UTF-8 ({path}): {e}") from e

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Bookmarks file is not valid JSON ({path}): {e}") from e

    data = parse_bookmarks(doc)
    log.info("Loaded bookmarks: %s", path)
    return data


def parse_bookmarks(doc: Any) -> BookmarksData:
    """Build a tree from a decoded ``Bookmarks`` document.

    Only the structural shape is checked: the three visible roots must be
    folders, every node needs a unique string guid and a known type, bookmarks
    carry a url and no children, folders carry a children list and no url.
    Everything else in the document is kept as-is for writing back.
    """
    if not isinstance(doc, dict):
        raise ParseError("Bookmarks document must be a JSON object")
    roots_raw = doc.get("roots")
    if not isinstance(roots_raw, dict):
        raise ParseError("Bookmarks document has no 'roots' object")

    seen: Set[str] = set()
    roots: Dict[str, FolderNode] = {}
    for name in VISIBLE_ROOTS + (TRASH_ROOT,):
        if name not in roots_raw:
            if name == TRASH_ROOT:
                continue
            raise ParseError(f"Missing root '{name}'")
        node = _node_from_dict(roots_raw[name], f"roots.{name}", seen)
        if not isinstance(node, FolderNode):
            raise ParseError(f"Root '{name}' must be a folder")
        roots[name] = node

    return BookmarksData(roots=roots, raw=dict(doc))


def _node_from_dict(obj: Any, where: str, seen: Set[str]) -> Node:
    if not isinstance(obj, dict):
        raise ParseError(f"{where}: node must be an object")

    guid = obj.get("guid")
    if not isinstance(guid, str) or not guid:
        raise ParseError(f"{where}: missing guid")
    if guid in seen:
        raise ParseError(f"{where}: duplicate guid {guid}")
    seen.add(guid)

    type_name = obj.get("type")
    node_type = _NODE_TYPES.get(type_name) if isinstance(type_name, str) else None
    if node_type is None:
        raise ParseError(f"{where}: unknown node type {type_name!r}")

    meta_info = obj.get("meta_info")
    if meta_info is not None and not isinstance(meta_info, dict):
        raise ParseError(f"{where}: meta_info must be an object")

    common = dict(
        id=str(obj.get("id", "")),
        guid=guid,
        name=_as_str(obj.get("name")),
        date_added=_as_str(obj.get("date_added"), "0"),
        date_modified=_maybe_str(obj.get("date_modified")),
        meta_info=dict(meta_info) if meta_info is not None else None,
    )

    if node_type is NodeType.URL:
        if "children" in obj:
            raise ParseError(f"{where}: bookmark {guid} must not have children")
        url = obj.get("url")
        if not isinstance(url, str):
            raise ParseError(f"{where}: bookmark {guid} has no url")
        node: Node = UrlNode(url=url, raw=dict(obj), **common)
        node.mark_loaded()
        return node

    if node_type is NodeType.FOLDER:
        if "url" in obj:
            raise ParseError(f"{where}: folder {guid} must not have a url")
        children_raw = obj.get("children")
        if not isinstance(children_raw, list):
            raise ParseError(f"{where}: folder {guid} has no children list")
        children = [
            _node_from_dict(c, f"{where}.children[{i}]", seen)
            for i, c in enumerate(children_raw)
        ]
        raw = dict(obj)
        raw["children"] = []
        node = FolderNode(children=children, raw=raw, **common)
        node.mark_loaded()
        return node

    raise TypeError(f"unhandled node type {node_type}")


def write_bookmarks(path: Path, data: BookmarksData) -> None:
    path = Path(path)
    text = json.dumps(data.to_dict(), ensure_ascii=False, indent=3)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)
    except OSError as e:
        raise BookmarksIOError(f"Cannot write bookmarks file {path}: {e}") from e
    finally:
        if tmp.exists():
            tmp.unlink()
    log.info("Saved bookmarks: %s", path)


def backup_bookmarks_file(path: Path) -> Optional[Path]:
    path = Path(path)
    try:
        if not path.exists():
            log.warning("Nothing to back up, bookmarks file missing: %s", path)
            return None
        dest = path.with_name(f"{path.name}.vivmarks.bak.{int(time.time())}")
        dest.write_bytes(path.read_bytes())
        log.info("Backed up %s -> %s", path, dest)
        return dest
    except OSError as e:
        log.warning("Bookmarks backup failed: %s", e)
        return None


def _as_str(v: Any, default: str = "") -> str:
    if v is None:
        return default
    return str(v)


def _maybe_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)
