from __future__ import annotations

import html
from typing import Iterable, List, Optional, Sequence

from .model import FieldTag, FolderNode, MetaAddress, Node, PrimaryAddress, UrlNode

INDENT_SPACES = 2
EDIT_ICON = "✏️"
DEFAULT_ROOT_NAME = "Bookmarks"


def render_markdown(
    nodes: Iterable[Node],
    *,
    root_folder: Optional[str] = None,
    editable: bool = False,
    big_description: bool = False,
    title: Optional[str] = None,
) -> str:
    """Render bookmark nodes as a markdown list.

    Without ``root_folder`` the output is a ``# title`` heading followed by
    every node in order. With it, the first folder of that name (pre-order)
    becomes the heading and only its children are listed; inside that subtree
    every nested folder lists its children with block descriptions.

    ``editable`` appends an edit marker carrying the address key to every
    line that shows an editable field.
    """
    nodes = list(nodes)
    if not nodes:
        return ""

    lines: List[str] = []
    if root_folder:
        folder = find_folder(nodes, root_folder)
        if folder is None:
            lines.append(f"# {root_folder}")
            lines.append("")
            lines.append(f'- Root folder "{root_folder}" not found.')
            return "\n".join(lines) + "\n"
        lines.append(f"# {folder.name}")
        lines.append("")
        for child in folder.children:
            _render_node(lines, child, 0, editable, big_description, in_subtree=True)
        return "\n".join(lines) + "\n"

    lines.append(f"# {title or DEFAULT_ROOT_NAME}")
    lines.append("")
    for node in nodes:
        _render_node(lines, node, 0, editable, big_description, in_subtree=False)
    return "\n".join(lines) + "\n"


def find_folder(nodes: Sequence[Node], name: str) -> Optional[FolderNode]:
    for node in nodes:
        if isinstance(node, FolderNode):
            if node.name == name:
                return node
            found = find_folder(node.children, name)
            if found is not None:
                return found
    return None


def edit_marker(key: str) -> str:
    return f'<span class="edit-icon" data-key="{html.escape(key, quote=True)}">{EDIT_ICON}</span>'


def _render_node(lines: List[str], node: Node, depth: int, editable: bool, big: bool, *, in_subtree: bool) -> None:
    if isinstance(node, UrlNode):
        _render_url(lines, node, depth, editable, big)
    elif isinstance(node, FolderNode):
        _render_folder(lines, node, depth, editable, big, in_subtree)
    else:
        raise TypeError(f"unhandled node variant {type(node).__name__}")


def _render_url(lines: List[str], node: UrlNode, depth: int, editable: bool, big: bool) -> None:
    line = f"{_indent(depth)}- [{node.name}]({node.url})"
    line += _marker(PrimaryAddress(node.guid), editable)
    desc = node.description
    if desc and not big:
        line += f" — {_one_line(desc)}"
        line += _marker(MetaAddress(node.guid, FieldTag.DESCRIPTION), editable)
    lines.append(line)

    if desc and big:
        _render_block_description(lines, node, depth + 1, editable)
    _render_short_name(lines, node, depth + 1, editable)


def _render_folder(lines: List[str], node: FolderNode, depth: int, editable: bool, big: bool, in_subtree: bool) -> None:
    lines.append(f"{_indent(depth)}- **{node.name}**" + _marker(PrimaryAddress(node.guid), editable))

    desc = node.description
    if desc:
        if big:
            _render_block_description(lines, node, depth + 1, editable)
        else:
            lines.append(
                f"{_indent(depth + 1)}- Description: {_one_line(desc)}"
                + _marker(MetaAddress(node.guid, FieldTag.DESCRIPTION), editable)
            )
    _render_short_name(lines, node, depth + 1, editable)

    # Below a selected root folder, nested folders always use block descriptions.
    child_big = True if in_subtree else big
    for child in node.children:
        _render_node(lines, child, depth + 1, editable, child_big, in_subtree=in_subtree)


def _render_block_description(lines: List[str], node: Node, depth: int, editable: bool) -> None:
    lines.append(f"{_indent(depth)}- Description:" + _marker(MetaAddress(node.guid, FieldTag.DESCRIPTION), editable))
    # One item per line. Blank lines inside the text stay as empty items and
    # leading spaces are kept, so paragraph breaks and indented lines survive.
    for segment in node.description.strip("\n").splitlines():
        segment = segment.rstrip()
        lines.append(f"{_indent(depth + 1)}- {segment}".rstrip())


def _render_short_name(lines: List[str], node: Node, depth: int, editable: bool) -> None:
    short = node.short_name
    if not short:
        return
    lines.append(
        f"{_indent(depth)}- Short Name: {_one_line(short)}"
        + _marker(MetaAddress(node.guid, FieldTag.NICKNAME), editable)
    )


def _marker(address, editable: bool) -> str:
    return edit_marker(str(address)) if editable else ""


def _indent(depth: int) -> str:
    return " " * (INDENT_SPACES * depth)


def _one_line(text: str) -> str:
    return " ".join(part.strip() for part in text.splitlines() if part.strip())
