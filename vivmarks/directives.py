from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional

_ROOT_FOLDER_RE = re.compile(r"RootFolder:[ \t]*(.+)")
_EDITABLE_RE = re.compile(r"isEditable:\s*(true|false)", re.IGNORECASE)
_BIG_DESCRIPTION_RE = re.compile(r"bigDescription:\s*(true|false)", re.IGNORECASE)


@dataclass(frozen=True)
class ProjectionOptions:
    root_folder: Optional[str] = None
    editable: bool = False
    big_description: bool = False


def parse_directives(source: str, defaults: Optional[ProjectionOptions] = None) -> ProjectionOptions:
    """Read projection options from the body of a ``Bookmarks`` code block.

    Recognized lines: ``RootFolder: <name>``, ``isEditable: true|false`` and
    ``bigDescription: true|false``. Anything else is ignored; options that are
    not mentioned keep their ``defaults`` value.
    """
    opts = defaults or ProjectionOptions()

    m = _ROOT_FOLDER_RE.search(source)
    if m and m.group(1).strip():
        opts = replace(opts, root_folder=m.group(1).strip())

    m = _EDITABLE_RE.search(source)
    if m:
        opts = replace(opts, editable=m.group(1).lower() == "true")

    m = _BIG_DESCRIPTION_RE.search(source)
    if m:
        opts = replace(opts, big_description=m.group(1).lower() == "true")

    return opts
