from __future__ import annotations


class VivmarksError(Exception):
    """Base class for every error raised by the bookmark store."""


class BookmarksIOError(VivmarksError, OSError):
    """The bookmarks file could not be read or written."""


class ParseError(VivmarksError, ValueError):
    """The bookmarks document is not a structurally valid tree."""


class NotLoadedError(VivmarksError, RuntimeError):
    """An operation needs a loaded tree but none is present."""


class KeyNotFoundError(VivmarksError, KeyError):
    """An address key is absent from the current index."""

    def __str__(self) -> str:
        # KeyError repr()s its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""
