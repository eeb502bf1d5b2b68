from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup  # type: ignore


def find_edit_keys(text: str) -> List[str]:
    """Address keys of every edit marker in rendered output, in document order.

    Works on the markdown projection itself as well as on the HTML a host
    renders from it, since markers pass through markdown as inline HTML.
    """
    soup = BeautifulSoup(text, "lxml")
    keys: List[str] = []
    for span in soup.find_all("span", class_="edit-icon"):
        key = span.get("data-key")
        if key:
            keys.append(key)
    return keys


def has_edit_markers(text: str) -> bool:
    return bool(find_edit_keys(text))
