import json
import logging
import shutil
import sys
from pathlib import Path

import pytest

# Allow `import vivmarks` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """CLI tests attach handlers bound to captured streams; drop them afterwards."""
    yield
    logger = logging.getLogger("vivmarks")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def _folder(guid, name, children, **meta):
    node = {
        "children": children,
        "date_added": "13350000000000000",
        "date_modified": "13350000000000000",
        "guid": guid,
        "id": guid,
        "name": name,
        "type": "folder",
    }
    if meta:
        node["meta_info"] = dict(meta)
    return node


def _url(guid, name, url, **meta):
    node = {
        "date_added": "13350000000000000",
        "guid": guid,
        "id": guid,
        "name": name,
        "type": "url",
        "url": url,
    }
    if meta:
        node["meta_info"] = dict(meta)
    return node


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Copy of the Vivaldi-style sample tree, safe to edit."""
    dest = tmp_path / "Bookmarks"
    shutil.copyfile(FIXTURES / "Bookmarks.json", dest)
    return dest


@pytest.fixture
def scenario_doc() -> dict:
    """Bar -> Work (Description "Job stuff") -> Site (Nickname "S")."""
    site = _url("siteGuid", "Site", "https://a.com", Nickname="S")
    work = _folder("workGuid", "Work", [site], Description="Job stuff")
    return {
        "checksum": "",
        "roots": {
            "bookmark_bar": _folder("barGuid", "Bar", [work]),
            "other": _folder("otherGuid", "Other Bookmarks", []),
            "synced": _folder("syncedGuid", "Mobile Bookmarks", []),
        },
        "version": 1,
    }


@pytest.fixture
def scenario_file(tmp_path: Path, scenario_doc: dict) -> Path:
    dest = tmp_path / "Bookmarks"
    dest.write_text(json.dumps(scenario_doc), encoding="utf-8")
    return dest


@pytest.fixture
def make_folder():
    return _folder


@pytest.fixture
def make_url():
    return _url
