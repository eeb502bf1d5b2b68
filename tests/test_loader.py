import json
from pathlib import Path

import pytest

from vivmarks.errors import BookmarksIOError, ParseError
from vivmarks.loader import backup_bookmarks_file, parse_bookmarks, read_bookmarks, write_bookmarks
from vivmarks.model import FolderNode, UrlNode


def test_read_builds_tagged_nodes(sample_file: Path):
    data = read_bookmarks(sample_file)

    assert data.bookmark_bar.name == "Bar"
    work = data.bookmark_bar.children[0]
    assert isinstance(work, FolderNode)
    assert work.description == "Job stuff"
    site = work.children[0]
    assert isinstance(site, UrlNode)
    assert site.url == "https://a.com"
    assert site.short_name == "S"
    assert data.trash is not None
    assert data.trash.children[0].name == "Gone"


def test_write_keeps_unmodeled_fields(sample_file: Path, tmp_path: Path):
    data = read_bookmarks(sample_file)
    out = tmp_path / "Bookmarks.out"
    write_bookmarks(out, data)

    original = json.loads(sample_file.read_text(encoding="utf-8"))
    written = json.loads(out.read_text(encoding="utf-8"))
    assert written == original


def test_write_keeps_key_order(sample_file: Path, tmp_path: Path):
    data = read_bookmarks(sample_file)
    out = tmp_path / "Bookmarks.out"
    write_bookmarks(out, data)

    original = json.loads(sample_file.read_text(encoding="utf-8"))
    written = json.loads(out.read_text(encoding="utf-8"))
    assert list(written) == list(original)
    assert list(written["roots"]["bookmark_bar"]) == list(original["roots"]["bookmark_bar"])


def test_unknown_roots_survive_roundtrip(scenario_doc: dict, tmp_path: Path, make_folder):
    scenario_doc["roots"]["custom_root"] = make_folder("customGuid", "Custom", [])
    data = parse_bookmarks(scenario_doc)
    out = tmp_path / "Bookmarks"
    write_bookmarks(out, data)
    assert json.loads(out.read_text(encoding="utf-8"))["roots"]["custom_root"]["name"] == "Custom"


def test_trash_root_is_optional(scenario_doc: dict):
    data = parse_bookmarks(scenario_doc)
    assert data.trash is None


def test_missing_file_is_io_error(tmp_path: Path):
    with pytest.raises(BookmarksIOError):
        read_bookmarks(tmp_path / "missing")


def test_invalid_json_is_parse_error(tmp_path: Path):
    p = tmp_path / "Bookmarks"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(ParseError):
        read_bookmarks(p)


@pytest.mark.parametrize("root", ["bookmark_bar", "other", "synced"])
def test_missing_visible_root_is_parse_error(scenario_doc: dict, root: str):
    del scenario_doc["roots"][root]
    with pytest.raises(ParseError, match=root):
        parse_bookmarks(scenario_doc)


def test_url_node_with_children_is_parse_error(scenario_doc: dict):
    site = scenario_doc["roots"]["bookmark_bar"]["children"][0]["children"][0]
    site["children"] = []
    with pytest.raises(ParseError, match="must not have children"):
        parse_bookmarks(scenario_doc)


def test_folder_with_url_is_parse_error(scenario_doc: dict):
    scenario_doc["roots"]["bookmark_bar"]["children"][0]["url"] = "https://x.example/"
    with pytest.raises(ParseError, match="must not have a url"):
        parse_bookmarks(scenario_doc)


def test_folder_without_children_is_parse_error(scenario_doc: dict):
    del scenario_doc["roots"]["bookmark_bar"]["children"][0]["children"]
    with pytest.raises(ParseError, match="children"):
        parse_bookmarks(scenario_doc)


def test_unknown_type_is_parse_error(scenario_doc: dict):
    scenario_doc["roots"]["bookmark_bar"]["children"][0]["type"] = "separator"
    with pytest.raises(ParseError, match="unknown node type"):
        parse_bookmarks(scenario_doc)


def test_duplicate_guid_is_parse_error(scenario_doc: dict, make_url):
    scenario_doc["roots"]["other"]["children"].append(make_url("siteGuid", "Dup", "https://dup.example/"))
    with pytest.raises(ParseError, match="duplicate guid"):
        parse_bookmarks(scenario_doc)


def test_root_must_be_folder(scenario_doc: dict, make_url):
    scenario_doc["roots"]["synced"] = make_url("syncedGuid", "Mobile", "https://m.example/")
    with pytest.raises(ParseError, match="must be a folder"):
        parse_bookmarks(scenario_doc)


def test_write_failure_is_io_error(sample_file: Path, tmp_path: Path):
    data = read_bookmarks(sample_file)
    with pytest.raises(BookmarksIOError):
        write_bookmarks(tmp_path / "no-such-dir" / "Bookmarks", data)


def test_backup_copies_current_file(sample_file: Path):
    dest = backup_bookmarks_file(sample_file)
    assert dest is not None
    assert dest.read_bytes() == sample_file.read_bytes()
    assert dest.name.startswith("Bookmarks.vivmarks.bak.")


def test_roundtrip_keeps_raw_id_type_and_missing_date_added(scenario_doc: dict, tmp_path: Path):
    site = scenario_doc["roots"]["bookmark_bar"]["children"][0]["children"][0]
    site["id"] = 7
    del site["date_added"]
    original = json.loads(json.dumps(scenario_doc))

    out = tmp_path / "Bookmarks"
    write_bookmarks(out, parse_bookmarks(scenario_doc))

    assert json.loads(out.read_text(encoding="utf-8")) == original


def test_edited_fields_are_written_and_untouched_ones_keep_raw_form(scenario_doc: dict, tmp_path: Path):
    site_raw = scenario_doc["roots"]["bookmark_bar"]["children"][0]["children"][0]
    site_raw["id"] = 7
    del site_raw["date_added"]
    data = parse_bookmarks(scenario_doc)
    site = data.bookmark_bar.children[0].children[0]
    site.name = "Renamed"
    site.date_modified = "13360000000000000"

    out = tmp_path / "Bookmarks"
    write_bookmarks(out, data)

    written = json.loads(out.read_text(encoding="utf-8"))["roots"]["bookmark_bar"]["children"][0]["children"][0]
    assert written["id"] == 7
    assert "date_added" not in written
    assert written["name"] == "Renamed"
    assert written["date_modified"] == "13360000000000000"
