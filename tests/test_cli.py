import json
from pathlib import Path

from vivmarks.cli import main


def test_cli_render_prints_markdown(scenario_file: Path, capsys):
    rc = main(["--bookmarks", str(scenario_file), "--no-color", "render"])
    assert rc == 0
    out = capsys.readouterr().out
    assert out == (
        "# Bar\n"
        "\n"
        "- **Work**\n"
        "  - Description: Job stuff\n"
        "  - [Site](https://a.com)\n"
        "    - Short Name: S\n"
    )


def test_cli_render_with_directives_file(sample_file: Path, tmp_path: Path, capsys):
    directives = tmp_path / "block.txt"
    directives.write_text("RootFolder: Projects\nisEditable: true\n", encoding="utf-8")
    out_md = tmp_path / "out.md"
    rc = main(
        ["--bookmarks", str(sample_file), "render", "--directives", str(directives), "--out", str(out_md)]
    )
    assert rc == 0
    text = out_md.read_text(encoding="utf-8")
    assert text.startswith("# Projects\n")
    assert 'data-key="archGuid_Description"' in text


def test_cli_keys_and_list(sample_file: Path, capsys):
    assert main(["--bookmarks", str(sample_file), "keys"]) == 0
    out = capsys.readouterr().out
    assert "workGuid_Description\tFolder Description\tWork\n" in out
    assert "goneGuid" not in out

    assert main(["--bookmarks", str(sample_file), "list"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Site\thttps://a.com"


def test_cli_show(sample_file: Path, capsys):
    assert main(["--bookmarks", str(sample_file), "show", "siteGuid"]) == 0
    out = capsys.readouterr().out
    assert "kind: Bookmark\n" in out
    assert "title: Site\n" in out
    assert "url: https://a.com\n" in out


def test_cli_edit_persists(sample_file: Path, monkeypatch):
    monkeypatch.setenv("VIVMARKS_BACKUP", "0")
    rc = main(["--bookmarks", str(sample_file), "edit", "workGuid_Description", "--description", "From CLI"])
    assert rc == 0
    saved = json.loads(sample_file.read_text(encoding="utf-8"))
    work = saved["roots"]["bookmark_bar"]["children"][0]
    assert work["meta_info"]["Description"] == "From CLI"
    assert not list(sample_file.parent.glob("Bookmarks.vivmarks.bak.*"))


def test_cli_edit_unknown_key_fails(sample_file: Path):
    assert main(["--bookmarks", str(sample_file), "edit", "nope", "--title", "x"]) == 2


def test_cli_missing_file_fails(tmp_path: Path):
    assert main(["--bookmarks", str(tmp_path / "missing"), "render"]) == 2
