from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import List

from . import __version__
from .config import BROWSERS, Settings, load_settings
from .directives import ProjectionOptions, parse_directives
from .errors import VivmarksError
from .log import LogConfig, get_logger, setup_logging
from .model import chrome_time_to_datetime
from .store import BookmarkPatch, BookmarkStore

log = get_logger(__name__)


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="vivmarks",
        description="Render Vivaldi/Chrome bookmarks as markdown and edit them in place.",
    )
    p.add_argument("-V", "--version", action="version", version=f"vivmarks {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    p.add_argument("--bookmarks", default=None, help="Bookmarks JSON file (default: browser profile).")
    p.add_argument("--browser", default=None, choices=BROWSERS, help="Browser whose default profile to use.")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARN/ERROR (overrides env/config).")
    p.add_argument("--no-color", action="store_true", help="Disable colored logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    ren = sub.add_parser("render", help="Print the bookmark tree (or one folder) as markdown.")
    ren.add_argument("--root-folder", default=None, help="Render only the first folder with this name.")
    ren.add_argument("--editable", action="store_true", help="Add edit markers carrying address keys.")
    ren.add_argument("--big-description", action="store_true", help="Render descriptions as blocks.")
    ren.add_argument("--directives", default=None, help="File with RootFolder:/isEditable:/bigDescription: lines.")
    ren.add_argument("--out", default=None, help="Write markdown here instead of stdout.")

    sub.add_parser("keys", help="List every address key with its kind.")
    sub.add_parser("list", help="List every bookmark url of the visible roots.")

    show = sub.add_parser("show", help="Show the editable values behind one address key.")
    show.add_argument("key")

    edit = sub.add_parser("edit", help="Edit the field(s) behind one address key.")
    edit.add_argument("key")
    edit.add_argument("--title", default=None)
    edit.add_argument("--url", default=None)
    edit.add_argument("--description", default=None)
    edit.add_argument("--short-name", default=None)

    args = p.parse_args(argv)
    cfg = load_settings(args.config)
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    if args.bookmarks:
        cfg.bookmarks_file = args.bookmarks
    if args.browser:
        cfg.browser = args.browser
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color))

    t0 = time.time()
    try:
        store = BookmarkStore(cfg.bookmarks_path(), backup=cfg.backup_before_save)
        store.load()
        if args.cmd == "render":
            rc = _cmd_render(args, cfg, store)
        elif args.cmd == "keys":
            rc = _cmd_keys(store)
        elif args.cmd == "list":
            rc = _cmd_list(store)
        elif args.cmd == "show":
            rc = _cmd_show(args, store)
        elif args.cmd == "edit":
            rc = _cmd_edit(args, store)
        else:
            rc = 2
    except (VivmarksError, OSError, ValueError) as e:
        log.error("%s", e)
        return 2

    log.debug("Done in %d ms.", int((time.time() - t0) * 1000))
    return rc


def _cmd_render(args, cfg: Settings, store: BookmarkStore) -> int:
    opts = _projection_options(args, cfg)
    text = store.render(opts)
    if args.out:
        out_path = Path(args.out)
        out_path.write_text(text, encoding="utf-8")
        log.info("Wrote markdown: %s", out_path)
    else:
        sys.stdout.write(text)
    return 0


def _projection_options(args, cfg: Settings) -> ProjectionOptions:
    opts = cfg.projection_options()
    if args.directives:
        opts = parse_directives(Path(args.directives).read_text(encoding="utf-8"), defaults=opts)
    if args.root_folder:
        opts = replace(opts, root_folder=args.root_folder)
    if args.editable:
        opts = replace(opts, editable=True)
    if args.big_description:
        opts = replace(opts, big_description=True)
    return opts


def _cmd_keys(store: BookmarkStore) -> int:
    for entry in store.entries():
        sys.stdout.write(f"{entry.key}\t{entry.kind.value}\t{entry.node.name}\n")
    return 0


def _cmd_list(store: BookmarkStore) -> int:
    for node in store.all_bookmarks():
        sys.stdout.write(f"{node.name}\t{node.url}\n")
    return 0


def _cmd_show(args, store: BookmarkStore) -> int:
    entry = store.lookup(args.key)
    defaults = store.edit_defaults(args.key)
    sys.stdout.write(f"kind: {defaults.kind.value}\n")
    sys.stdout.write(f"title: {defaults.title}\n")
    if defaults.url:
        sys.stdout.write(f"url: {defaults.url}\n")
    modified = chrome_time_to_datetime(entry.node.date_modified)
    if modified is not None:
        sys.stdout.write(f"modified: {modified.isoformat()}\n")
    return 0


def _cmd_edit(args, store: BookmarkStore) -> int:
    patch = BookmarkPatch(
        title=args.title,
        url=args.url,
        description=args.description,
        short_name=args.short_name,
    )
    store.apply(args.key, patch)
    log.info("Saved edit of %s to %s", args.key, store.path)
    return 0
