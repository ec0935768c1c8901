"""
cli — командная строка unifs.

Запуск:
  unifs ls /hdfs/tmp --namenode localhost:9000
  unifs put data/input.csv /webfs/tmp/ --webhdfs localhost:50070
  unifs cat /webfs/tmp/input.csv
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
import time

from unifs import runtime
from unifs.errors import FileStoreError
from unifs.filestore.types import FileStat
from unifs.router import FileRouter


def _format_stat(st: FileStat) -> str:
    kind = "d" if st.is_dir else "-"
    mtime = time.strftime("%Y-%m-%d %H:%M", time.localtime(st.mtime))
    return f"{kind}{st.mode:04o} {st.size:>12} {mtime} {st.name}"


def _cmd_ls(router: FileRouter, args: argparse.Namespace) -> None:
    for st in sorted(router.readdir(args.path), key=lambda s: s.name):
        print(_format_stat(st))


def _cmd_cat(router: FileRouter, args: argparse.Namespace) -> None:
    with router.open(args.path) as r:
        shutil.copyfileobj(r, sys.stdout.buffer)
    sys.stdout.flush()


def _cmd_put(router: FileRouter, args: argparse.Namespace) -> None:
    print(router.put(args.local, args.dest))


def _cmd_mkdir(router: FileRouter, args: argparse.Namespace) -> None:
    router.mkdir(args.path)


def _cmd_stat(router: FileRouter, args: argparse.Namespace) -> None:
    print(_format_stat(router.stat(args.path)))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unifs", description="Unified access to local, in-memory and HDFS files")
    parser.add_argument("--namenode", default="", help="HDFS namenode for native RPC, e.g. localhost:9000")
    parser.add_argument("--webhdfs", default="", help="WebHDFS address, e.g. localhost:50070")
    parser.add_argument("--user", default="", help="HDFS username (default: current user)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ls", help="List a directory")
    p.add_argument("path")
    p.set_defaults(func=_cmd_ls)

    p = sub.add_parser("cat", help="Print a file to stdout")
    p.add_argument("path")
    p.set_defaults(func=_cmd_cat)

    p = sub.add_parser("put", help="Copy a local file to any backend")
    p.add_argument("local")
    p.add_argument("dest")
    p.set_defaults(func=_cmd_put)

    p = sub.add_parser("mkdir", help="Create a directory (with parents where supported)")
    p.add_argument("path")
    p.set_defaults(func=_cmd_mkdir)

    p = sub.add_parser("stat", help="Show file metadata")
    p.add_argument("path")
    p.set_defaults(func=_cmd_stat)

    return parser


def main(argv: list[str] | None = None, router: FileRouter | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        router = router or runtime.get_router()
        if args.namenode or args.webhdfs:
            runtime.hookup_hdfs(args.namenode, args.webhdfs, args.user, router=router)
        args.func(router, args)
    except (FileStoreError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
