"""
Пример: mkdir -> create/write -> stat -> open/read через unifs.

Плюс:
- один код для /inmem/, /hdfs/, /webfs/ и локальных путей

Запуск:
  python scripts/roundtrip_example.py --root /inmem/tmp/unifs
  python scripts/roundtrip_example.py --root /hdfs/tmp/unifs --namenode localhost:9000
  python scripts/roundtrip_example.py --root /webfs/tmp/unifs --webhdfs localhost:50070
"""

from __future__ import annotations

import argparse
import logging
import posixpath
import time

from unifs import is_not_exist, runtime


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--root", default="/inmem/tmp/unifs", help="Unified path of a scratch directory.")
    parser.add_argument("--namenode", default="", help="HDFS namenode address (native RPC).")
    parser.add_argument("--webhdfs", default="", help="WebHDFS address.")
    parser.add_argument("--user", default="", help="HDFS username. Could be empty.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    router = runtime.get_router()
    if args.namenode or args.webhdfs:
        runtime.hookup_hdfs(args.namenode, args.webhdfs, args.user, router=router)

    directory = posixpath.join(args.root, str(time.time_ns()))
    file = posixpath.join(directory, "hello.txt")
    content = b"Hello World!\n"

    router.mkdir(directory)
    with router.create(file) as w:
        w.write(content)

    try:
        st = router.stat(file)
    except OSError as e:
        if is_not_exist(e):
            print(f"ERROR: expecting {file} to exist, but it does not")
            return 1
        raise
    print(f"INFO: stat ok name={st.name} size={st.size}")

    print("INFO: listing:", [s.name for s in router.readdir(directory)])
    with router.open(file) as r:
        print(r.read().decode("utf-8"), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
