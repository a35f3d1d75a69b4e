from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from . import __version__
from .batch import AnnotationFile, dump_annotations, update_annotations
from .collector import collect_hkx_files
from .editor import hkanno_apply_xml_string
from .errors import HkannoError
from .logger import DEFAULT_LOG_DIR, init as init_logger
from .textfmt import format_hkanno_text, lint_hkanno_text
from .utils import read_text, write_text


def _load_annotation_files(paths: List[str]) -> List[AnnotationFile]:
    files: List[AnnotationFile] = []
    for hkx_path in collect_hkx_files(paths):
        anno_path = os.path.splitext(hkx_path)[0] + ".txt"
        if not os.path.isfile(anno_path):
            print(f"No annotation text for {hkx_path}; skipped", file=sys.stderr)
            continue
        files.append(
            AnnotationFile(
                hkx_path=hkx_path,
                anno_path=anno_path,
                display_name=os.path.basename(hkx_path),
                content=read_text(anno_path),
            )
        )
    return files


def _run(args: argparse.Namespace) -> int:
    if args.command == "dump":
        files = dump_annotations(args.paths, max_workers=args.workers)
        for file in sorted(files, key=lambda f: f.hkx_path):
            if args.stdout:
                print(f"# {file.display_name}")
                print(file.content)
            else:
                write_text(file.anno_path, file.content)
        print(f"Dumped {len(files)} file(s)", file=sys.stderr if args.stdout else sys.stdout)
        return 0

    if args.command == "update":
        files = _load_annotation_files(args.paths)
        if not files:
            print("No annotation text files found", file=sys.stderr)
            return 1
        print(update_annotations(files, args.format, max_workers=args.workers))
        return 0

    if args.command == "preview":
        print(hkanno_apply_xml_string(args.hkx, read_text(args.text)), end="")
        return 0

    if args.command == "fmt":
        original = read_text(args.text)
        formatted = format_hkanno_text(original)
        if args.check:
            return 0 if formatted == original else 1
        write_text(args.text, formatted)
        return 0

    if args.command == "lint":
        diagnostics = lint_hkanno_text(read_text(args.text))
        for diag in diagnostics:
            print(f"{args.text}:{diag.line}: {diag.severity}: {diag.message}")
        return 1 if any(d.severity == "error" for d in diagnostics) else 0

    return 2


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Edit hkx animation annotations as text")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIR, help="Log directory (empty to disable)")
    parser.add_argument("--log-level", default="info", help="trace/debug/info/warn/error")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_dump = subparsers.add_parser("dump", help="Write annotations of hkx/xml files to sibling .txt files")
    p_dump.add_argument("paths", nargs="+", help="Files or directories")
    p_dump.add_argument("--workers", type=int, default=None, help="Worker threads")
    p_dump.add_argument("--stdout", action="store_true", help="Print instead of writing .txt files")

    p_update = subparsers.add_parser("update", help="Apply sibling .txt files back to hkx/xml files")
    p_update.add_argument("paths", nargs="+", help="Files or directories")
    p_update.add_argument("--format", default="xml", help="Output format: amd64/win32/xml")
    p_update.add_argument("--workers", type=int, default=None, help="Worker threads")

    p_preview = subparsers.add_parser("preview", help="Print the XML an update would produce")
    p_preview.add_argument("hkx", help="Source hkx/xml file")
    p_preview.add_argument("text", help="Annotation text file")

    p_fmt = subparsers.add_parser("fmt", help="Normalize an annotation text file in place")
    p_fmt.add_argument("text", help="Annotation text file")
    p_fmt.add_argument("--check", action="store_true", help="Exit 1 if the file would change")

    p_lint = subparsers.add_parser("lint", help="Report problems in an annotation text file")
    p_lint.add_argument("text", help="Annotation text file")

    args = parser.parse_args(argv)

    if getattr(args, "workers", None) is not None and args.workers < 1:
        print("Workers must be >= 1", file=sys.stderr)
        sys.exit(1)

    log_handle = init_logger(args.log_dir, level=args.log_level) if args.log_dir else None
    try:
        code = _run(args)
    except (HkannoError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        code = 1
    finally:
        if log_handle is not None:
            log_handle.close()
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
