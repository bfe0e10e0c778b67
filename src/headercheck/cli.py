"""
Batch check: validate files on disk the way the upload endpoint would, printing
the outcome and timing per file.
"""
from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Iterator, List, Optional

from src.headercheck.config import get as get_config
from src.headercheck.validator.models import ValidationResult
from src.headercheck.validator.processor import validate_path


def iter_files(root: Path) -> Iterator[Path]:
    """Yield ``root`` itself, or every file below it when it is a directory."""
    if root.is_file():
        yield root
        return
    for p in sorted(root.rglob("*")):
        if p.is_file():
            yield p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Validate file content type (and CSV encoding) from header bytes."
    )
    p.add_argument("paths", nargs="+", help="Files or directories (recursive).")
    p.add_argument(
        "--verify-encoding",
        action="store_true",
        default=bool(get_config("validation.verify_encoding", False)),
        help="Require CSV files to be UTF-8.",
    )
    return p.parse_args(argv)


def _format_result(result: ValidationResult) -> str:
    parts = [f"{k}={v}" for k, v in result.to_dict().items() if v is not None and k != "message"]
    return " ".join(parts)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    total = failed = 0
    for raw in args.paths:
        root = Path(raw)
        if not root.exists():
            print(f"[ERR] Input not found: {root}", file=sys.stderr)
            failed += 1
            continue
        for fp in iter_files(root):
            total += 1
            start = time.perf_counter()
            result = validate_path(fp, fp.name, verify_encoding=args.verify_encoding)
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            if result.ok:
                print(f"[OK]   {fp} | {_format_result(result)} | {elapsed_ms:.2f} ms")
            else:
                failed += 1
                print(f"[FAIL] {fp} | {result.message} | {_format_result(result)} | {elapsed_ms:.2f} ms")

    print(f"[INFO] Done. Total: {total} | Failed: {failed}")
    return 2 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
