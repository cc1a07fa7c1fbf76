#!/usr/bin/env python3
"""
aggregate_types.py
──────────────────
Reads  pallets/<name>/types.json   for every pallet in aggregation.config.PALLETS
writes types.json                  (one merged object, 2-space indent)

Runtime overrides and built-in types are merged first, then each pallet
in list order. On a duplicate type name the later contributor wins.

Usage:
  python aggregate_types.py            # rewrite types.json
  python aggregate_types.py --check    # exit 1 if types.json is stale
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from tqdm import tqdm

from aggregation.config import (
    BUILTIN_TYPES,
    PALLETS,
    PALLETS_DIR_NAME,
    RUNTIME_TYPE_OVERRIDES,
    TYPES_FILE_NAME,
    default_root,
)

log = logging.getLogger(__name__)

TypeMap = Dict[str, Any]


class TypesFileError(ValueError):
    """Pallet types that are not UTF-8, not valid JSON, or not a JSON object."""


# ───────────────────────── helpers ──────────────────────────
def load_types(path: Path) -> TypeMap:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise TypesFileError(f"{path}: not UTF-8 ({e})") from e

    def reject_constant(name: str) -> Any:
        raise TypesFileError(f"{path}: invalid JSON (bare {name} is not allowed)")

    try:
        data = json.loads(text, parse_constant=reject_constant)
    except json.JSONDecodeError as e:
        raise TypesFileError(f"{path}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise TypesFileError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def merge_types(layers: Iterable[Mapping[str, Any]]) -> TypeMap:
    """Shallow-merge *layers* in order; a later layer wins on duplicate keys."""
    merged: TypeMap = {}
    for layer in layers:
        for name in layer:
            if name in merged:
                log.debug(f"type {name!r} overridden")
        merged.update(layer)
    return merged


def render_types(types: Mapping[str, Any]) -> str:
    return json.dumps(types, indent=2, ensure_ascii=False, allow_nan=False)


def encode_types(types: Mapping[str, Any]) -> bytes:
    try:
        return render_types(types).encode("utf-8")
    except UnicodeEncodeError as e:
        raise TypesFileError(f"aggregated types cannot be written as UTF-8 ({e})") from e


def _resolve_paths(root: Optional[Path], output: Optional[Path]) -> Tuple[Path, Path]:
    root = Path(root) if root else default_root()
    output = Path(output) if output else root / TYPES_FILE_NAME
    return root, output


# ───────────────────────── aggregation ──────────────────────
def collect_types(
    pallets_dir: Path,
    pallets: Sequence[str] = PALLETS,
    *,
    progress: bool = False,
) -> TypeMap:
    """
    Build the aggregate in memory. Pallet files are loaded one at a time,
    in list order, and the first missing or malformed file propagates.
    """
    def layers() -> Iterator[Mapping[str, Any]]:
        yield RUNTIME_TYPE_OVERRIDES
        yield BUILTIN_TYPES
        for pallet in tqdm(pallets, desc="Aggregating types", unit="pallet", disable=not progress):
            yield load_types(pallets_dir / pallet / TYPES_FILE_NAME)

    return merge_types(layers())


def aggregate(
    root: Optional[Path] = None,
    pallets: Sequence[str] = PALLETS,
    output: Optional[Path] = None,
    *,
    progress: bool = False,
) -> Path:
    root, output = _resolve_paths(root, output)
    types = collect_types(root / PALLETS_DIR_NAME, pallets, progress=progress)

    # nothing is written unless every pallet loaded and the result encodes
    data = encode_types(types)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)

    log.info(f"✓ wrote {len(types)} types from {len(pallets)} pallets → {output}")
    return output


def check(
    root: Optional[Path] = None,
    pallets: Sequence[str] = PALLETS,
    output: Optional[Path] = None,
) -> bool:
    """True if *output* already holds exactly what aggregate() would write."""
    root, output = _resolve_paths(root, output)
    expected = encode_types(collect_types(root / PALLETS_DIR_NAME, pallets))

    if not output.exists():
        log.warning(f"{output} does not exist; run aggregate_types.py")
        return False
    if output.read_bytes() != expected:
        log.warning(f"{output} is out of date; run aggregate_types.py")
        return False

    log.info(f"✓ {output} is up to date")
    return True


# ─────────────────────────── main ───────────────────────────
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Merge every pallet's types.json into a single types.json.")
    ap.add_argument("--root", type=Path, default=None,
                    help="repository root (default: $TYPES_ROOT or the directory of this script)")
    ap.add_argument("-o", "--output", type=Path, default=None,
                    help="output file (default: <root>/types.json)")
    ap.add_argument("--check", action="store_true",
                    help="do not write; exit 1 if the output is missing or stale")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        if args.check:
            return 0 if check(args.root, output=args.output) else 1
        aggregate(args.root, output=args.output, progress=args.verbose)
    except (OSError, TypesFileError) as e:
        log.error(f"Failed to read/parse pallet types: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
