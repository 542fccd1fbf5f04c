from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .config import InventoryProfile, load_inventory_profile
from .pipeline import run_inventory
from .reporting import detection_rows, format_inventory_table, inventory_rows, report_to_dict, summary
from .taxonomy import Taxonomy, load_class_names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Decode a raw detector output tensor into a classroom inventory report."
    )
    parser.add_argument("output", help="Path to the raw model output saved with numpy.save (.npy).")
    parser.add_argument("--width", type=float, required=True, help="Original image width in pixels.")
    parser.add_argument("--height", type=float, required=True, help="Original image height in pixels.")
    parser.add_argument("--profile", default=None, help="Inventory profile JSON (thresholds + class names).")
    parser.add_argument("--metadata", default=None, help="Model metadata.yaml with a `names:` block.")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold override.")
    parser.add_argument("--iou", type=float, default=None, help="NMS IoU threshold override.")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON instead of a table.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr.")
    return parser


def _resolve_profile(args: argparse.Namespace) -> InventoryProfile:
    profile = load_inventory_profile(Path(args.profile)) if args.profile else InventoryProfile()
    if args.metadata:
        names = Taxonomy.from_class_names(load_class_names(args.metadata)).names
        profile = replace(profile, class_names=names, class_icons=())
    if args.conf is not None:
        profile = replace(profile, confidence_threshold=float(args.conf))
    if args.iou is not None:
        profile = replace(profile, iou_threshold=float(args.iou))
    return profile


def _load_buffer(path: Path) -> np.ndarray:
    if not path.exists():
        raise FileNotFoundError(f"Model output not found: {path}")
    if not path.is_file():
        raise ValueError(f"Model output is not a file: {path}")
    data = np.load(path, allow_pickle=False)
    if not isinstance(data, np.ndarray):
        # .npz archives load as NpzFile
        data.close()
        raise ValueError(f"Model output must be a single .npy array: {path}")
    return data.reshape(-1)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        profile = _resolve_profile(args)
        buffer = _load_buffer(Path(args.output))
        result = run_inventory(buffer, args.width, args.height, profile)
    except (OSError, EOFError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    taxonomy = profile.taxonomy
    if args.json:
        payload = {
            "summary": summary(result),
            "report": report_to_dict(result.report, taxonomy),
            "detections": detection_rows(result.detections, taxonomy),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    info = summary(result)
    print(f"Objects: {info['total_objects']}  Avg confidence: {info['avg_confidence_pct']}%  Image: {info['image_size']}")
    print(format_inventory_table(inventory_rows(result.report, taxonomy)))
    rows = detection_rows(result.detections, taxonomy)
    for idx, (det, row) in enumerate(zip(result.detections, rows), start=1):
        print(
            f"#{idx} {row['object']} {det.score * 100:.1f}% "
            f"x={row['x1']} y={row['y1']} {row['width']}x{row['height']} px"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
