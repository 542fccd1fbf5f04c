"""
Row builders for the inventory screens: the per-class table, the detection
list and the header summary. Rows are plain dicts so a caller can render
them, chart them or export them however it likes.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List

from detect_kit.stats import AggregateReport
from detect_kit.types import Detection

from .pipeline import InventoryResult
from .taxonomy import Taxonomy


def _pct(value: float, digits: int) -> float:
    return round(value * 100.0, digits)


def _px(value: float) -> int:
    # halves round up, like the pixel columns of the inventory list
    return int(math.floor(value + 0.5))


def inventory_rows(report: AggregateReport, taxonomy: Taxonomy) -> List[Dict[str, Any]]:
    """One row per known class followed by a TOTAL row."""

    if len(report.classes) != taxonomy.num_classes:
        raise ValueError(
            f"report has {len(report.classes)} classes but taxonomy has {taxonomy.num_classes}"
        )

    rows: List[Dict[str, Any]] = []
    for stats in report.classes:
        rows.append(
            {
                "code": stats.class_id,
                "label": taxonomy.label(stats.class_id),
                "count": stats.count,
                "mean_confidence_pct": _pct(stats.mean_confidence, 1),
                "detected": stats.detected,
            }
        )
    rows.append(
        {
            "code": "TOTAL",
            "label": "",
            "count": report.total_count,
            "mean_confidence_pct": None,
            "detected": report.total_count > 0,
        }
    )
    return rows


def detection_rows(detections: Iterable[Detection], taxonomy: Taxonomy) -> List[Dict[str, Any]]:
    return [
        {
            "code": det.class_id,
            "object": taxonomy.name(det.class_id),
            "confidence_pct": _pct(det.score, 2),
            "x1": _px(det.x1),
            "y1": _px(det.y1),
            "x2": _px(det.x2),
            "y2": _px(det.y2),
            "width": _px(det.width),
            "height": _px(det.height),
        }
        for det in detections
    ]


def summary(result: InventoryResult) -> Dict[str, Any]:
    width, height = result.image_size
    return {
        "total_objects": result.report.total_count,
        "avg_confidence_pct": _pct(result.report.overall_mean_confidence, 1),
        "image_size": f"{int(width)} x {int(height)} px",
    }


def report_to_dict(report: AggregateReport, taxonomy: Taxonomy) -> Dict[str, Any]:
    return {
        "classes": [
            {
                "class_id": stats.class_id,
                "name": taxonomy.name(stats.class_id),
                "count": stats.count,
                "mean_confidence": stats.mean_confidence,
            }
            for stats in report.classes
        ],
        "total_count": report.total_count,
        "overall_mean_confidence": report.overall_mean_confidence,
    }


def format_inventory_table(rows: List[Dict[str, Any]]) -> str:
    header = f"{'Code':<6} {'Object':<16} {'Count':>5} {'Conf %':>7}  Status"
    lines = [header, "-" * len(header)]
    for row in rows:
        if row["code"] == "TOTAL":
            lines.append("-" * len(header))
            lines.append(f"{'TOTAL':<23} {row['count']:>5} {'-':>7}")
            continue
        status = "detected" if row["detected"] else "-"
        lines.append(
            f"{row['code']:<6} {row['label']:<16} {row['count']:>5} {row['mean_confidence_pct']:>7.1f}  {status}"
        )
    return "\n".join(lines)
