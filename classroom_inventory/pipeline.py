"""
End-to-end post-processing for one inference call:
raw tensor -> candidates -> suppressed detections -> per-class report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from detect_kit.postprocess import Postprocessor
from detect_kit.stats import AggregateReport, aggregate
from detect_kit.types import Detection

from .config import InventoryProfile


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventoryResult:
    detections: Tuple[Detection, ...]
    report: AggregateReport
    image_size: Tuple[float, float]


def run_inventory(
    buffer: Union[Sequence[float], np.ndarray],
    img_width: float,
    img_height: float,
    profile: Optional[InventoryProfile] = None,
) -> InventoryResult:
    profile = profile or InventoryProfile()
    post_cfg = profile.post_config()

    detections = Postprocessor(post_cfg).process(buffer, (img_width, img_height))
    report = aggregate(detections, post_cfg.num_classes)

    logger.info(
        "inventory: %d detections, mean confidence %.3f",
        report.total_count,
        report.overall_mean_confidence,
    )
    return InventoryResult(
        detections=tuple(detections),
        report=report,
        image_size=(float(img_width), float(img_height)),
    )
