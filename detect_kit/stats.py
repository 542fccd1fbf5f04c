from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np

from .types import Detection


@dataclass(frozen=True)
class ClassStatistics:
    class_id: int
    count: int
    mean_confidence: float

    @property
    def detected(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class AggregateReport:
    """
    Per-class table (one entry per known class, in class index order) plus
    totals over the whole detection set.
    """

    classes: Tuple[ClassStatistics, ...]
    total_count: int
    overall_mean_confidence: float

    def counts(self) -> List[int]:
        return [c.count for c in self.classes]

    def mean_confidences(self) -> List[float]:
        return [c.mean_confidence for c in self.classes]


def aggregate(detections: Iterable[Detection], num_classes: int) -> AggregateReport:
    """
    Summarize a detection set into per-class counts and mean confidences.

    Raises ValueError when `num_classes` is not positive or a detection
    carries a class id outside `[0, num_classes)`.
    """

    if isinstance(num_classes, bool) or int(num_classes) != num_classes or num_classes <= 0:
        raise ValueError(f"num_classes must be a positive integer (got {num_classes})")
    num_classes = int(num_classes)

    detections = list(detections)
    class_ids = np.array([d.class_id for d in detections], dtype=np.int64)
    scores = np.array([d.score for d in detections], dtype=np.float64)

    if class_ids.size and (class_ids.min() < 0 or class_ids.max() >= num_classes):
        bad = sorted({int(c) for c in class_ids if c < 0 or c >= num_classes})
        raise ValueError(f"class ids {bad} out of range for {num_classes} classes")

    counts = np.bincount(class_ids, minlength=num_classes)
    sums = np.bincount(class_ids, weights=scores, minlength=num_classes)
    means = np.zeros(num_classes, dtype=np.float64)
    np.divide(sums, counts, out=means, where=counts > 0)

    total = len(detections)
    overall = float(scores.sum() / total) if total > 0 else 0.0

    return AggregateReport(
        classes=tuple(
            ClassStatistics(class_id=idx, count=int(counts[idx]), mean_confidence=float(means[idx]))
            for idx in range(num_classes)
        ),
        total_count=total,
        overall_mean_confidence=overall,
    )
