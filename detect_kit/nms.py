from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .types import Detection


@dataclass(frozen=True)
class NMSConfig:
    iou_threshold: float = 0.45
    # None keeps every box that survives suppression.
    max_detections: Optional[int] = None

    def __post_init__(self) -> None:
        if self.iou_threshold < 0:
            raise ValueError("iou_threshold must be >= 0")
        if self.max_detections is not None and self.max_detections <= 0:
            raise ValueError("max_detections must be > 0 when set")


def box_iou(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Intersection-over-Union of two xyxy boxes.

    Two zero-area boxes that do not intersect have a zero union; that case
    returns 0.0 instead of NaN so it never suppresses anything.
    """

    ix1 = max(a[0], b[0])
    iy1 = max(a[1], b[1])
    ix2 = min(a[2], b[2])
    iy2 = min(a[3], b[3])

    inter = max(0.0, ix2 - ix1) * max(0.0, iy2 - iy1)
    area_a = (a[2] - a[0]) * (a[3] - a[1])
    area_b = (b[2] - b[0]) * (b[3] - b[1])
    union = area_a + area_b - inter
    if union <= 0.0:
        return 0.0
    return float(inter / union)


def _iou_one_to_many(boxes: np.ndarray, areas: np.ndarray, i: int, others: np.ndarray) -> np.ndarray:
    xx1 = np.maximum(boxes[i, 0], boxes[others, 0])
    yy1 = np.maximum(boxes[i, 1], boxes[others, 1])
    xx2 = np.minimum(boxes[i, 2], boxes[others, 2])
    yy2 = np.minimum(boxes[i, 3], boxes[others, 3])

    w = np.maximum(0.0, xx2 - xx1)
    h = np.maximum(0.0, yy2 - yy1)
    inter = w * h
    union = areas[i] + areas[others] - inter

    iou = np.zeros_like(inter)
    np.divide(inter, union, out=iou, where=union > 0.0)
    return iou


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, in selection order.

    Boxes are visited by descending score; equal scores keep their input
    order. A box is dropped when its IoU with an already selected box is
    strictly greater than `cfg.iou_threshold`.
    """

    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    if boxes.shape[0] != scores.shape[0]:
        raise ValueError(f"Got {boxes.shape[0]} boxes but {scores.shape[0]} scores.")
    if boxes.shape[0] == 0:
        return np.empty((0,), dtype=np.int32)

    areas = (boxes[:, 2] - boxes[:, 0]) * (boxes[:, 3] - boxes[:, 1])
    order = np.argsort(-scores, kind="stable")
    keep: List[int] = []

    while order.size > 0:
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break
        i = int(order[0])
        keep.append(i)

        rest = order[1:]
        iou = _iou_one_to_many(boxes, areas, i, rest)
        order = rest[iou <= cfg.iou_threshold]

    return np.array(keep, dtype=np.int32)


def batched_nms(boxes: np.ndarray, scores: np.ndarray, class_ids: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Per-class NMS: boxes only suppress boxes of the same class. Kept indices
    are merged back into global selection order (score desc, then input order).
    """

    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    class_ids = np.asarray(class_ids).reshape(-1)

    per_class_cfg = NMSConfig(iou_threshold=cfg.iou_threshold)
    kept: List[int] = []
    for cls in np.unique(class_ids):
        idx = np.where(class_ids == cls)[0]
        keep_local = nms(boxes[idx], scores[idx], per_class_cfg)
        kept.extend(idx[keep_local].tolist())

    if not kept:
        return np.empty((0,), dtype=np.int32)

    kept_arr = np.array(kept, dtype=np.int64)
    kept_arr = kept_arr[np.lexsort((kept_arr, -scores[kept_arr]))]
    if cfg.max_detections is not None:
        kept_arr = kept_arr[: cfg.max_detections]
    return kept_arr.astype(np.int32)


def suppress(
    candidates: Iterable[Detection],
    iou_threshold: float = 0.45,
    *,
    class_agnostic: bool = True,
    max_detections: Optional[int] = None,
) -> List[Detection]:
    """
    Run NMS over decoded candidates and return the surviving detections in
    selection order. Suppression is class-agnostic unless asked otherwise.
    """

    candidates = list(candidates)
    if not candidates:
        return []

    cfg = NMSConfig(iou_threshold=iou_threshold, max_detections=max_detections)
    boxes = np.array([c.as_xyxy() for c in candidates], dtype=np.float64)
    scores = np.array([c.score for c in candidates], dtype=np.float64)

    if class_agnostic:
        keep = nms(boxes, scores, cfg)
    else:
        class_ids = np.array([c.class_id for c in candidates], dtype=np.int64)
        keep = batched_nms(boxes, scores, class_ids, cfg)

    return [candidates[i] for i in keep.tolist()]
