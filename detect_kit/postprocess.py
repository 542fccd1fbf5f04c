import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .nms import suppress
from .types import Detection


logger = logging.getLogger(__name__)

Buffer = Union[Sequence[float], np.ndarray]


def _check_threshold(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1] (got {value})")


def _check_num_classes(num_classes: int) -> None:
    if isinstance(num_classes, bool) or int(num_classes) != num_classes or num_classes <= 0:
        raise ValueError(f"num_classes must be a positive integer (got {num_classes})")


def _check_image_size(img_width: float, img_height: float) -> None:
    for name, value in (("img_width", img_width), ("img_height", img_height)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be a finite number > 0 (got {value})")


@dataclass(frozen=True)
class PostConfig:
    """
    Post-processing settings for the flat (N * (5 + C)) YOLO output.
    """

    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    num_classes: int = 6
    # If False, skip NMS and only keep the thresholded candidates ranked by score.
    apply_nms: bool = True
    # If False, boxes only suppress boxes of their own class.
    class_agnostic_nms: bool = True
    # None keeps every detection.
    max_detections: Optional[int] = None

    def __post_init__(self) -> None:
        _check_threshold("conf_threshold", self.conf_threshold)
        _check_threshold("iou_threshold", self.iou_threshold)
        _check_num_classes(self.num_classes)
        if self.max_detections is not None and self.max_detections <= 0:
            raise ValueError("max_detections must be > 0 when set")


def _decode_arrays(
    buffer: Buffer,
    num_classes: int,
    confidence_threshold: float,
    img_width: float,
    img_height: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorized decode. Returns (boxes_xyxy, scores, class_ids) for the
    candidates that pass the confidence and frame-boundary filters, in
    buffer order.
    """

    p = np.asarray(buffer, dtype=np.float64).reshape(-1)
    stride = 5 + num_classes
    num_boxes = p.size // stride
    if num_boxes == 0:
        return np.empty((0, 4)), np.empty((0,)), np.empty((0,), dtype=np.int64)

    # trailing partial record is ignored
    records = p[: num_boxes * stride].reshape(num_boxes, stride)

    cx = records[:, 0]
    cy = records[:, 1]
    w_box = records[:, 2]
    h_box = records[:, 3]
    objectness = records[:, 4]
    class_scores = records[:, 5:]

    # argmax picks the first index on ties; the running max starts at 0 so a
    # record without a positive class score reads as class 0 with prob 0.
    class_ids = np.argmax(class_scores, axis=1)
    class_conf = class_scores[np.arange(num_boxes), class_ids]
    non_positive = ~(class_conf > 0.0)
    class_ids = np.where(non_positive, 0, class_ids).astype(np.int64)
    class_conf = np.where(non_positive, 0.0, class_conf)

    scores = objectness * class_conf

    # Convert normalized cxcywh -> pixel xyxy
    x1 = (cx - w_box / 2) * img_width
    y1 = (cy - h_box / 2) * img_height
    x2 = (cx + w_box / 2) * img_width
    y2 = (cy + h_box / 2) * img_height

    # Hard frame filter: partially visible boxes are dropped, not clamped.
    inside = (x1 >= 0) & (y1 >= 0) & (x2 <= img_width) & (y2 <= img_height)
    # negative sizes would invert the corners
    ordered = (x1 <= x2) & (y1 <= y2)
    keep = (scores > confidence_threshold) & inside & ordered

    boxes_xyxy = np.stack([x1, y1, x2, y2], axis=1)[keep]
    logger.debug(
        "decoded %d records: %d above threshold, %d kept inside frame",
        num_boxes,
        int(np.count_nonzero(scores > confidence_threshold)),
        int(np.count_nonzero(keep)),
    )
    return boxes_xyxy, scores[keep], class_ids[keep]


def _to_detections(boxes_xyxy: np.ndarray, scores: np.ndarray, class_ids: np.ndarray) -> List[Detection]:
    return [
        Detection(
            x1=float(x1),
            y1=float(y1),
            x2=float(x2),
            y2=float(y2),
            score=float(score),
            class_id=int(cls_id),
        )
        for (x1, y1, x2, y2), score, cls_id in zip(boxes_xyxy, scores, class_ids)
    ]


def decode(
    buffer: Buffer,
    num_classes: int,
    confidence_threshold: float,
    img_width: float,
    img_height: float,
) -> List[Detection]:
    """
    Turn a flat detector output into raw candidates in original image pixels.

    Each record is `[cx, cy, w, h, objectness, class_scores...]` with the box
    normalized to 0..1. A candidate is kept when `objectness * best class
    probability` is strictly above `confidence_threshold` and the whole box
    lies inside `[0, img_width] x [0, img_height]`. Records with a negative
    width or height are dropped so every box satisfies x1 <= x2, y1 <= y2.

    Args:
        buffer: flat sequence (or array of any shape) of floats
        num_classes: number of class scores per record
        confidence_threshold: scores <= this value are discarded
        img_width, img_height: original image size in pixels
    """

    _check_num_classes(num_classes)
    _check_threshold("confidence_threshold", confidence_threshold)
    _check_image_size(img_width, img_height)

    boxes_xyxy, scores, class_ids = _decode_arrays(
        buffer, int(num_classes), float(confidence_threshold), float(img_width), float(img_height)
    )
    return _to_detections(boxes_xyxy, scores, class_ids)


class Postprocessor:
    """
    Decode + suppress in one call, configured once with a `PostConfig`.
    """

    def __init__(self, cfg: PostConfig):
        self.cfg = cfg

    def process(self, buffer: Buffer, orig_size: Tuple[float, float]) -> List[Detection]:
        """
        Args:
            buffer: raw model output for a single image
            orig_size: (width, height) of the original image
        """

        img_width, img_height = orig_size
        candidates = decode(buffer, self.cfg.num_classes, self.cfg.conf_threshold, img_width, img_height)
        if not candidates:
            return []

        if not self.cfg.apply_nms:
            return self._select_topk(candidates)

        detections = suppress(
            candidates,
            self.cfg.iou_threshold,
            class_agnostic=self.cfg.class_agnostic_nms,
            max_detections=self.cfg.max_detections,
        )
        logger.debug("nms kept %d of %d candidates", len(detections), len(candidates))
        return detections

    def _select_topk(self, candidates: List[Detection]) -> List[Detection]:
        ranked = sorted(candidates, key=lambda d: -d.score)
        if self.cfg.max_detections is not None:
            ranked = ranked[: self.cfg.max_detections]
        return ranked
