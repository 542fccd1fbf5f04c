"""
Post-processing helpers for flat YOLO-style detector output.

Works on the raw NumPy (or plain float sequence) tensor emitted by the
inference engine: decode candidates, suppress overlaps, aggregate per class.
Running the network and image handling stay outside this package.
"""

from .types import Detection, RawCandidate
from .nms import NMSConfig, batched_nms, box_iou, nms, suppress
from .postprocess import PostConfig, Postprocessor, decode
from .stats import AggregateReport, ClassStatistics, aggregate

__all__ = [
    "Detection",
    "RawCandidate",
    "NMSConfig",
    "batched_nms",
    "box_iou",
    "nms",
    "suppress",
    "PostConfig",
    "Postprocessor",
    "decode",
    "AggregateReport",
    "ClassStatistics",
    "aggregate",
]
