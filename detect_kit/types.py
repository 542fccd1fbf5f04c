from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Detection:
    """
    One recognized object: xyxy corners in original image pixels, the
    winning class index and its confidence (objectness * class probability).
    """

    x1: float
    y1: float
    x2: float
    y2: float
    score: float
    class_id: int

    @property
    def bbox(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def area(self) -> float:
        return self.width * self.height


# Decoder output has the same shape as a final detection.
RawCandidate = Detection
