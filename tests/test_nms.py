import unittest

import numpy as np

from detect_kit.nms import NMSConfig, box_iou, nms, suppress
from detect_kit.types import Detection


def _det(x1, y1, x2, y2, score, class_id=0):
    return Detection(x1=x1, y1=y1, x2=x2, y2=y2, score=score, class_id=class_id)


class TestBoxIou(unittest.TestCase):
    def test_identical_boxes(self) -> None:
        self.assertEqual(box_iou((10, 10, 50, 40), (10, 10, 50, 40)), 1.0)

    def test_disjoint_boxes(self) -> None:
        self.assertEqual(box_iou((0, 0, 10, 10), (20, 20, 30, 30)), 0.0)

    def test_touching_edges_do_not_overlap(self) -> None:
        self.assertEqual(box_iou((0, 0, 10, 10), (10, 0, 20, 10)), 0.0)

    def test_contained_box_of_half_area(self) -> None:
        self.assertEqual(box_iou((0, 0, 20, 10), (0, 0, 10, 10)), 0.5)

    def test_zero_area_boxes_give_zero_not_nan(self) -> None:
        self.assertEqual(box_iou((5, 5, 5, 5), (5, 5, 5, 5)), 0.0)
        self.assertEqual(box_iou((1, 1, 1, 1), (3, 3, 3, 3)), 0.0)


class TestSuppress(unittest.TestCase):
    def test_empty_input(self) -> None:
        self.assertEqual(suppress([], 0.45), [])

    def test_keeps_higher_score_of_overlapping_pair(self) -> None:
        # IoU = 80 / 100 = 0.8
        low = _det(0, 0, 10, 8, 0.6)
        high = _det(0, 0, 10, 10, 0.9)
        self.assertEqual(suppress([low, high], 0.45), [high])

    def test_iou_threshold_is_strict(self) -> None:
        a = _det(0, 0, 20, 10, 0.9)
        b = _det(0, 0, 10, 10, 0.8)  # IoU exactly 0.5
        self.assertEqual(suppress([a, b], 0.5), [a, b])
        self.assertEqual(suppress([a, b], 0.49), [a])

    def test_suppressed_box_does_not_suppress_others(self) -> None:
        a = _det(0, 0, 10, 10, 0.9)
        b = _det(3, 0, 13, 10, 0.8)  # IoU(a, b) = 70/130
        c = _det(6, 0, 16, 10, 0.7)  # IoU(b, c) = 70/130, IoU(a, c) = 40/160
        self.assertEqual(suppress([c, b, a], 0.45), [a, c])

    def test_output_sorted_by_score_with_stable_ties(self) -> None:
        first = _det(0, 0, 10, 10, 0.5)
        second = _det(100, 100, 110, 110, 0.5)
        top = _det(200, 200, 210, 210, 0.7)
        self.assertEqual(suppress([first, second, top], 0.45), [top, first, second])

    def test_equal_scores_overlapping_keeps_earlier_candidate(self) -> None:
        earlier = _det(0, 0, 10, 10, 0.8, class_id=2)
        later = _det(0, 0, 10, 10, 0.8, class_id=3)
        self.assertEqual(suppress([earlier, later], 0.45), [earlier])

    def test_class_agnostic_by_default(self) -> None:
        a = _det(0, 0, 10, 10, 0.9, class_id=0)
        b = _det(0, 0, 10, 10, 0.7, class_id=1)
        self.assertEqual(suppress([a, b], 0.45), [a])
        self.assertEqual(suppress([b, a], 0.45, class_agnostic=False), [a, b])

    def test_idempotent(self) -> None:
        rng = np.random.default_rng(3)
        candidates = []
        for i in range(60):
            x1, y1 = rng.uniform(0, 500, size=2)
            w, h = rng.uniform(5, 120, size=2)
            candidates.append(_det(float(x1), float(y1), float(x1 + w), float(y1 + h), float(rng.uniform(0.3, 1.0)), i % 6))
        dup = candidates[0]
        candidates.append(_det(dup.x1 + 1.0, dup.y1, dup.x2 + 1.0, dup.y2, dup.score / 2, dup.class_id))
        once = suppress(candidates, 0.45)
        self.assertLess(len(once), len(candidates))
        self.assertEqual(suppress(once, 0.45), once)

    def test_zero_area_candidates_survive(self) -> None:
        a = _det(5, 5, 5, 5, 0.9)
        b = _det(5, 5, 5, 5, 0.8)
        self.assertEqual(suppress([a, b], 0.0), [a, b])


class TestNmsIndices(unittest.TestCase):
    def test_returns_indices_in_selection_order(self) -> None:
        boxes = np.array([[0, 0, 10, 10], [50, 50, 60, 60], [1, 1, 10, 10]], dtype=np.float32)
        scores = np.array([0.6, 0.9, 0.7], dtype=np.float32)
        keep = nms(boxes, scores, NMSConfig(iou_threshold=0.45))
        self.assertEqual(keep.tolist(), [1, 2])

    def test_max_detections_caps_selection(self) -> None:
        boxes = np.array([[0, 0, 1, 1], [5, 5, 6, 6], [9, 9, 10, 10]], dtype=np.float64)
        scores = np.array([0.1, 0.3, 0.2])
        keep = nms(boxes, scores, NMSConfig(iou_threshold=0.45, max_detections=2))
        self.assertEqual(keep.tolist(), [1, 2])

    def test_empty(self) -> None:
        keep = nms(np.empty((0, 4)), np.empty((0,)), NMSConfig())
        self.assertEqual(keep.shape, (0,))

    def test_mismatched_lengths_raise(self) -> None:
        with self.assertRaises(ValueError):
            nms(np.zeros((2, 4)), np.zeros((3,)), NMSConfig())


if __name__ == "__main__":
    unittest.main()
