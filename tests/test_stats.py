import unittest

from detect_kit.stats import aggregate
from detect_kit.types import Detection


def _det(score, class_id):
    return Detection(x1=0.0, y1=0.0, x2=10.0, y2=10.0, score=score, class_id=class_id)


class TestAggregate(unittest.TestCase):
    def test_per_class_counts_and_means(self) -> None:
        report = aggregate([_det(0.5, 0), _det(0.9, 0), _det(0.3, 1)], num_classes=2)
        c0, c1 = report.classes
        self.assertEqual(c0.count, 2)
        self.assertAlmostEqual(c0.mean_confidence, 0.7)
        self.assertEqual(c1.count, 1)
        self.assertAlmostEqual(c1.mean_confidence, 0.3)
        self.assertEqual(report.total_count, 3)
        self.assertAlmostEqual(report.overall_mean_confidence, (0.5 + 0.9 + 0.3) / 3)

    def test_one_entry_per_known_class_in_order(self) -> None:
        report = aggregate([_det(0.8, 4)], num_classes=6)
        self.assertEqual([c.class_id for c in report.classes], [0, 1, 2, 3, 4, 5])
        self.assertEqual(report.counts(), [0, 0, 0, 0, 1, 0])
        self.assertEqual(report.mean_confidences(), [0.0, 0.0, 0.0, 0.0, 0.8, 0.0])
        self.assertEqual([c.detected for c in report.classes], [False, False, False, False, True, False])

    def test_empty_detection_set(self) -> None:
        report = aggregate([], num_classes=3)
        self.assertEqual(report.counts(), [0, 0, 0])
        self.assertEqual(report.mean_confidences(), [0.0, 0.0, 0.0])
        self.assertEqual(report.total_count, 0)
        self.assertEqual(report.overall_mean_confidence, 0.0)

    def test_class_accumulators_are_independent(self) -> None:
        report = aggregate([_det(0.4, 1), _det(0.6, 1)], num_classes=3)
        self.assertEqual(report.counts(), [0, 2, 0])
        self.assertEqual(report.classes[0].mean_confidence, 0.0)
        self.assertEqual(report.classes[2].mean_confidence, 0.0)

    def test_deterministic(self) -> None:
        dets = [_det(0.1 * i, i % 3) for i in range(1, 10)]
        self.assertEqual(aggregate(dets, 3), aggregate(list(dets), 3))

    def test_out_of_range_class_raises(self) -> None:
        with self.assertRaises(ValueError):
            aggregate([_det(0.9, 2)], num_classes=2)
        with self.assertRaises(ValueError):
            aggregate([_det(0.9, -1)], num_classes=2)

    def test_invalid_num_classes_raises(self) -> None:
        with self.assertRaises(ValueError):
            aggregate([], num_classes=0)


if __name__ == "__main__":
    unittest.main()
