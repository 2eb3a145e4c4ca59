"""Match detections against ground truth and derive accuracy metrics."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Set, Tuple

from ..models import ClassMetrics, ComparisonResult, Detection, ReferenceAnnotation
from ..utils.geometry import intersection_over_union
from .category_normalizer import CategoryNormalizer

DEFAULT_IOU_THRESHOLD = 0.5


@dataclass
class _ClassTally:
    total_ground_truth: int = 0
    tp: int = 0
    fp: int = 0
    fn: int = 0
    iou_sum: float = 0.0


def precision_recall_f1(tp: int, fp: int, fn: int) -> Tuple[float, float, float]:
    """Return (precision, recall, f1), using 0 wherever a denominator is 0."""

    precision = tp / (tp + fp) if tp + fp > 0 else 0.0
    recall = tp / (tp + fn) if tp + fn > 0 else 0.0
    f1_score = 2 * precision * recall / (precision + recall) if precision + recall > 0 else 0.0
    return precision, recall, f1_score


class Correlator:
    """Greedy, type-constrained matcher between detections and references.

    Detections are visited in the order given and each claims the unconsumed
    reference of the same category with the highest IoU (first one wins on
    ties). This is not a globally optimal assignment: reordering detections
    can change the outcome when several candidates overlap.
    """

    def __init__(
        self,
        iou_threshold: float = DEFAULT_IOU_THRESHOLD,
        normalizer: Optional[CategoryNormalizer] = None,
    ) -> None:
        if not 0.0 <= iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be within [0, 1]")
        self.iou_threshold = iou_threshold
        self.normalizer = normalizer or CategoryNormalizer()

    def compare(
        self,
        detections: Sequence[Detection],
        references: Sequence[ReferenceAnnotation],
    ) -> ComparisonResult:
        reference_types = [self.normalizer.normalize_reference(ref.defect_type) for ref in references]
        detection_types = [self.normalizer.normalize_detection(det.defect_type) for det in detections]

        tallies: Dict[str, _ClassTally] = {}
        for category in reference_types + detection_types:
            tallies.setdefault(category, _ClassTally())
        for category in reference_types:
            tallies[category].total_ground_truth += 1

        consumed: Set[int] = set()
        for detection, category in zip(detections, detection_types):
            best_iou = -1.0
            best_index = -1
            for index, reference in enumerate(references):
                if index in consumed or reference_types[index] != category:
                    continue
                iou = intersection_over_union(detection.box, reference.box)
                if iou > best_iou:
                    best_iou = iou
                    best_index = index

            tally = tallies.setdefault(category, _ClassTally())
            if best_index >= 0 and best_iou >= self.iou_threshold:
                tally.tp += 1
                tally.iou_sum += best_iou
                consumed.add(best_index)
            else:
                tally.fp += 1

        for index, category in enumerate(reference_types):
            if index not in consumed:
                tallies[category].fn += 1

        return self._summarize(tallies)

    @staticmethod
    def _summarize(tallies: Dict[str, _ClassTally]) -> ComparisonResult:
        per_class: Dict[str, ClassMetrics] = {}
        total_tp = total_fp = total_fn = 0
        total_iou = 0.0
        for category, tally in tallies.items():
            precision, recall, f1_score = precision_recall_f1(tally.tp, tally.fp, tally.fn)
            per_class[category] = ClassMetrics(
                tp=tally.tp,
                fp=tally.fp,
                fn=tally.fn,
                total_ground_truth=tally.total_ground_truth,
                precision=precision,
                recall=recall,
                f1_score=f1_score,
            )
            total_tp += tally.tp
            total_fp += tally.fp
            total_fn += tally.fn
            total_iou += tally.iou_sum

        precision, recall, f1_score = precision_recall_f1(total_tp, total_fp, total_fn)
        return ComparisonResult(
            tp=total_tp,
            fp=total_fp,
            fn=total_fn,
            average_iou=total_iou / total_tp if total_tp > 0 else 0.0,
            precision=precision,
            recall=recall,
            f1_score=f1_score,
            per_class_metrics=per_class,
        )


def compare_detections(
    detections: Sequence[Detection],
    references: Sequence[ReferenceAnnotation],
    iou_threshold: float = DEFAULT_IOU_THRESHOLD,
    normalizer: Optional[CategoryNormalizer] = None,
) -> ComparisonResult:
    """Convenience wrapper around :class:`Correlator`."""

    return Correlator(iou_threshold=iou_threshold, normalizer=normalizer).compare(detections, references)
