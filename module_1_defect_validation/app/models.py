"""Shared data models for Module 1."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DEFECT_TYPES = (
    "Pothole",
    "Rutting",
    "Alligator Crack",
    "Roughness",
    "Distress",
    "Longitudinal Crack",
    "Transverse Crack",
    "Block Crack",
)


@dataclass(frozen=True)
class BoundingBox:
    """Image-relative box with coordinates normalized to [0, 1]."""

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def is_valid(self) -> bool:
        return self.x_min < self.x_max and self.y_min < self.y_max

    @property
    def area(self) -> float:
        """Return the box area, zero for malformed boxes."""

        if not self.is_valid:
            return 0.0
        return self.width * self.height

    def to_dict(self) -> Dict[str, float]:
        return {
            "x_min": self.x_min,
            "y_min": self.y_min,
            "x_max": self.x_max,
            "y_max": self.y_max,
        }


@dataclass(frozen=True)
class Detection:
    """A defect reported by the external detector."""

    defect_type: str
    box: BoundingBox
    confidence: Optional[float] = None

    def __post_init__(self) -> None:
        if self.defect_type not in DEFECT_TYPES:
            raise ValueError(f"Unknown defect type '{self.defect_type}'")
        if self.confidence is not None and not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")


@dataclass(frozen=True)
class ReferenceAnnotation:
    """A ground-truth defect read from an annotation file."""

    defect_type: str
    box: BoundingBox


@dataclass(frozen=True)
class ClassMetrics:
    tp: int
    fp: int
    fn: int
    total_ground_truth: int
    precision: float
    recall: float
    f1_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tp": self.tp,
            "fp": self.fp,
            "fn": self.fn,
            "total_ground_truth": self.total_ground_truth,
            "precision": self.precision,
            "recall": self.recall,
            "f1_score": self.f1_score,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of one detections-versus-references comparison."""

    tp: int
    fp: int
    fn: int
    average_iou: float
    precision: float
    recall: float
    f1_score: float
    per_class_metrics: Dict[str, ClassMetrics] = field(default_factory=dict)

    @property
    def matches(self) -> int:
        return self.tp

    @property
    def misses(self) -> int:
        return self.fn

    @property
    def false_positives(self) -> int:
        return self.fp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tp": self.tp,
            "fp": self.fp,
            "fn": self.fn,
            "average_iou": self.average_iou,
            "precision": self.precision,
            "recall": self.recall,
            "f1_score": self.f1_score,
            "per_class_metrics": {
                name: metrics.to_dict() for name, metrics in self.per_class_metrics.items()
            },
        }
