from __future__ import annotations

import json
from pathlib import Path

import pytest

from module_1_defect_validation.app.models import BoundingBox, Detection
from module_1_defect_validation.app.services.detection_ingestor import (
    DetectionFormatError,
    DetectionIngestor,
)


def build_payload() -> dict:
    return {
        "defects": [
            {
                "type": "Block Crack",
                "boundingBox": {"x_min": 0.5, "y_min": 0.5, "x_max": 0.8, "y_max": 0.6},
                "confidence": 0.7,
                "description": "Interconnected cracks",
            },
            {"type": "Pothole", "boundingBox": {"x_min": 0.1, "y_min": 0.1, "x_max": 0.3, "y_max": 0.3}},
            {"type": "Manhole", "boundingBox": {"x_min": 0.1, "y_min": 0.1, "x_max": 0.3, "y_max": 0.3}},
            {"type": "Rutting", "boundingBox": {"x_min": 0.1, "y_min": 0.1}},
            {"type": "Rutting", "box": [0.0, 0.2, 0.4, 0.9], "confidence": "0.4"},
            {"type": "Distress", "boundingBox": {"x_min": 0, "y_min": 0, "x_max": 1, "y_max": 1}, "confidence": 3},
            "not-a-defect",
        ]
    }


def test_ingestor_keeps_valid_detections_in_order() -> None:
    detections = DetectionIngestor().parse(build_payload())

    assert detections == [
        Detection("Block Crack", BoundingBox(0.5, 0.5, 0.8, 0.6), 0.7),
        Detection("Pothole", BoundingBox(0.1, 0.1, 0.3, 0.3), None),
        Detection("Rutting", BoundingBox(0.0, 0.2, 0.4, 0.9), 0.4),
    ]


def test_ingestor_accepts_bare_list() -> None:
    payload = build_payload()["defects"][:2]
    assert [d.defect_type for d in DetectionIngestor().parse(payload)] == ["Block Crack", "Pothole"]


def test_ingestor_rejects_unexpected_payload() -> None:
    with pytest.raises(DetectionFormatError):
        DetectionIngestor().parse({"defects": "none"})


def test_ingestor_loads_file(tmp_path: Path) -> None:
    source = tmp_path / "detections.json"
    source.write_text(json.dumps(build_payload()), encoding="utf-8")
    assert len(DetectionIngestor().load(source)) == 3


def test_ingestor_reports_unreadable_json(tmp_path: Path) -> None:
    source = tmp_path / "detections.json"
    source.write_text("{not json", encoding="utf-8")
    with pytest.raises(DetectionFormatError):
        DetectionIngestor().load(source)


def test_detection_rejects_unknown_type_and_bad_confidence() -> None:
    box = BoundingBox(0.1, 0.1, 0.2, 0.2)
    with pytest.raises(ValueError):
        Detection("Manhole", box)
    with pytest.raises(ValueError):
        Detection("Pothole", box, confidence=1.2)
