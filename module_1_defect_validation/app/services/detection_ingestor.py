"""Load detector output from JSON into typed detections."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import DEFECT_TYPES, BoundingBox, Detection

LOGGER = logging.getLogger(__name__)

BOX_KEYS = ("boundingBox", "box", "bbox")


class DetectionFormatError(ValueError):
    """Raised when the detector payload cannot be read at all."""


class DetectionIngestor:
    """Turn a detector JSON payload into an ordered list of detections.

    Accepts either a bare list of defects or an object with a ``defects``
    list. Emission order is preserved since matching is order sensitive.
    """

    def load(self, path: Path) -> List[Detection]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise DetectionFormatError(f"Unable to read detections from {path}: {exc}") from exc
        return self.parse(payload)

    def parse(self, payload: object) -> List[Detection]:
        records = self._extract(payload)
        detections: List[Detection] = []
        for position, raw in enumerate(records):
            detection = self._coerce_detection(raw)
            if detection is None:
                LOGGER.warning("Skipping malformed detection at position %d", position)
                continue
            detections.append(detection)
        LOGGER.debug("Loaded %d detections", len(detections))
        return detections

    @staticmethod
    def _extract(payload: object) -> List[Dict[str, Any]]:
        if isinstance(payload, dict):
            payload = payload.get("defects", [])
        if not isinstance(payload, list):
            raise DetectionFormatError("Detection payload must be a list or contain a 'defects' list")
        return [item if isinstance(item, dict) else {} for item in payload]

    @classmethod
    def _coerce_detection(cls, raw: Dict[str, Any]) -> Optional[Detection]:
        defect_type = raw.get("type")
        if not isinstance(defect_type, str) or defect_type not in DEFECT_TYPES:
            return None
        box = cls._coerce_box(next((raw[key] for key in BOX_KEYS if key in raw), None))
        if box is None:
            return None
        confidence = raw.get("confidence")
        if confidence is not None:
            try:
                confidence = float(confidence)
            except (TypeError, ValueError):
                return None
            if not 0.0 <= confidence <= 1.0:
                return None
        return Detection(defect_type=defect_type, box=box, confidence=confidence)

    @staticmethod
    def _coerce_box(payload: object) -> Optional[BoundingBox]:
        if isinstance(payload, (list, tuple)) and len(payload) == 4:
            payload = dict(zip(("x_min", "y_min", "x_max", "y_max"), payload))
        if not isinstance(payload, dict):
            return None
        try:
            return BoundingBox(
                x_min=float(payload["x_min"]),
                y_min=float(payload["y_min"]),
                x_max=float(payload["x_max"]),
                y_max=float(payload["y_max"]),
            )
        except (KeyError, TypeError, ValueError):
            return None
