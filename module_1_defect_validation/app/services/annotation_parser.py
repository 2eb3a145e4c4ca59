"""PASCAL VOC ground-truth reader."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional

from ..models import ReferenceAnnotation
from ..utils.geometry import normalize_pixel_box

LOGGER = logging.getLogger(__name__)

BNDBOX_FIELDS = ("xmin", "ymin", "xmax", "ymax")


class AnnotationParseError(ValueError):
    """Raised when an annotation file cannot be turned into references."""


def parse_pascal_voc(xml_text: str, image_width: int, image_height: int) -> List[ReferenceAnnotation]:
    """Return the annotated objects with boxes normalized to the image size.

    Objects without a label or without all four box corners are skipped.
    Labels are kept verbatim apart from surrounding whitespace.
    """

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise AnnotationParseError(
            "Failed to parse XML file. Please ensure it's valid PASCAL VOC format."
        ) from exc

    if image_width <= 0 or image_height <= 0:
        raise AnnotationParseError("Image dimensions must be greater than zero for coordinate conversion.")

    references: List[ReferenceAnnotation] = []
    for obj in root.iter("object"):
        label = (obj.findtext("name") or "").strip()
        bndbox = obj.find("bndbox")
        if not label or bndbox is None:
            LOGGER.debug("Skipping VOC object without name or bndbox")
            continue
        coords = [_coerce_pixel(bndbox.findtext(name)) for name in BNDBOX_FIELDS]
        if any(value is None for value in coords):
            LOGGER.warning("Skipping '%s' annotation with incomplete bndbox", label)
            continue
        x_min, y_min, x_max, y_max = coords
        box = normalize_pixel_box(x_min, y_min, x_max, y_max, image_width, image_height)
        references.append(ReferenceAnnotation(defect_type=label, box=box))

    LOGGER.debug("Parsed %d reference annotations", len(references))
    return references


def load_pascal_voc(path: Path, image_width: int, image_height: int) -> List[ReferenceAnnotation]:
    """Read a VOC file from disk and parse it."""

    try:
        xml_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AnnotationParseError(f"Unable to read annotation file {path}: {exc}") from exc
    return parse_pascal_voc(xml_text, image_width, image_height)


def _coerce_pixel(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        # VOC coordinates are integers; some exporters write "12.0"
        return int(float(value.strip()))
    except (ValueError, OverflowError):
        return None
