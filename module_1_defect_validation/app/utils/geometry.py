"""Geometry helper utilities for normalized bounding boxes."""
from __future__ import annotations

from ..models import BoundingBox


def box_area(box: BoundingBox) -> float:
    """Return the area of a box, treating malformed boxes as empty."""

    return box.area


def intersection_over_union(box_a: BoundingBox, box_b: BoundingBox) -> float:
    """Return the IoU of two axis-aligned boxes.

    Malformed boxes (non-positive width or height) and disjoint boxes yield 0.
    """

    if not box_a.is_valid or not box_b.is_valid:
        return 0.0

    inter_width = min(box_a.x_max, box_b.x_max) - max(box_a.x_min, box_b.x_min)
    inter_height = min(box_a.y_max, box_b.y_max) - max(box_a.y_min, box_b.y_min)
    if inter_width <= 0 or inter_height <= 0:
        return 0.0

    inter_area = inter_width * inter_height
    union = box_a.area + box_b.area - inter_area
    if union <= 0:
        return 0.0
    return inter_area / union


def normalize_pixel_box(
    x_min: float,
    y_min: float,
    x_max: float,
    y_max: float,
    image_width: float,
    image_height: float,
) -> BoundingBox:
    """Convert pixel coordinates into an image-relative box."""

    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be greater than zero for coordinate conversion")
    return BoundingBox(
        x_min=x_min / image_width,
        y_min=y_min / image_height,
        x_max=x_max / image_width,
        y_max=y_max / image_height,
    )
