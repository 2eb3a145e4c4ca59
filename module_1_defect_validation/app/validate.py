"""Entry point for Module 1 ground-truth validation of detector output."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .config.settings import ValidationSettings, load_settings
from .models import ComparisonResult
from .services.annotation_parser import AnnotationParseError, load_pascal_voc
from .services.category_normalizer import CategoryNormalizer
from .services.correlator import Correlator
from .services.detection_ingestor import DetectionFormatError, DetectionIngestor

LOGGER = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Module 1 - Defect Detection Validation")
    parser.add_argument("--detections", type=Path, required=True, help="Detector output JSON file")
    parser.add_argument("--annotations", type=Path, required=True, help="PASCAL VOC ground-truth XML file")
    parser.add_argument("--image-width", type=int, required=True, help="Annotated image width in pixels")
    parser.add_argument("--image-height", type=int, required=True, help="Annotated image height in pixels")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold for a match")
    parser.add_argument("--category-rules", type=str, default=None, help="YAML file with detection family rules")
    parser.add_argument("--output", type=str, default=None, help="Write the comparison JSON to this path")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Logging format")
    return parser


def setup_logging(settings: ValidationSettings) -> None:
    """Log to stderr; stdout is reserved for the comparison JSON."""
    if settings.log_format == "json":
        formatter = logging.Formatter('{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}')
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logging.basicConfig(level=logging.INFO, handlers=[handler])


def resolve_settings(args: argparse.Namespace) -> ValidationSettings:
    overrides = {}
    if args.iou is not None:
        overrides["iou_threshold"] = args.iou
    if args.category_rules:
        overrides["category_rules_path"] = args.category_rules
    if args.output:
        overrides["output_path"] = args.output
    if args.log_format:
        overrides["log_format"] = args.log_format
    return load_settings(**overrides)


def build_correlator(settings: ValidationSettings) -> Correlator:
    normalizer = None
    if settings.category_rules_path:
        LOGGER.info("Loading category rules from %s", settings.category_rules_path)
        normalizer = CategoryNormalizer.from_yaml(settings.category_rules_path)
    return Correlator(iou_threshold=settings.iou_threshold, normalizer=normalizer)


def log_summary(result: ComparisonResult) -> None:
    LOGGER.info(
        "Matches: %d | Misses: %d | False positives: %d | Mean IoU: %.3f",
        result.matches,
        result.misses,
        result.false_positives,
        result.average_iou,
    )
    LOGGER.info(
        "Precision: %.3f | Recall: %.3f | F1: %.3f",
        result.precision,
        result.recall,
        result.f1_score,
    )
    for category, metrics in result.per_class_metrics.items():
        LOGGER.info(
            "  %s: tp=%d fp=%d fn=%d gt=%d f1=%.3f",
            category,
            metrics.tp,
            metrics.fp,
            metrics.fn,
            metrics.total_ground_truth,
            metrics.f1_score,
        )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    settings = resolve_settings(args)
    setup_logging(settings)

    try:
        detections = DetectionIngestor().load(args.detections)
        references = load_pascal_voc(args.annotations, args.image_width, args.image_height)
    except (DetectionFormatError, AnnotationParseError) as exc:
        LOGGER.error("Validation inputs could not be read: %s", exc)
        return 2

    try:
        correlator = build_correlator(settings)
    except (ValueError, yaml.YAMLError, OSError) as exc:
        LOGGER.error("Category rules could not be loaded: %s", exc)
        return 2

    LOGGER.info("Comparing %d detections against %d references", len(detections), len(references))
    result = correlator.compare(detections, references)
    log_summary(result)

    payload = json.dumps(result.to_dict(), indent=2)
    if settings.output_path:
        settings.output_path.parent.mkdir(parents=True, exist_ok=True)
        settings.output_path.write_text(payload, encoding="utf-8")
        LOGGER.info("Wrote comparison to %s", settings.output_path)
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
