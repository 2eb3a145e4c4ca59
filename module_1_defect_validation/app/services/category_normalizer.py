"""Category normalization shared by detections and reference annotations."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

import yaml


@dataclass(frozen=True)
class FamilyRule:
    """Collapse any detection label containing ``keyword`` into ``family``."""

    keyword: str
    family: str

    def matches(self, label: str) -> bool:
        return self.keyword.lower() in label.lower()


DEFAULT_FAMILY_RULES: Tuple[FamilyRule, ...] = (
    FamilyRule(keyword="crack", family="Crack"),
    FamilyRule(keyword="pothole", family="Pothole"),
)


class CategoryNormalizer:
    """Maps detector and annotation labels onto a shared vocabulary.

    Ground-truth datasets are usually coarser than the detector's classes, so
    detection labels are bucketed into families by an ordered rule table
    (first matching rule wins, unmatched labels pass through). Reference
    labels only get their casing normalized.
    """

    def __init__(self, rules: Optional[Sequence[FamilyRule]] = None) -> None:
        self.rules: Tuple[FamilyRule, ...] = tuple(DEFAULT_FAMILY_RULES if rules is None else rules)

    @classmethod
    def from_yaml(cls, path: Path) -> "CategoryNormalizer":
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
        if not isinstance(payload, dict):
            raise ValueError(f"Category rules file {path} must contain a mapping")
        raw_rules = payload.get("detection_families")
        if raw_rules is None:
            return cls()
        if not isinstance(raw_rules, list):
            raise ValueError("'detection_families' must be a list of keyword/family entries")
        rules = []
        for entry in raw_rules:
            if not isinstance(entry, dict):
                raise ValueError(f"Invalid family rule: {entry!r}")
            keyword = str(entry.get("keyword") or "").strip()
            family = str(entry.get("family") or "").strip()
            if not keyword or not family:
                raise ValueError(f"Family rule needs both keyword and family: {entry!r}")
            rules.append(FamilyRule(keyword=keyword, family=family))
        return cls(rules)

    def normalize_detection(self, label: str) -> str:
        for rule in self.rules:
            if rule.matches(label):
                return rule.family
        return label

    @staticmethod
    def normalize_reference(label: str) -> str:
        # "pothole" -> "Pothole", "ALLIGATOR crack" -> "Alligator crack"
        return label[:1].upper() + label[1:].lower()

    def mapping_for(self, labels: Iterable[str]) -> Dict[str, str]:
        """Return the detection-label mapping for ``labels`` for auditing."""

        return {label: self.normalize_detection(label) for label in labels}
