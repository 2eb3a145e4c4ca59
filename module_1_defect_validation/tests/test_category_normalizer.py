from __future__ import annotations

from pathlib import Path

import pytest

from module_1_defect_validation.app.models import DEFECT_TYPES
from module_1_defect_validation.app.services.category_normalizer import (
    CategoryNormalizer,
    FamilyRule,
)


def test_default_table_collapses_crack_and_pothole_families() -> None:
    normalizer = CategoryNormalizer()
    mapping = normalizer.mapping_for(DEFECT_TYPES)

    assert mapping == {
        "Pothole": "Pothole",
        "Rutting": "Rutting",
        "Alligator Crack": "Crack",
        "Roughness": "Roughness",
        "Distress": "Distress",
        "Longitudinal Crack": "Crack",
        "Transverse Crack": "Crack",
        "Block Crack": "Crack",
    }


def test_detection_rules_are_case_insensitive_and_ordered() -> None:
    normalizer = CategoryNormalizer()
    assert normalizer.normalize_detection("hairline CRACKING") == "Crack"
    assert normalizer.normalize_detection("pothole crack") == "Crack"


def test_reference_labels_are_capitalized() -> None:
    assert CategoryNormalizer.normalize_reference("pothole") == "Pothole"
    assert CategoryNormalizer.normalize_reference("CRACK") == "Crack"
    assert CategoryNormalizer.normalize_reference("alligator Crack") == "Alligator crack"
    assert CategoryNormalizer.normalize_reference("") == ""


def test_custom_rules_replace_default_table() -> None:
    normalizer = CategoryNormalizer([FamilyRule(keyword="rut", family="Deformation")])
    assert normalizer.normalize_detection("Rutting") == "Deformation"
    assert normalizer.normalize_detection("Alligator Crack") == "Alligator Crack"


def test_rules_load_from_yaml(tmp_path: Path) -> None:
    rules_path = tmp_path / "rules.yaml"
    rules_path.write_text(
        "\n".join(
            [
                "detection_families:",
                "  - keyword: crack",
                "    family: Crack",
                "  - keyword: rough",
                "    family: Surface",
            ]
        ),
        encoding="utf-8",
    )

    normalizer = CategoryNormalizer.from_yaml(rules_path)

    assert normalizer.rules == (
        FamilyRule(keyword="crack", family="Crack"),
        FamilyRule(keyword="rough", family="Surface"),
    )
    assert normalizer.normalize_detection("Roughness") == "Surface"
    assert normalizer.normalize_detection("Pothole") == "Pothole"


def test_yaml_without_rules_uses_defaults(tmp_path: Path) -> None:
    rules_path = tmp_path / "empty.yaml"
    rules_path.write_text("", encoding="utf-8")
    assert CategoryNormalizer.from_yaml(rules_path).normalize_detection("Block Crack") == "Crack"


def test_yaml_rule_missing_family_is_rejected(tmp_path: Path) -> None:
    rules_path = tmp_path / "broken.yaml"
    rules_path.write_text("detection_families:\n  - keyword: crack\n", encoding="utf-8")
    with pytest.raises(ValueError):
        CategoryNormalizer.from_yaml(rules_path)
