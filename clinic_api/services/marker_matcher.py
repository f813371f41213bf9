import json
import re

from rapidfuzz import fuzz
from sqlalchemy.orm import Session

from clinic_api.config import settings
from clinic_api.models.lab_marker import LabMarker

RANGE_FIELDS = {
    "conventional_range_low": "conventional_low",
    "conventional_range_high": "conventional_high",
    "functional_range_low": "functional_low",
    "functional_range_high": "functional_high",
}


def _normalize(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def load_aliases(raw_aliases: str | None) -> list[str]:
    if not raw_aliases:
        return []
    try:
        parsed = json.loads(raw_aliases)
    except json.JSONDecodeError:
        return []
    if isinstance(parsed, list):
        return [str(item) for item in parsed]
    return []


def _fuzzy_match_marker(db: Session, name: str, threshold: int) -> tuple[LabMarker | None, int]:
    name_norm = _normalize(name)
    best_score = -1
    best = None

    for marker in db.query(LabMarker).all():
        candidates = [marker.marker_name, *load_aliases(marker.aliases)]
        for alias in candidates:
            score = fuzz.ratio(name_norm, _normalize(alias))
            if score > best_score:
                best_score = score
                best = marker

    if best_score >= threshold:
        return best, best_score
    return None, best_score


def match_marker(db: Session, name: str, threshold: int | None = None) -> LabMarker | None:
    if not name or not _normalize(name):
        return None
    score_threshold = threshold if threshold is not None else settings.marker_fuzzy_threshold
    marker, _ = _fuzzy_match_marker(db, name, score_threshold)
    return marker


def apply_catalog_ranges(db: Session, values: dict) -> dict:
    """Link a lab result to the catalog and fill in whatever it left blank.

    Ranges, unit and the canonical marker name come from the matched catalog
    entry; anything the caller supplied is kept.
    """
    marker = match_marker(db, values.get("lab_marker", ""))
    if marker is None:
        values["marker_id"] = None
        return values

    values["marker_id"] = marker.id
    values["lab_marker"] = marker.marker_name
    if not values.get("unit"):
        values["unit"] = marker.unit
    for result_field, marker_field in RANGE_FIELDS.items():
        if values.get(result_field) is None:
            values[result_field] = getattr(marker, marker_field)
    return values
