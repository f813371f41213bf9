import json
import logging

from sqlalchemy.orm import Session

from clinic_api.database import session_scope
from clinic_api.models.lab_marker import LabMarker

logger = logging.getLogger(__name__)

# (conventional_low, conventional_high, functional_low, functional_high)
MARKERS = [
    {"name": "Glucose", "category": "Metabolic Panel", "unit": "mg/dL", "ranges": (65, 99, 75, 86), "aliases": ["FASTING GLUCOSE", "GLU"]},
    {"name": "Hemoglobin A1c", "category": "Metabolic Panel", "unit": "%", "ranges": (4.0, 5.6, 4.6, 5.3), "aliases": ["HBA1C", "A1C"]},
    {"name": "Insulin", "category": "Metabolic Panel", "unit": "uIU/mL", "ranges": (2.6, 24.9, 2.0, 5.0), "aliases": ["FASTING INSULIN"]},
    {"name": "BUN", "category": "Metabolic Panel", "unit": "mg/dL", "ranges": (6, 24, 13, 18), "aliases": ["BLOOD UREA NITROGEN", "UREA NITROGEN"]},
    {"name": "Creatinine", "category": "Metabolic Panel", "unit": "mg/dL", "ranges": (0.57, 1.0, 0.8, 1.1), "aliases": ["CREAT"]},
    {"name": "Sodium", "category": "Electrolytes", "unit": "mmol/L", "ranges": (134, 144, 135, 142), "aliases": ["NA"]},
    {"name": "Potassium", "category": "Electrolytes", "unit": "mmol/L", "ranges": (3.5, 5.2, 4.0, 4.5), "aliases": ["K"]},
    {"name": "Magnesium", "category": "Electrolytes", "unit": "mg/dL", "ranges": (1.6, 2.3, 2.0, 2.3), "aliases": ["MG"]},
    {"name": "TSH", "category": "Thyroid", "unit": "uIU/mL", "ranges": (0.45, 4.5, 1.0, 2.0), "aliases": ["THYROID STIMULATING HORMONE"]},
    {"name": "Free T4", "category": "Thyroid", "unit": "ng/dL", "ranges": (0.82, 1.77, 1.0, 1.5), "aliases": ["FT4"]},
    {"name": "Free T3", "category": "Thyroid", "unit": "pg/mL", "ranges": (2.0, 4.4, 3.0, 4.0), "aliases": ["FT3"]},
    {"name": "Total Cholesterol", "category": "Lipid Panel", "unit": "mg/dL", "ranges": (100, 199, 160, 199), "aliases": ["CHOLESTEROL"]},
    {"name": "HDL Cholesterol", "category": "Lipid Panel", "unit": "mg/dL", "ranges": (39, 100, 55, 100), "aliases": ["HDL"]},
    {"name": "LDL Cholesterol", "category": "Lipid Panel", "unit": "mg/dL", "ranges": (0, 99, 0, 99), "aliases": ["LDL"]},
    {"name": "Triglycerides", "category": "Lipid Panel", "unit": "mg/dL", "ranges": (0, 149, 50, 100), "aliases": ["TG"]},
    {"name": "Ferritin", "category": "Iron Studies", "unit": "ng/mL", "ranges": (15, 150, 50, 122), "aliases": ["SERUM FERRITIN"]},
    {"name": "Iron", "category": "Iron Studies", "unit": "ug/dL", "ranges": (27, 159, 85, 130), "aliases": ["SERUM IRON"]},
    {"name": "Vitamin D", "category": "Vitamins", "unit": "ng/mL", "ranges": (30, 100, 50, 80), "aliases": ["25-OH VITAMIN D", "VIT D"]},
    {"name": "Vitamin B12", "category": "Vitamins", "unit": "pg/mL", "ranges": (232, 1245, 600, 2000), "aliases": ["B12", "COBALAMIN"]},
    {"name": "Homocysteine", "category": "Inflammation", "unit": "umol/L", "ranges": (0, 14.5, 5, 7.2), "aliases": ["HCY"]},
    {"name": "hs-CRP", "category": "Inflammation", "unit": "mg/L", "ranges": (0, 3.0, 0, 0.55), "aliases": ["HIGH SENSITIVITY CRP", "C-REACTIVE PROTEIN"]},
    {"name": "ALT", "category": "Liver Function", "unit": "IU/L", "ranges": (0, 32, 10, 26), "aliases": ["SGPT"]},
    {"name": "AST", "category": "Liver Function", "unit": "IU/L", "ranges": (0, 40, 10, 26), "aliases": ["SGOT"]},
    {"name": "GGT", "category": "Liver Function", "unit": "IU/L", "ranges": (0, 60, 10, 17), "aliases": ["GAMMA GLUTAMYL TRANSFERASE"]},
    {"name": "Hemoglobin", "category": "Complete Blood Count", "unit": "g/dL", "ranges": (11.1, 15.9, 13.5, 14.5), "aliases": ["HGB"]},
    {"name": "White Blood Cells", "category": "Complete Blood Count", "unit": "x10E3/uL", "ranges": (3.4, 10.8, 5.0, 8.0), "aliases": ["WBC"]},
]


def _apply(db: Session) -> int:
    existing = {row.marker_name: row for row in db.query(LabMarker).all()}
    created = 0
    for item in MARKERS:
        conv_low, conv_high, func_low, func_high = item["ranges"]
        marker = existing.get(item["name"])
        if marker is None:
            marker = LabMarker(marker_name=item["name"])
            created += 1
        marker.category = item["category"]
        marker.unit = item["unit"]
        marker.aliases = json.dumps(item["aliases"])
        marker.conventional_low, marker.conventional_high = conv_low, conv_high
        marker.functional_low, marker.functional_high = func_low, func_high
        db.add(marker)
    return created


def seed_markers(db: Session | None = None) -> int:
    """Insert or refresh the built-in marker catalog; returns how many were new."""
    if db is not None:
        created = _apply(db)
        db.commit()
    else:
        with session_scope() as session:
            created = _apply(session)
    logger.info("Marker catalog seeded (%d new, %d total)", created, len(MARKERS))
    return created
