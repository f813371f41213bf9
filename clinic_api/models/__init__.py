from clinic_api.models.lab_marker import LabMarker
from clinic_api.models.lab_result import LabResultRecord
from clinic_api.models.payments import GiftCard, Membership, PosTransaction

__all__ = [
    "LabMarker",
    "LabResultRecord",
    "GiftCard",
    "Membership",
    "PosTransaction",
]
