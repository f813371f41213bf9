"""Explicit caller context threaded through API calls and checkout sessions.

The clinic front-end used to read the current user, clinic and selected
patient from ambient globals. Here the same identifiers travel as a value:
the API builds one per request from headers, and the Streamlit client keeps
one in session state and sends it back as headers.
"""

from dataclasses import dataclass, replace

USER_HEADER = "X-User-Id"
CLINIC_HEADER = "X-Clinic-Id"
PATIENT_HEADER = "X-Patient-Id"


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    clinic_id: str
    patient_id: str | None = None

    def headers(self) -> dict[str, str]:
        h = {USER_HEADER: self.user_id, CLINIC_HEADER: self.clinic_id}
        if self.patient_id:
            h[PATIENT_HEADER] = self.patient_id
        return h

    def for_patient(self, patient_id: str | None) -> "SessionContext":
        return replace(self, patient_id=patient_id)
