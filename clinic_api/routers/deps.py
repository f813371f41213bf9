from fastapi import Header, HTTPException

from clinic_api.context import SessionContext
from clinic_api.services.errors import ServiceError


def get_request_context(
    x_user_id: str | None = Header(default=None),
    x_clinic_id: str | None = Header(default=None),
    x_patient_id: str | None = Header(default=None),
) -> SessionContext:
    if not x_user_id or not x_clinic_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id or X-Clinic-Id header")
    return SessionContext(user_id=x_user_id, clinic_id=x_clinic_id, patient_id=x_patient_id or None)


def to_http_error(exc: ServiceError) -> HTTPException:
    if exc.extra:
        return HTTPException(status_code=exc.status_code, detail={"message": exc.message, **exc.extra})
    return HTTPException(status_code=exc.status_code, detail=exc.message)
