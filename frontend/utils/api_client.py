import os
from urllib.parse import quote

import requests
import streamlit as st

from clinic_api.context import SessionContext

BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
TIMEOUT = 30


class ApiError(Exception):
    """A failed API call; ``str(exc)`` is the server's message."""

    def __init__(self, status_code: int, message: str, details: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details or {}


def _raise_for_error(res: requests.Response):
    if res.ok:
        return res.json() if res.content else None
    try:
        body = res.json()
        message = body.get("message") or res.text
        details = body.get("details")
    except ValueError:
        message, details = res.text or res.reason, None
    raise ApiError(res.status_code, message, details)


class ApiClient:
    def __init__(self, context: SessionContext):
        self.context = context

    @property
    def headers(self):
        return self.context.headers()

    def _get(self, path: str, params: dict | None = None):
        try:
            res = requests.get(f"{BASE_URL}{path}", params=params, headers=self.headers, timeout=TIMEOUT)
        except requests.RequestException as exc:
            raise ApiError(0, f"API unreachable: {exc}") from exc
        return _raise_for_error(res)

    def _send(self, method: str, path: str, payload: dict | None = None):
        try:
            res = requests.request(method, f"{BASE_URL}{path}", json=payload, headers=self.headers, timeout=TIMEOUT)
        except requests.RequestException as exc:
            raise ApiError(0, f"API unreachable: {exc}") from exc
        return _raise_for_error(res)

    # labs
    def lab_results(self, **filters):
        params = {k: v for k, v in filters.items() if v not in (None, "")}
        params.setdefault("patient_id", self.context.patient_id)
        return self._get("/api/labs", params)

    def create_lab_result(self, payload: dict):
        return self._send("POST", "/api/labs", {"patient_id": self.context.patient_id, **payload})

    def update_lab_result(self, result_id: str, payload: dict):
        return self._send("PUT", f"/api/labs/{result_id}", payload)

    def delete_lab_result(self, result_id: str):
        return self._send("DELETE", f"/api/labs/{result_id}")

    # trends
    def trends_overview(self):
        return self._get("/api/trends/overview", {"patient_id": self.context.patient_id})

    def marker_chart(self, lab_marker: str, window: str = "all", width: int = 800, height: int = 300):
        params = {"patient_id": self.context.patient_id, "window": window, "width": width, "height": height}
        return self._get(f"/api/trends/{quote(lab_marker, safe='')}", params)

    # gift cards
    def gift_cards(self, active_only: bool = False):
        return self._get("/api/gift-cards", {"active_only": active_only})

    def create_gift_card(self, payload: dict):
        return self._send("POST", "/api/gift-cards", payload)

    def gift_card_balance(self, card_code: str):
        return self._get("/api/gift-cards/balance", {"card_code": card_code})

    # memberships
    def create_membership(self, payload: dict):
        return self._send("POST", "/api/memberships", {"patient_id": self.context.patient_id, **payload})

    def membership_balance(self, patient_id: str | None = None):
        return self._get("/api/memberships/balance", {"patient_id": patient_id or self.context.patient_id})

    # checkout
    def checkout(self, payload: dict):
        return self._send("POST", "/api/pos/checkout", payload)

    def transactions(self, limit: int = 50):
        return self._get("/api/pos/transactions", {"limit": limit})


# ---------------------------------------------------------------------------
# Cached catalog fetchers. The marker catalog only changes on deploy, so it is
# cached longer than per-patient data, which is always fetched fresh.
# ---------------------------------------------------------------------------

@st.cache_data(ttl=300, show_spinner=False)
def cached_markers() -> tuple[bool, list]:
    res = requests.get(f"{BASE_URL}/api/markers", timeout=TIMEOUT)
    return res.ok, res.json() if res.ok else []


@st.cache_data(ttl=300, show_spinner=False)
def cached_marker_categories() -> tuple[bool, list]:
    res = requests.get(f"{BASE_URL}/api/markers/categories", timeout=TIMEOUT)
    return res.ok, res.json() if res.ok else []
