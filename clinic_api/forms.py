"""Declarative entry forms.

Each form is a ``FormSchema`` listing its fields; the Streamlit pages render
every form with one generic renderer and run ``validate_form`` before
posting the cleaned values to the API.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

FieldType = Literal["text", "number", "date", "select", "textarea"]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    type: FieldType = "text"
    required: bool = False
    min_value: float | None = None
    max_value: float | None = None
    choices: tuple[str, ...] = ()
    help: str | None = None


@dataclass(frozen=True)
class FormSchema:
    name: str
    fields: tuple[FieldSpec, ...] = ()

    def get(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce(spec: FieldSpec, value: Any) -> Any:
    if spec.type == "number":
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(value)
        if spec.min_value is not None and number < spec.min_value:
            raise ValueError(f"{spec.label} must be at least {spec.min_value:g}")
        if spec.max_value is not None and number > spec.max_value:
            raise ValueError(f"{spec.label} must be at most {spec.max_value:g}")
        return number
    if spec.type == "date":
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value).strip())
    if spec.type == "select":
        if value not in spec.choices:
            raise ValueError(f"{spec.label} must be one of: {', '.join(spec.choices)}")
        return value
    return str(value).strip()


def validate_form(schema: FormSchema, data: dict[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
    """Coerce raw widget values; returns ``(cleaned, errors)`` keyed by field name.

    Blank optional fields are left out of ``cleaned``.
    """
    cleaned: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for spec in schema.fields:
        raw = data.get(spec.name)
        if _is_blank(raw):
            if spec.required:
                errors[spec.name] = f"{spec.label} is required"
            continue
        try:
            cleaned[spec.name] = _coerce(spec, raw)
        except ValueError as exc:
            message = str(exc)
            if spec.type == "number" and not message.startswith(spec.label):
                message = f"{spec.label} must be a number"
            elif spec.type == "date" and not message.startswith(spec.label):
                message = f"{spec.label} must be a date (YYYY-MM-DD)"
            errors[spec.name] = message
    return cleaned, errors


LAB_RESULT_FORM = FormSchema(
    name="lab_result",
    fields=(
        FieldSpec("lab_marker", "Lab Marker", required=True, help="Matched against the marker catalog"),
        FieldSpec("result_value", "Result Value", "number", required=True),
        FieldSpec("unit", "Unit"),
        FieldSpec("result_date", "Result Date", "date", required=True),
        FieldSpec("source", "Source", help="e.g. Quest, LabCorp"),
        FieldSpec("conventional_range_low", "Conventional Low", "number"),
        FieldSpec("conventional_range_high", "Conventional High", "number"),
        FieldSpec("functional_range_low", "Functional Low", "number"),
        FieldSpec("functional_range_high", "Functional High", "number"),
        FieldSpec("note", "Clinician Note", "textarea"),
    ),
)

GIFT_CARD_FORM = FormSchema(
    name="gift_card",
    fields=(
        FieldSpec("original_amount", "Amount", "number", required=True, min_value=0.01),
        FieldSpec("card_type", "Card Type", "select", required=True, choices=("digital", "physical")),
        FieldSpec("purchaser_name", "Purchaser Name"),
        FieldSpec("purchaser_email", "Purchaser Email"),
        FieldSpec("recipient_name", "Recipient Name"),
        FieldSpec("recipient_email", "Recipient Email"),
        FieldSpec("expiration_date", "Expiration Date", "date"),
        FieldSpec("message", "Message", "textarea"),
    ),
)

MEMBERSHIP_FORM = FormSchema(
    name="membership",
    fields=(
        FieldSpec("membership_name", "Membership Name", required=True),
        FieldSpec("membership_tier", "Tier", "select", choices=("Silver", "Gold", "Platinum")),
        FieldSpec("credits_balance", "Starting Credits", "number", min_value=0),
        FieldSpec("discount_percentage", "Discount %", "number", min_value=0, max_value=100),
        FieldSpec("start_date", "Start Date", "date"),
        FieldSpec("end_date", "End Date", "date"),
    ),
)
