from datetime import date

from clinic_api.forms import GIFT_CARD_FORM, LAB_RESULT_FORM, MEMBERSHIP_FORM, validate_form


def test_lab_result_form_coerces_values():
    cleaned, errors = validate_form(
        LAB_RESULT_FORM,
        {
            "lab_marker": " Glucose ",
            "result_value": "92.5",
            "result_date": "2024-05-01",
            "functional_range_low": "",
            "note": None,
        },
    )
    assert errors == {}
    assert cleaned == {"lab_marker": "Glucose", "result_value": 92.5, "result_date": date(2024, 5, 1)}


def test_required_and_type_errors_are_reported_per_field():
    _, errors = validate_form(LAB_RESULT_FORM, {"result_value": "high", "result_date": "05/01/2024"})
    assert errors == {
        "lab_marker": "Lab Marker is required",
        "result_value": "Result Value must be a number",
        "result_date": "Result Date must be a date (YYYY-MM-DD)",
    }


def test_bounds_and_choices():
    _, errors = validate_form(GIFT_CARD_FORM, {"original_amount": "0", "card_type": "plastic"})
    assert errors["original_amount"] == "Amount must be at least 0.01"
    assert errors["card_type"].startswith("Card Type must be one of")

    _, errors = validate_form(MEMBERSHIP_FORM, {"membership_name": "Glow", "discount_percentage": "150"})
    assert errors == {"discount_percentage": "Discount % must be at most 100"}


def test_date_widgets_pass_through():
    cleaned, errors = validate_form(MEMBERSHIP_FORM, {"membership_name": "Glow", "start_date": date(2024, 1, 1)})
    assert errors == {}
    assert cleaned["start_date"] == date(2024, 1, 1)


def test_non_finite_numbers_are_rejected():
    _, errors = validate_form(
        LAB_RESULT_FORM,
        {"lab_marker": "Glucose", "result_value": "nan", "result_date": "2024-05-01", "functional_range_high": "inf"},
    )
    assert errors == {
        "result_value": "Result Value must be a number",
        "functional_range_high": "Functional High must be a number",
    }
