from datetime import date, timedelta
from decimal import Decimal

from clinic_api.models.payments import GiftCard, Membership, PosTransaction


def _issue_card(client, headers, amount="100.00", **extra):
    response = client.post("/api/gift-cards", json={"original_amount": amount, **extra}, headers=headers)
    assert response.status_code == 201
    return response.json()


def _enroll(client, headers, credits="40.00", patient_id="patient-1"):
    response = client.post(
        "/api/memberships",
        json={"patient_id": patient_id, "membership_name": "Glow Club", "membership_tier": "Gold", "credits_balance": credits},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def test_issue_and_check_gift_card(client, headers):
    card = _issue_card(client, headers, recipient_name="Ana")
    assert len(card["card_code"]) == 19
    assert card["is_active"] is True

    loose_code = card["card_code"].replace("-", "").lower()
    balance = client.get("/api/gift-cards/balance", params={"card_code": loose_code}, headers=headers).json()
    assert balance["valid"] is True
    assert balance["card_code"] == card["card_code"]
    assert Decimal(balance["current_balance"]) == Decimal("100")
    assert balance["recipient_name"] == "Ana"

    listed = client.get("/api/gift-cards", headers=headers).json()
    assert [c["card_code"] for c in listed] == [card["card_code"]]


def test_unknown_gift_card(client, headers):
    response = client.get("/api/gift-cards/balance", params={"card_code": "ZZZZ-ZZZZ-ZZZZ-ZZZZ"}, headers=headers)
    assert response.status_code == 404
    assert response.json() == {
        "statusCode": 404,
        "message": "Gift card not found",
        "error": "NotFound",
        "details": {"valid": False},
    }


def test_expired_gift_card_is_not_valid(client, db_session, headers):
    db_session.add(
        GiftCard(
            clinic_id="clinic-1",
            card_code="AAAA-BBBB-CCCC-DDDD",
            original_amount=Decimal("50"),
            current_balance=Decimal("50"),
            expiration_date=date.today() - timedelta(days=1),
        )
    )
    db_session.commit()

    balance = client.get("/api/gift-cards/balance", params={"card_code": "AAAA-BBBB-CCCC-DDDD"}, headers=headers).json()
    assert balance["valid"] is False
    assert balance["is_expired"] is True

    response = client.post(
        "/api/gift-cards/redeem",
        json={"card_code": "AAAA-BBBB-CCCC-DDDD", "redemption_amount": "10"},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Gift card has expired"


def test_redeem_gift_card(client, headers):
    card = _issue_card(client, headers, amount="30.00")
    code = card["card_code"]

    too_much = client.post("/api/gift-cards/redeem", json={"card_code": code, "redemption_amount": "40"}, headers=headers)
    assert too_much.status_code == 400
    assert too_much.json()["message"] == "Insufficient balance"
    assert Decimal(too_much.json()["details"]["current_balance"]) == Decimal("30")

    partial = client.post("/api/gift-cards/redeem", json={"card_code": code, "redemption_amount": "10"}, headers=headers).json()
    assert Decimal(partial["current_balance"]) == Decimal("20")
    assert partial["is_active"] is True

    drained = client.post("/api/gift-cards/redeem", json={"card_code": code, "redemption_amount": "20"}, headers=headers).json()
    assert Decimal(drained["current_balance"]) == Decimal("0")
    assert drained["is_active"] is False

    balance = client.get("/api/gift-cards/balance", params={"card_code": code}, headers=headers).json()
    assert balance["valid"] is False


def test_membership_balance_and_deduct(client, headers):
    empty = client.get("/api/memberships/balance", headers=headers).json()
    assert empty["has_active_membership"] is False
    assert Decimal(empty["credits_balance"]) == 0

    membership = _enroll(client, headers)
    duplicate = client.post(
        "/api/memberships",
        json={"patient_id": "patient-1", "membership_name": "Second"},
        headers=headers,
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Conflict"

    balance = client.get("/api/memberships/balance", params={"patient_id": "patient-1"}, headers=headers).json()
    assert balance["has_active_membership"] is True
    assert balance["membership_id"] == membership["id"]

    deducted = client.post(
        "/api/memberships/deduct",
        json={"membership_id": membership["id"], "amount": "15"},
        headers=headers,
    ).json()
    assert Decimal(deducted["credits_balance"]) == Decimal("25")

    short = client.post(
        "/api/memberships/deduct",
        json={"membership_id": membership["id"], "amount": "30"},
        headers=headers,
    )
    assert short.status_code == 400
    assert short.json()["message"] == "Insufficient credits"


def test_checkout_executes_every_allocation(client, db_session, headers):
    card = _issue_card(client, headers, amount="75.00")
    membership = _enroll(client, headers, credits="40.00")

    payload = {
        "total_amount": "120.00",
        "patient_id": "patient-1",
        "allocations": [
            {"method": "Cash", "amount": "20.00"},
            {"method": "Gift Card", "amount": "60.00", "details": {"card_code": card["card_code"]}},
            {"method": "Membership Credit", "amount": "40.00", "details": {"membership_id": membership["id"]}},
        ],
    }
    response = client.post("/api/pos/checkout", json=payload, headers=headers)
    assert response.status_code == 201
    receipt = response.json()
    assert receipt["receipt_number"].startswith("REC-")
    assert receipt["processed_by"] == "user-1"
    assert len(receipt["allocations"]) == 3

    db_session.expire_all()
    assert db_session.get(GiftCard, card["id"]).current_balance == Decimal("15")
    assert db_session.get(Membership, membership["id"]).credits_balance == Decimal("0")

    history = client.get("/api/pos/transactions", headers=headers).json()
    assert [t["receipt_number"] for t in history] == [receipt["receipt_number"]]


def test_checkout_rolls_back_when_any_allocation_fails(client, db_session, headers):
    card = _issue_card(client, headers, amount="75.00")
    membership = _enroll(client, headers, credits="10.00")

    payload = {
        "total_amount": "100.00",
        "allocations": [
            {"method": "Gift Card", "amount": "60.00", "details": {"card_code": card["card_code"]}},
            {"method": "Membership Credit", "amount": "40.00", "details": {"membership_id": membership["id"]}},
        ],
    }
    response = client.post("/api/pos/checkout", json=payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Insufficient credits"

    db_session.expire_all()
    assert db_session.get(GiftCard, card["id"]).current_balance == Decimal("75")
    assert db_session.query(PosTransaction).count() == 0


def test_checkout_requires_allocations_to_cover_total(client, headers):
    payload = {"total_amount": "100.00", "allocations": [{"method": "Cash", "amount": "90.00"}]}
    response = client.post("/api/pos/checkout", json=payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Allocations total $90.00 but $100.00 is due"


def test_checkout_gift_card_needs_code(client, headers):
    payload = {"total_amount": "10.00", "allocations": [{"method": "Gift Card", "amount": "10.00"}]}
    response = client.post("/api/pos/checkout", json=payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Gift card allocation is missing card_code"
