from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic_api.services.card_codes import normalize_card_code
from clinic_api.services.payment_allocator import PaymentMethod


class GiftCardBalance(BaseModel):
    """Result of a gift-card balance check."""
    valid: bool
    card_code: str | None = None
    current_balance: Decimal = Decimal("0")
    original_amount: Decimal | None = None
    is_active: bool | None = None
    is_expired: bool = False
    expiration_date: date | None = None
    last_used_date: date | None = None
    recipient_name: str | None = None


class MembershipBalance(BaseModel):
    """Result of a membership credit check for one patient."""
    has_active_membership: bool
    membership_id: str | None = None
    membership_name: str | None = None
    membership_tier: str | None = None
    credits_balance: Decimal = Decimal("0")
    discount_percentage: Decimal = Decimal("0")
    start_date: date | None = None
    end_date: date | None = None
    auto_renew: bool | None = None


class GiftCardCreate(BaseModel):
    original_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    card_type: str = "digital"
    purchaser_name: str | None = None
    purchaser_email: str | None = None
    recipient_name: str | None = None
    recipient_email: str | None = None
    patient_id: str | None = None
    expiration_date: date | None = None
    message: str | None = None


class GiftCardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clinic_id: str
    card_code: str
    card_type: str
    original_amount: Decimal
    current_balance: Decimal
    recipient_name: str | None
    patient_id: str | None
    expiration_date: date | None
    is_active: bool
    activation_date: date | None
    last_used_date: date | None


class GiftCardRedeem(BaseModel):
    card_code: str
    redemption_amount: Decimal = Field(gt=0)
    transaction_id: str | None = None

    @field_validator("card_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return normalize_card_code(value)


class MembershipCreate(BaseModel):
    patient_id: str
    membership_name: str
    membership_tier: str | None = None
    credits_balance: Decimal = Field(default=Decimal("0"), ge=0)
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    start_date: date | None = None
    end_date: date | None = None
    auto_renew: bool = False


class MembershipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clinic_id: str
    patient_id: str
    membership_name: str
    membership_tier: str | None
    status: str
    credits_balance: Decimal
    discount_percentage: Decimal
    start_date: date | None
    end_date: date | None
    auto_renew: bool


class MembershipDeduct(BaseModel):
    membership_id: str
    amount: Decimal = Field(gt=0)
    transaction_id: str | None = None


class AllocationIn(BaseModel):
    method: PaymentMethod
    amount: Decimal = Field(gt=0)
    details: dict[str, str] | None = None


class CheckoutRequest(BaseModel):
    total_amount: Decimal = Field(gt=0)
    allocations: list[AllocationIn] = Field(min_length=1)
    patient_id: str | None = None
    notes: str | None = None


class PosTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    clinic_id: str
    patient_id: str | None
    receipt_number: str
    total_amount: Decimal
    allocations: list[dict]
    payment_status: str
    notes: str | None
    processed_by: str
    created_at: datetime
