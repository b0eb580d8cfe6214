"""Workspace payment settings schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.shared.enums import ChargeMode, PixKeyType


class PaymentSettingsPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    require_payment: bool
    charge_mode: ChargeMode
    partial_percent: int | None = None
    partial_fixed_amount: Decimal | None = None
    payment_expiry_minutes: int
    pix_key_type: PixKeyType | None = None
    pix_key: str | None = None
    pix_holder_name: str | None = None
    pix_city: str | None = None


class PaymentSettingsUpdate(BaseModel):
    require_payment: bool
    charge_mode: ChargeMode = ChargeMode.NONE
    partial_percent: int | None = Field(None, ge=10, le=100)
    partial_fixed_amount: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    payment_expiry_minutes: int = Field(30, ge=10, le=1440)
    pix_key_type: PixKeyType | None = None
    pix_key: str | None = Field(None, max_length=77)
    pix_holder_name: str | None = Field(None, max_length=100)
    pix_city: str | None = Field(None, max_length=50)


class PublicPixInfo(BaseModel):
    """What an unauthenticated booking page may see; never the raw key."""

    require_payment: bool
    charge_mode: ChargeMode
    partial_percent: int | None = None
    partial_fixed_amount: Decimal | None = None
    payment_expiry_minutes: int
    pix_key_type: PixKeyType | None = None
    pix_holder_name: str | None = None
    pix_city: str | None = None
    pix_key_masked: str | None = None
