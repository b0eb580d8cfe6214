"""Payment schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.shared.enums import AppointmentStatus, PaymentStatus


class AppointmentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    appointment_id: str = Field(serialization_alias="id")
    client_name: str
    start_time: datetime
    status: AppointmentStatus
    total_price_cents: int


class PaymentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: str = Field(serialization_alias="id")
    appointment_id: str
    amount_cents: int
    service_total_cents: int
    status: PaymentStatus
    pix_code: str | None = None
    expires_at: datetime
    paid_at: datetime | None = None
    confirmed_by: str | None = None
    cancelled_at: datetime | None = None
    notes: str | None = None
    created_at: datetime


class PendingPaymentPublic(PaymentPublic):
    appointment: AppointmentSummary


class PaymentConfirm(BaseModel):
    notes: str | None = Field(None, max_length=500)


class PaymentCancel(BaseModel):
    reason: str | None = Field(None, max_length=500)


class SweepResultPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    processed: int
    skipped: int
    failed: int
    payment_ids: list[str] = []
