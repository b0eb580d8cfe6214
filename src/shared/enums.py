"""Shared enumerations used across modules."""

from __future__ import annotations

from enum import StrEnum
from typing import Iterable, TypeVar

EnumType = TypeVar("EnumType", bound=StrEnum)

# Marker stored in ``appointments.cancelled_by`` for expiry-driven cancellations.
SYSTEM_ACTOR = "SYSTEM"


def enum_values(enum_cls: Iterable[EnumType]) -> list[str]:
    """Return the .value for each enum member (used by SQLAlchemy)."""
    return [member.value for member in enum_cls]


class UserRole(StrEnum):
    OWNER = "owner"
    STAFF = "staff"


class AppointmentStatus(StrEnum):
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


class ChargeMode(StrEnum):
    NONE = "none"
    FULL = "full"
    PARTIAL_PERCENT = "partial_percent"
    PARTIAL_FIXED = "partial_fixed"


class PixKeyType(StrEnum):
    CPF = "cpf"
    CNPJ = "cnpj"
    EMAIL = "email"
    PHONE = "phone"
    RANDOM = "random"

    @classmethod
    def coerce(cls, value: str | PixKeyType | None) -> PixKeyType | None:
        """Map a raw key type (any case) onto a member, or ``None`` if unknown."""
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None
