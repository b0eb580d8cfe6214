"""Charge amount rules for workspace pricing policies.

Everything here works on integer minor units (centavos). The policy object is
built once at the boundary from the stored workspace row so the calculator
never has to parse or validate raw configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from src.shared.enums import ChargeMode, PixKeyType

if TYPE_CHECKING:  # pragma: no cover
    from src.modules.workspaces.models import Workspace

MIN_PARTIAL_PERCENT = 10
MAX_PARTIAL_PERCENT = 100
MIN_EXPIRY_MINUTES = 10
MAX_EXPIRY_MINUTES = 24 * 60
DEFAULT_EXPIRY_MINUTES = 30


@dataclass(frozen=True)
class PixIdentity:
    key_type: PixKeyType | None
    key: str | None
    holder_name: str | None
    city: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.key and self.key_type and self.holder_name)


@dataclass(frozen=True)
class PricingPolicy:
    require_payment: bool
    charge_mode: ChargeMode
    partial_percent: int | None
    partial_fixed_cents: int | None
    expiry_minutes: int
    pix_identity: PixIdentity

    @property
    def charges(self) -> bool:
        return self.require_payment and self.charge_mode is not ChargeMode.NONE

    def amount_for(self, service_total: int) -> int:
        return compute_amount(service_total, self.charge_mode, self.partial_percent, self.partial_fixed_cents)

    @classmethod
    def from_workspace(
        cls,
        workspace: Workspace,
        default_expiry_minutes: int = DEFAULT_EXPIRY_MINUTES,
    ) -> PricingPolicy:
        """Build a policy from stored settings, clamping out-of-range numbers."""
        try:
            mode = ChargeMode(workspace.charge_mode)
        except ValueError:
            mode = ChargeMode.NONE

        fixed_cents = None
        if workspace.partial_fixed_amount is not None:
            fixed_cents = decimal_to_cents(workspace.partial_fixed_amount)
            if fixed_cents < 0:
                fixed_cents = None

        return cls(
            require_payment=bool(workspace.require_payment),
            charge_mode=mode,
            partial_percent=clamp_percent(workspace.partial_percent),
            partial_fixed_cents=fixed_cents,
            expiry_minutes=clamp_expiry_minutes(workspace.payment_expiry_minutes, default_expiry_minutes),
            pix_identity=PixIdentity(
                key_type=PixKeyType.coerce(workspace.pix_key_type),
                key=workspace.pix_key,
                holder_name=workspace.pix_holder_name,
                city=workspace.pix_city,
            ),
        )


def compute_amount(
    service_total: int,
    mode: ChargeMode | str | None,
    percent: int | None = None,
    fixed_amount: int | None = None,
) -> int:
    """Return the amount to charge, in minor units.

    Precondition: ``service_total >= 0``. Percentages round half up. A missing
    percent or a missing/non-positive fixed amount falls back to the full
    total; ``NONE`` and unknown modes charge nothing.
    """
    if mode == ChargeMode.FULL:
        return service_total
    if mode == ChargeMode.PARTIAL_PERCENT:
        if not percent:
            return service_total
        return (service_total * percent + 50) // 100
    if mode == ChargeMode.PARTIAL_FIXED:
        if not fixed_amount or fixed_amount <= 0:
            return service_total
        return min(fixed_amount, service_total)
    return 0


def decimal_to_cents(value: Decimal | float | int | str) -> int:
    """Convert a currency decimal to integer centavos, rounding half up."""
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def clamp_percent(percent: int | None) -> int | None:
    if percent is None:
        return None
    return max(MIN_PARTIAL_PERCENT, min(MAX_PARTIAL_PERCENT, int(percent)))


def clamp_expiry_minutes(minutes: int | None, default: int = DEFAULT_EXPIRY_MINUTES) -> int:
    if minutes is None:
        minutes = default
    return max(MIN_EXPIRY_MINUTES, min(MAX_EXPIRY_MINUTES, int(minutes)))
