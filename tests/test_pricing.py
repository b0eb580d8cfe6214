from decimal import Decimal
from types import SimpleNamespace

import pytest

from src.modules.payments.pricing import (
    PricingPolicy,
    cents_to_decimal,
    clamp_expiry_minutes,
    clamp_percent,
    compute_amount,
    decimal_to_cents,
)
from src.shared.enums import ChargeMode, PixKeyType


def _workspace(**overrides):
    values = dict(
        require_payment=True,
        charge_mode=ChargeMode.PARTIAL_PERCENT,
        partial_percent=50,
        partial_fixed_amount=None,
        payment_expiry_minutes=30,
        pix_key_type=PixKeyType.CPF,
        pix_key="123.456.789-00",
        pix_holder_name="Ana Souza",
        pix_city=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.parametrize(
    ("total", "mode", "percent", "fixed", "expected"),
    [
        (10000, ChargeMode.FULL, None, None, 10000),
        (10000, ChargeMode.PARTIAL_PERCENT, 30, None, 3000),
        (5000, ChargeMode.PARTIAL_FIXED, None, 8000, 5000),
        (20000, ChargeMode.PARTIAL_FIXED, None, 5000, 5000),
        (1005, ChargeMode.PARTIAL_PERCENT, 50, None, 503),
        (1, ChargeMode.PARTIAL_PERCENT, 50, None, 1),
        (10000, ChargeMode.PARTIAL_PERCENT, None, None, 10000),
        (10000, ChargeMode.PARTIAL_FIXED, None, None, 10000),
        (10000, ChargeMode.PARTIAL_FIXED, None, 0, 10000),
        (10000, ChargeMode.NONE, 50, 100, 0),
        (10000, "bogus", 50, 100, 0),
        (0, ChargeMode.FULL, None, None, 0),
    ],
)
def test_compute_amount(total, mode, percent, fixed, expected):
    assert compute_amount(total, mode, percent, fixed) == expected


def test_compute_amount_never_exceeds_total():
    for total in (0, 1, 99, 1005, 20000):
        for percent in (10, 33, 50, 99, 100):
            amount = compute_amount(total, ChargeMode.PARTIAL_PERCENT, percent)
            assert 0 <= amount <= total


def test_currency_conversions_round_half_up():
    assert decimal_to_cents(Decimal("80.00")) == 8000
    assert decimal_to_cents(Decimal("0.005")) == 1
    assert decimal_to_cents("12.344") == 1234
    assert cents_to_decimal(1234) == Decimal("12.34")


def test_clamps():
    assert clamp_percent(None) is None
    assert clamp_percent(5) == 10
    assert clamp_percent(150) == 100
    assert clamp_expiry_minutes(None) == 30
    assert clamp_expiry_minutes(None, default=45) == 45
    assert clamp_expiry_minutes(1) == 10
    assert clamp_expiry_minutes(5000) == 1440


def test_policy_from_workspace_reads_stored_settings():
    policy = PricingPolicy.from_workspace(_workspace(partial_fixed_amount=Decimal("80.00")))

    assert policy.charges
    assert policy.charge_mode is ChargeMode.PARTIAL_PERCENT
    assert policy.partial_fixed_cents == 8000
    assert policy.amount_for(20000) == 10000
    assert policy.pix_identity.is_complete
    assert policy.pix_identity.key_type is PixKeyType.CPF


def test_policy_from_workspace_tolerates_bad_values():
    policy = PricingPolicy.from_workspace(
        _workspace(
            charge_mode="instalments",
            partial_percent=3,
            partial_fixed_amount=Decimal("-1"),
            payment_expiry_minutes=None,
            pix_key_type="IBAN",
        ),
        default_expiry_minutes=60,
    )

    assert policy.charge_mode is ChargeMode.NONE
    assert not policy.charges
    assert policy.partial_percent == 10
    assert policy.partial_fixed_cents is None
    assert policy.expiry_minutes == 60
    assert policy.pix_identity.key_type is None
    assert not policy.pix_identity.is_complete


def test_policy_not_charging_when_payment_not_required():
    policy = PricingPolicy.from_workspace(_workspace(require_payment=False, charge_mode=ChargeMode.FULL))
    assert not policy.charges
