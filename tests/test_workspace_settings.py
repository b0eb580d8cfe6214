from decimal import Decimal

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from factories import seed_workspace
from src.core.exceptions import InvalidChargeConfiguration, MissingPixIdentity
from src.modules.workspaces.schemas import PaymentSettingsUpdate
from src.modules.workspaces.service import WorkspacePaymentSettingsService, validate_payment_settings
from src.shared.enums import ChargeMode, PixKeyType


def _update(**overrides):
    values = dict(
        require_payment=True,
        charge_mode=ChargeMode.PARTIAL_PERCENT,
        partial_percent=40,
        payment_expiry_minutes=60,
        pix_key_type=PixKeyType.CPF,
        pix_key="123.456.789-00",
        pix_holder_name="Ana Souza",
        pix_city="Recife",
    )
    values.update(overrides)
    return PaymentSettingsUpdate(**values)


def test_payment_settings_validation():
    validate_payment_settings(_update())
    validate_payment_settings(_update(require_payment=False, pix_key=None))

    with pytest.raises(MissingPixIdentity) as excinfo:
        validate_payment_settings(_update(pix_key="  "))
    assert excinfo.value.status_code == 422
    assert excinfo.value.code == "missing_pix_identity"
    with pytest.raises(MissingPixIdentity):
        validate_payment_settings(_update(pix_holder_name=None))
    with pytest.raises(InvalidChargeConfiguration) as excinfo:
        validate_payment_settings(_update(partial_percent=None))
    assert excinfo.value.status_code == 422
    with pytest.raises(InvalidChargeConfiguration):
        validate_payment_settings(_update(charge_mode=ChargeMode.PARTIAL_FIXED, partial_fixed_amount=Decimal("0")))


def test_schema_bounds():
    with pytest.raises(ValidationError):
        _update(partial_percent=5)
    with pytest.raises(ValidationError):
        _update(payment_expiry_minutes=5)
    with pytest.raises(ValidationError):
        _update(pix_key="a" * 78)


@pytest.mark.asyncio
async def test_update_clears_fields_of_other_modes(db_session):
    workspace = await seed_workspace(db_session, require_payment=False)
    service = WorkspacePaymentSettingsService(db_session)

    updated = await service.update_payment_settings(
        workspace.workspace_id,
        _update(partial_fixed_amount=Decimal("50.00"), pix_city="  "),
    )

    assert updated.charge_mode == ChargeMode.PARTIAL_PERCENT
    assert updated.partial_percent == 40
    assert updated.partial_fixed_amount is None
    assert updated.payment_expiry_minutes == 60
    assert updated.pix_city is None

    updated = await service.update_payment_settings(
        workspace.workspace_id,
        _update(charge_mode=ChargeMode.PARTIAL_FIXED, partial_fixed_amount=Decimal("50.00")),
    )
    assert updated.partial_percent is None
    assert updated.partial_fixed_amount == Decimal("50.00")


@pytest.mark.asyncio
async def test_unknown_workspace(db_session):
    with pytest.raises(HTTPException) as excinfo:
        await WorkspacePaymentSettingsService(db_session).get_payment_settings("01UNKNOWNWORKSPACE00000000")
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_public_info_masks_key(db_session):
    workspace = await seed_workspace(db_session, pix_key_type=PixKeyType.CPF, pix_key="123.456.789-00")
    disabled = await seed_workspace(db_session, require_payment=False)
    service = WorkspacePaymentSettingsService(db_session)

    info = await service.get_public_pix_info(workspace.slug)

    assert info.pix_key_masked == "123.***.***-00"
    assert "123.456.789-00" not in info.model_dump_json()
    assert info.partial_percent == 50
    assert await service.get_public_pix_info(disabled.slug) is None
    assert await service.get_public_pix_info("no-such-salon") is None
