"""Workspace payment settings: admin reads/updates and the public PIX view."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import InvalidChargeConfiguration, MissingPixIdentity
from src.modules.payments.masking import mask_pix_key
from src.modules.workspaces.models import Workspace
from src.modules.workspaces.schemas import PaymentSettingsUpdate, PublicPixInfo
from src.shared.enums import ChargeMode

logger = logging.getLogger(__name__)


class WorkspacePaymentSettingsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_payment_settings(self, workspace_id: str) -> Workspace:
        workspace = await self.db.get(Workspace, workspace_id)
        if workspace is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
        return workspace

    async def update_payment_settings(self, workspace_id: str, payload: PaymentSettingsUpdate) -> Workspace:
        workspace = await self.get_payment_settings(workspace_id)
        validate_payment_settings(payload)

        workspace.require_payment = payload.require_payment
        workspace.charge_mode = payload.charge_mode
        workspace.partial_percent = (
            payload.partial_percent if payload.charge_mode == ChargeMode.PARTIAL_PERCENT else None
        )
        workspace.partial_fixed_amount = (
            payload.partial_fixed_amount
            if payload.charge_mode == ChargeMode.PARTIAL_FIXED and payload.partial_fixed_amount
            else None
        )
        workspace.payment_expiry_minutes = payload.payment_expiry_minutes
        workspace.pix_key_type = payload.pix_key_type
        workspace.pix_key = _clean(payload.pix_key)
        workspace.pix_holder_name = _clean(payload.pix_holder_name)
        workspace.pix_city = _clean(payload.pix_city)
        await self.db.commit()
        await self.db.refresh(workspace)
        logger.info(
            "Payment settings updated for workspace %s: mode=%s require=%s key=%s",
            workspace_id,
            workspace.charge_mode,
            workspace.require_payment,
            mask_pix_key(workspace.pix_key, workspace.pix_key_type),
        )
        return workspace

    async def get_public_pix_info(self, slug: str) -> PublicPixInfo | None:
        result = await self.db.execute(select(Workspace).where(Workspace.slug == slug))
        workspace = result.scalar_one_or_none()
        if workspace is None or not workspace.require_payment:
            return None
        return PublicPixInfo(
            require_payment=workspace.require_payment,
            charge_mode=workspace.charge_mode,
            partial_percent=workspace.partial_percent,
            partial_fixed_amount=workspace.partial_fixed_amount,
            payment_expiry_minutes=workspace.payment_expiry_minutes,
            pix_key_type=workspace.pix_key_type,
            pix_holder_name=workspace.pix_holder_name,
            pix_city=workspace.pix_city,
            pix_key_masked=mask_pix_key(workspace.pix_key, workspace.pix_key_type) if workspace.pix_key else None,
        )


def validate_payment_settings(payload: PaymentSettingsUpdate) -> None:
    """Cross-field rules that only matter once payment is required."""
    if not payload.require_payment:
        return
    if not (_clean(payload.pix_key) and payload.pix_key_type and _clean(payload.pix_holder_name)):
        raise MissingPixIdentity("To require payment, configure the PIX key, key type and holder name")
    if payload.charge_mode == ChargeMode.PARTIAL_PERCENT and not payload.partial_percent:
        raise InvalidChargeConfiguration("Percentage must be between 10% and 100%")
    if payload.charge_mode == ChargeMode.PARTIAL_FIXED and not (
        payload.partial_fixed_amount and payload.partial_fixed_amount > 0
    ):
        raise InvalidChargeConfiguration("Fixed amount must be greater than zero")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
