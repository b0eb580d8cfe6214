"""Payment persistence: lookups, inserts and the conditional status claim."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from src.modules.appointments.models import Appointment
from src.modules.payments.models import Payment
from src.shared.enums import PaymentStatus


class PaymentRepository:
    """Never commits; the caller owns the transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(
        self,
        payment_id: str,
        *,
        workspace_id: str | None = None,
        for_update: bool = False,
    ) -> Payment | None:
        stmt = (
            select(Payment)
            .join(Payment.appointment)
            .options(contains_eager(Payment.appointment))
            .where(Payment.payment_id == payment_id)
            .execution_options(populate_existing=True)
        )
        if workspace_id:
            stmt = stmt.where(Appointment.workspace_id == workspace_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_appointment(self, appointment_id: str, *, workspace_id: str | None = None) -> Payment | None:
        stmt = (
            select(Payment)
            .join(Payment.appointment)
            .options(contains_eager(Payment.appointment))
            .where(Payment.appointment_id == appointment_id)
            .execution_options(populate_existing=True)
        )
        if workspace_id:
            stmt = stmt.where(Appointment.workspace_id == workspace_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pending(self, workspace_id: str) -> list[Payment]:
        stmt = (
            select(Payment)
            .join(Payment.appointment)
            .options(contains_eager(Payment.appointment))
            .where(
                Payment.status == PaymentStatus.PENDING,
                Appointment.workspace_id == workspace_id,
            )
            .order_by(Payment.expires_at.asc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def select_expired(self, now: datetime, *, workspace_id: str | None = None) -> list[Payment]:
        """Pending payments past their deadline, locked and skipping rows held by other sweeps."""
        stmt = (
            select(Payment)
            .join(Payment.appointment)
            .options(contains_eager(Payment.appointment))
            .where(
                Payment.status == PaymentStatus.PENDING,
                Payment.expires_at < now,
            )
            .order_by(Payment.expires_at.asc())
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        if workspace_id:
            stmt = stmt.where(Appointment.workspace_id == workspace_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().unique().all())

    async def add(self, payment: Payment) -> Payment:
        self.db.add(payment)
        await self.db.flush()
        return payment

    async def claim(self, payment: Payment, new_status: PaymentStatus, **values: Any) -> bool:
        """Move ``payment`` out of ``pending`` if nobody else has touched it.

        The UPDATE only matches the row while it is still pending at the version
        this session read, so two racing writers cannot both succeed. The
        instance is refreshed either way so callers see the current row.
        """
        result = await self.db.execute(
            update(Payment)
            .where(
                Payment.payment_id == payment.payment_id,
                Payment.status == PaymentStatus.PENDING,
                Payment.version == payment.version,
            )
            .values(status=new_status, version=Payment.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        await self.db.refresh(payment)
        return result.rowcount == 1
