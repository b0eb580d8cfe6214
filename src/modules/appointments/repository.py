"""Appointment persistence used by the payment core."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.appointments.models import Appointment
from src.shared.enums import AppointmentStatus


class AppointmentRepository:
    """Reads and status writes for appointments; never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(
        self,
        appointment_id: str,
        *,
        workspace_id: str | None = None,
        for_update: bool = False,
    ) -> Appointment | None:
        stmt = (
            select(Appointment)
            .where(Appointment.appointment_id == appointment_id)
            .execution_options(populate_existing=True)
        )
        if workspace_id:
            stmt = stmt.where(Appointment.workspace_id == workspace_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def set_status(self, appointment: Appointment, new_status: AppointmentStatus) -> None:
        appointment.status = new_status
        await self.db.flush()

    async def mark_cancelled(
        self,
        appointment: Appointment,
        *,
        cancelled_at: datetime,
        cancelled_by: str,
        reason: str,
    ) -> None:
        appointment.status = AppointmentStatus.CANCELLED
        appointment.cancelled_at = cancelled_at
        appointment.cancelled_by = cancelled_by
        appointment.cancel_reason = reason
        await self.db.flush()
