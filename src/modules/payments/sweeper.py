"""Expiry of stale pending payments, on demand or on a timer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config import settings
from src.modules.appointments.repository import AppointmentRepository
from src.modules.payments.repository import PaymentRepository
from src.modules.payments.service import (
    EXPIRED_APPOINTMENT_REASON,
    EXPIRED_PAYMENT_NOTE,
    cascade_target,
    utcnow,
)
from src.shared.enums import SYSTEM_ACTOR, PaymentStatus

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "expire-pending-payments"


@dataclass
class SweepResult:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    payment_ids: list[str] = field(default_factory=list)


class ExpirySweeper:
    """Cancel every pending payment whose deadline has passed.

    A run is one transaction. Each row is checked before anything is written
    for it, so a row that cannot cascade is left exactly as it was and counted
    as ``failed``; rows already taken by a concurrent writer are ``skipped``.
    A database error aborts the whole run.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock

    async def run_once(self, workspace_id: str | None = None) -> SweepResult:
        now = self.clock()
        result = SweepResult()
        async with self.session_factory() as db:
            payments = PaymentRepository(db)
            appointments = AppointmentRepository(db)
            try:
                for payment in await payments.select_expired(now, workspace_id=workspace_id):
                    appointment = payment.appointment
                    cascade = cascade_target(appointment)
                    if cascade is None:
                        result.failed += 1
                        logger.warning(
                            "Cannot expire payment %s: appointment %s is %s",
                            payment.payment_id,
                            appointment.appointment_id,
                            appointment.status,
                        )
                        continue

                    claimed = await payments.claim(
                        payment,
                        PaymentStatus.CANCELLED,
                        cancelled_at=now,
                        notes=EXPIRED_PAYMENT_NOTE,
                    )
                    if not claimed:
                        result.skipped += 1
                        continue
                    if cascade:
                        await appointments.mark_cancelled(
                            appointment,
                            cancelled_at=now,
                            cancelled_by=SYSTEM_ACTOR,
                            reason=EXPIRED_APPOINTMENT_REASON,
                        )
                    result.processed += 1
                    result.payment_ids.append(payment.payment_id)
                await db.commit()
            except Exception:
                await db.rollback()
                logger.exception("Expiry sweep aborted; no payment was changed")
                raise

        logger.info(
            "Expiry sweep finished: processed=%s skipped=%s failed=%s",
            result.processed,
            result.skipped,
            result.failed,
        )
        return result


def start_expiry_scheduler(
    session_factory: async_sessionmaker[AsyncSession],
    interval_minutes: int | None = None,
) -> AsyncIOScheduler:
    """Run the sweeper periodically on the running event loop."""
    sweeper = ExpirySweeper(session_factory)
    scheduler = AsyncIOScheduler(timezone=settings.default_timezone)
    scheduler.add_job(
        sweeper.run_once,
        "interval",
        minutes=interval_minutes or settings.expiry_sweep_interval_minutes,
        id=SWEEP_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Expiry scheduler started (every %s min)", interval_minutes or settings.expiry_sweep_interval_minutes)
    return scheduler
