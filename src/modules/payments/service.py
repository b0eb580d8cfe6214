"""Payment lifecycle: create, confirm and cancel, kept in step with the appointment.

Every public operation is one unit of work on the session it was given: the
payment write and the appointment write are flushed together and committed
once, or rolled back together.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.exceptions import (
    ConcurrentModification,
    InvalidStateTransition,
    MissingPixIdentity,
    PaymentNotFound,
)
from src.modules.appointments.models import Appointment
from src.modules.appointments.repository import AppointmentRepository
from src.modules.payments.brcode import encode_payload
from src.modules.payments.masking import mask_pix_key
from src.modules.payments.models import Payment
from src.modules.payments.pricing import PricingPolicy
from src.modules.payments.repository import PaymentRepository
from src.modules.workspaces.models import Workspace
from src.shared.enums import SYSTEM_ACTOR, AppointmentStatus, PaymentStatus

logger = logging.getLogger(__name__)

MANUAL_CANCEL_REASON = "Payment not made"
EXPIRED_PAYMENT_NOTE = "Expired automatically"
EXPIRED_APPOINTMENT_REASON = "Payment not made within the deadline"

# Appointment states a pending payment may cascade from.
CASCADABLE_APPOINTMENT_STATES = {AppointmentStatus.PENDING, AppointmentStatus.PENDING_PAYMENT}


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class PaymentLifecycle:
    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.payments = PaymentRepository(db)
        self.appointments = AppointmentRepository(db)

    async def create_for_appointment(self, appointment_id: str, *, workspace_id: str | None = None) -> Payment | None:
        """Create the pending payment for an appointment, at most once.

        Returns the existing payment when one is already recorded, or ``None``
        when the workspace policy does not charge for this booking.
        """
        try:
            payment = await self._create(appointment_id, workspace_id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            winner = await self.payments.get_by_appointment(appointment_id)
            if winner is None:
                raise
            await self.db.commit()
            logger.info("Concurrent create for appointment %s; reusing %s", appointment_id, winner.payment_id)
            return winner
        except Exception:
            await self.db.rollback()
            raise
        return payment

    async def _create(self, appointment_id: str, workspace_id: str | None) -> Payment | None:
        existing = await self.payments.get_by_appointment(appointment_id, workspace_id=workspace_id)
        if existing is not None:
            logger.info("Payment %s already exists for appointment %s", existing.payment_id, appointment_id)
            return existing

        appointment = await self.appointments.get(appointment_id, workspace_id=workspace_id, for_update=True)
        if appointment is None:
            raise PaymentNotFound(f"Appointment {appointment_id} not found")
        workspace = await self.db.get(Workspace, appointment.workspace_id)
        policy = PricingPolicy.from_workspace(workspace, settings.payment_default_expiry_minutes)

        if not policy.charges:
            logger.info("Workspace %s does not require payment; skipping %s", workspace.workspace_id, appointment_id)
            return None
        total = appointment.total_price_cents
        amount = policy.amount_for(total)
        if amount <= 0:
            logger.info("Computed amount %s for appointment %s; no payment required", amount, appointment_id)
            return None
        if appointment.status not in CASCADABLE_APPOINTMENT_STATES:
            raise InvalidStateTransition(appointment.status, AppointmentStatus.PENDING_PAYMENT, entity="appointment")

        now = self.clock()
        payment = Payment(
            appointment_id=appointment.appointment_id,
            amount_cents=amount,
            service_total_cents=total,
            status=PaymentStatus.PENDING,
            pix_code=self._encode(policy, amount),
            created_at=now,
            expires_at=now + timedelta(minutes=policy.expiry_minutes),
        )
        payment.appointment = appointment
        await self.payments.add(payment)
        await self.appointments.set_status(appointment, AppointmentStatus.PENDING_PAYMENT)
        logger.info(
            "Created payment %s for appointment %s: %s of %s cents, expires %s",
            payment.payment_id,
            appointment_id,
            amount,
            total,
            payment.expires_at.isoformat(),
        )
        return payment

    async def confirm(
        self,
        payment_id: str,
        workspace_id: str,
        actor_id: str,
        notes: str | None = None,
    ) -> Payment:
        try:
            payment, appointment = await self._load_pending(payment_id, workspace_id, PaymentStatus.PAID)
            if appointment.status not in CASCADABLE_APPOINTMENT_STATES:
                raise InvalidStateTransition(appointment.status, AppointmentStatus.CONFIRMED, entity="appointment")

            await self._claim(
                payment,
                PaymentStatus.PAID,
                paid_at=self.clock(),
                confirmed_by=actor_id,
                notes=notes,
            )
            await self.appointments.set_status(appointment, AppointmentStatus.CONFIRMED)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Payment %s confirmed by %s", payment_id, actor_id)
        return payment

    async def cancel(
        self,
        payment_id: str,
        workspace_id: str | None,
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> Payment:
        """Cancel a pending payment and its appointment.

        ``actor_id=None`` marks the cancellation as system-driven.
        """
        cancelled_by = actor_id or SYSTEM_ACTOR
        reason = reason or MANUAL_CANCEL_REASON
        try:
            payment, appointment = await self._load_pending(payment_id, workspace_id, PaymentStatus.CANCELLED)
            cascade = cascade_target(appointment)
            if cascade is None:
                raise InvalidStateTransition(appointment.status, AppointmentStatus.CANCELLED, entity="appointment")

            now = self.clock()
            await self._claim(payment, PaymentStatus.CANCELLED, cancelled_at=now, notes=reason)
            if cascade:
                await self.appointments.mark_cancelled(
                    appointment,
                    cancelled_at=now,
                    cancelled_by=cancelled_by,
                    reason=reason,
                )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Payment %s cancelled by %s", payment_id, cancelled_by)
        return payment

    async def get_by_appointment(self, appointment_id: str, workspace_id: str) -> Payment:
        payment = await self.payments.get_by_appointment(appointment_id, workspace_id=workspace_id)
        if payment is None:
            raise PaymentNotFound(f"No payment for appointment {appointment_id}")
        return payment

    async def list_pending(self, workspace_id: str) -> list[Payment]:
        return await self.payments.list_pending(workspace_id)

    async def _load_pending(
        self,
        payment_id: str,
        workspace_id: str | None,
        attempted: PaymentStatus,
    ) -> tuple[Payment, Appointment]:
        payment = await self.payments.get(payment_id, workspace_id=workspace_id, for_update=True)
        if payment is None:
            raise PaymentNotFound(f"Payment {payment_id} not found")
        if payment.status.is_terminal:
            raise InvalidStateTransition(payment.status, attempted)
        return payment, payment.appointment

    async def _claim(self, payment: Payment, new_status: PaymentStatus, **values) -> None:
        if await self.payments.claim(payment, new_status, **values):
            return
        if payment.status.is_terminal:
            raise InvalidStateTransition(payment.status, new_status)
        raise ConcurrentModification(f"Payment {payment.payment_id} was modified concurrently; retry")

    def _encode(self, policy: PricingPolicy, amount: int) -> str | None:
        identity = policy.pix_identity
        if not identity.is_complete:
            logger.warning("PIX identity incomplete; payment created without a payload")
            return None
        if not identity.city:
            identity = replace(identity, city=settings.pix_default_city)
        try:
            return encode_payload(
                identity,
                amount,
                settings.pix_payment_description,
                txid_prefix=settings.pix_txid_prefix,
                clock=lambda: self.clock().timestamp(),
            )
        except MissingPixIdentity as exc:
            logger.warning(
                "PIX key %s cannot be encoded (%s); payment created without a payload",
                mask_pix_key(identity.key, identity.key_type),
                exc.detail,
            )
            return None


def cascade_target(appointment: Appointment) -> bool | None:
    """Whether cancelling a pending payment should also cancel ``appointment``.

    ``True``: cancel it. ``False``: it is already cancelled, leave it alone.
    ``None``: it is in a state a pending payment must not be cancelled from.
    """
    if appointment.status in CASCADABLE_APPOINTMENT_STATES:
        return True
    if appointment.status == AppointmentStatus.CANCELLED:
        return False
    return None
