"""Payments API routes."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.database import get_db, get_session_factory
from src.core.deps import require_owner, require_workspace_staff
from src.modules.payments.schemas import (
    PaymentCancel,
    PaymentConfirm,
    PaymentPublic,
    PendingPaymentPublic,
    SweepResultPublic,
)
from src.modules.payments.service import PaymentLifecycle
from src.modules.payments.sweeper import ExpirySweeper
from src.modules.users.models import User
from src.modules.workspaces.schemas import PaymentSettingsPublic, PaymentSettingsUpdate, PublicPixInfo
from src.modules.workspaces.service import WorkspacePaymentSettingsService

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])
public_router = APIRouter(prefix="/api/v1/public", tags=["public"])


def get_service(db: AsyncSession = Depends(get_db)) -> PaymentLifecycle:
    return PaymentLifecycle(db)


def get_settings_service(db: AsyncSession = Depends(get_db)) -> WorkspacePaymentSettingsService:
    return WorkspacePaymentSettingsService(db)


@router.get("/settings", response_model=PaymentSettingsPublic)
async def get_payment_settings(
    current_user: User = Depends(require_workspace_staff),
    service: WorkspacePaymentSettingsService = Depends(get_settings_service),
) -> PaymentSettingsPublic:
    return await service.get_payment_settings(current_user.workspace_id)


@router.put("/settings", response_model=PaymentSettingsPublic)
async def update_payment_settings(
    payload: PaymentSettingsUpdate,
    current_user: User = Depends(require_owner),
    service: WorkspacePaymentSettingsService = Depends(get_settings_service),
) -> PaymentSettingsPublic:
    return await service.update_payment_settings(current_user.workspace_id, payload)


@router.get("/pending", response_model=list[PendingPaymentPublic])
async def list_pending_payments(
    current_user: User = Depends(require_workspace_staff),
    service: PaymentLifecycle = Depends(get_service),
) -> list[PendingPaymentPublic]:
    return await service.list_pending(current_user.workspace_id)


@router.post("/process-expired", response_model=SweepResultPublic)
async def process_expired_payments(
    current_user: User = Depends(require_workspace_staff),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> SweepResultPublic:
    return await ExpirySweeper(session_factory).run_once(workspace_id=current_user.workspace_id)


@router.post(
    "/appointments/{appointment_id}",
    response_model=PaymentPublic,
    status_code=status.HTTP_201_CREATED,
    responses={204: {"description": "No payment required for this appointment"}},
)
async def create_payment(
    appointment_id: str,
    current_user: User = Depends(require_workspace_staff),
    service: PaymentLifecycle = Depends(get_service),
):
    payment = await service.create_for_appointment(appointment_id, workspace_id=current_user.workspace_id)
    if payment is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return payment


@router.get("/appointments/{appointment_id}", response_model=PaymentPublic)
async def get_payment_for_appointment(
    appointment_id: str,
    current_user: User = Depends(require_workspace_staff),
    service: PaymentLifecycle = Depends(get_service),
) -> PaymentPublic:
    return await service.get_by_appointment(appointment_id, current_user.workspace_id)


@router.post("/{payment_id}/confirm", response_model=PaymentPublic)
async def confirm_payment(
    payment_id: str,
    payload: PaymentConfirm,
    current_user: User = Depends(require_workspace_staff),
    service: PaymentLifecycle = Depends(get_service),
) -> PaymentPublic:
    return await service.confirm(payment_id, current_user.workspace_id, current_user.user_id, payload.notes)


@router.post("/{payment_id}/cancel", response_model=PaymentPublic)
async def cancel_payment(
    payment_id: str,
    payload: PaymentCancel,
    current_user: User = Depends(require_workspace_staff),
    service: PaymentLifecycle = Depends(get_service),
) -> PaymentPublic:
    return await service.cancel(payment_id, current_user.workspace_id, current_user.user_id, payload.reason)


@public_router.get("/{slug}/payment-info", response_model=PublicPixInfo)
async def public_payment_info(
    slug: str,
    service: WorkspacePaymentSettingsService = Depends(get_settings_service),
) -> PublicPixInfo:
    info = await service.get_public_pix_info(slug)
    if info is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not enabled for this workspace")
    return info
