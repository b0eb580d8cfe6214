"""Seed helpers shared by the database-backed tests."""

from datetime import datetime, timedelta, timezone

from src.modules.appointments.models import Appointment
from src.modules.users.models import User
from src.modules.workspaces.models import Workspace
from src.shared.enums import AppointmentStatus, ChargeMode, PixKeyType, UserRole
from src.shared.ulid import generate_ulid

APPOINTMENT_START = datetime(2026, 3, 10, 13, 0, tzinfo=timezone.utc)


async def seed_workspace(db_session, **overrides) -> Workspace:
    values = dict(
        workspace_id=generate_ulid(),
        name="Studio Bela",
        slug=f"studio-{generate_ulid().lower()[-8:]}",
        require_payment=True,
        charge_mode=ChargeMode.PARTIAL_PERCENT,
        partial_percent=50,
        payment_expiry_minutes=30,
        pix_key_type=PixKeyType.EMAIL,
        pix_key="financeiro@studiobela.com.br",
        pix_holder_name="Studio Bela Ltda",
        pix_city="Sao Paulo",
    )
    values.update(overrides)
    workspace = Workspace(**values)
    db_session.add(workspace)
    await db_session.commit()
    return workspace


async def seed_user(db_session, workspace: Workspace, role: UserRole = UserRole.STAFF) -> User:
    user = User(
        user_id=generate_ulid(),
        workspace_id=workspace.workspace_id,
        email=f"{generate_ulid().lower()}@studiobela.com.br",
        role=role,
        display_name="Recepcao",
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    return user


async def seed_appointment(
    db_session,
    workspace: Workspace,
    total_price_cents: int = 20000,
    status: AppointmentStatus = AppointmentStatus.PENDING,
) -> Appointment:
    appointment = Appointment(
        appointment_id=generate_ulid(),
        workspace_id=workspace.workspace_id,
        client_name="Maria Silva",
        start_time=APPOINTMENT_START,
        end_time=APPOINTMENT_START + timedelta(hours=1),
        total_price_cents=total_price_cents,
        status=status,
    )
    db_session.add(appointment)
    await db_session.commit()
    return appointment
