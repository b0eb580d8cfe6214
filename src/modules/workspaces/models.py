"""Workspace ORM model and its stored payment policy."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database import Base
from src.shared.enums import ChargeMode, PixKeyType, enum_values
from src.shared.models import TimestampMixin
from src.shared.ulid import generate_ulid

if TYPE_CHECKING:  # pragma: no cover
    from src.modules.appointments.models import Appointment
    from src.modules.users.models import User


class Workspace(Base, TimestampMixin):
    __tablename__ = "workspaces"
    __table_args__ = (
        CheckConstraint(
            "partial_percent IS NULL OR (partial_percent BETWEEN 10 AND 100)",
            name="ck_workspaces_partial_percent",
        ),
        CheckConstraint(
            "payment_expiry_minutes BETWEEN 10 AND 1440",
            name="ck_workspaces_payment_expiry",
        ),
    )

    workspace_id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, unique=True, index=True)

    require_payment: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    charge_mode: Mapped[ChargeMode] = mapped_column(
        Enum(
            ChargeMode,
            values_callable=enum_values,
            validate_strings=True,
            name="chargemode",
        ),
        default=ChargeMode.NONE,
        nullable=False,
    )
    partial_percent: Mapped[int | None] = mapped_column(Integer)
    partial_fixed_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    payment_expiry_minutes: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    pix_key_type: Mapped[PixKeyType | None] = mapped_column(
        Enum(
            PixKeyType,
            values_callable=enum_values,
            validate_strings=True,
            name="pixkeytype",
        ),
    )
    pix_key: Mapped[str | None] = mapped_column(String(77))
    pix_holder_name: Mapped[str | None] = mapped_column(String(100))
    pix_city: Mapped[str | None] = mapped_column(String(50))

    members: Mapped[list[User]] = relationship(back_populates="workspace")
    appointments: Mapped[list[Appointment]] = relationship(back_populates="workspace")


# Late imports for type-checking relationship targets.
from src.modules.appointments.models import Appointment  # noqa: E402
from src.modules.users.models import User  # noqa: E402
