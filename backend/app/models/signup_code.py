"""SignupCode ORM — persists single-use license codes.

Invariants:
    - code is the primary key (issued externally, globally unique)
    - used is a one-way flag; used_at is set in the same UPDATE that sets used
    - email, payment_id, created_at are written at issuance only

Design Decisions:
    - No surrogate id: the code itself is the lookup key for redemption
"""

from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class SignupCode(Base):
    """License code issued after payment."""
    __tablename__ = "signup_codes"

    code: Mapped[str] = mapped_column(String(128), primary_key=True)
    used: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
