"""UniversalLicense ORM — shared license key and the emails it authorizes.

Invariants:
    - One row per license key (normally just "main")
    - version increments on every committed change (compare-and-set token)
"""

from sqlalchemy import String, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class UniversalLicense(Base):
    __tablename__ = "universal_licenses"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    authorized_emails: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
