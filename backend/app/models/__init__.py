"""ORM Models — SQLAlchemy declarative models for persisted records.

Invariants:
    - All models inherit from Base (db/base.py)
    - Each model backs exactly one record store collection

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.signup_code import SignupCode  # noqa: F401
from app.models.project import Project, PhaseHistoryEntry  # noqa: F401
from app.models.universal_license import UniversalLicense  # noqa: F401
