"""ORM Models — SQLAlchemy declarative models for all ledger entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Models reference each other by integer id only (no ORM relationships)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from earnledger.models.user import User  # noqa: F401
from earnledger.models.task import Task  # noqa: F401
from earnledger.models.completed_task import CompletedTask  # noqa: F401
from earnledger.models.referral import Referral  # noqa: F401
from earnledger.models.referral_setting import ReferralSetting  # noqa: F401
from earnledger.models.withdrawal import Withdrawal  # noqa: F401
from earnledger.models.announcement import Announcement  # noqa: F401
