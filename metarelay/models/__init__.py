"""ORM Models — SQLAlchemy declarative models for persisted relay state.

Invariants:
    - All models inherit from Base (db/base.py)
    - uint256 quantities stored as decimal strings (no SQL integer type holds 2**256-1)

Design Decisions:
    - One file per concern for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from metarelay.models.executed_authorization import ExecutedAuthorization  # noqa: F401
from metarelay.models.token_account import (  # noqa: F401
    TokenBalance, TokenAllowance, TokenTransfer,
)
