"""Settlement Rules — postback parameter parsing and reward resolution.

Invariants:
    - user_id and task_id must be present ASCII base-10 strings within the key range
    - payout, when given, must be a positive decimal no larger than MAX_MONEY;
      it wins over any default
    - Referral reward comes from the referral's stored country setting, else the default
    - All functions are pure: settings and task rows are passed in, never fetched

Design Decisions:
    - Parsing lives in core so the postback route stays a thin shell and the
      rules are testable without HTTP
"""

from dataclasses import dataclass
from decimal import Decimal

from earnledger.core.domain_types import (
    MAX_MONEY, TaskId, UserId, ZERO, parse_row_id, to_money,
)
from earnledger.core.errors import ValidationError


@dataclass(frozen=True)
class PostbackParams:
    """Validated postback query from the advertiser network."""
    user_id: UserId
    task_id: TaskId
    payout: Decimal | None
    transaction_id: str | None


def _parse_id(raw: str | None, name: str) -> int:
    if raw is None or not raw.strip():
        raise ValidationError("Missing parameters", name)
    try:
        return parse_row_id(raw.strip())
    except ValueError:
        raise ValidationError(f"{name} must be numeric", name)


def parse_postback(
    user_id: str | None,
    task_id: str | None,
    payout: str | None = None,
    transaction_id: str | None = None,
) -> PostbackParams:
    """Validate raw query values. Raises ValidationError (-> 400)."""
    parsed_user = _parse_id(user_id, "user_id")
    parsed_task = _parse_id(task_id, "task_id")

    parsed_payout: Decimal | None = None
    if payout is not None and payout.strip():
        try:
            parsed_payout = to_money(payout.strip())
        except ValueError:
            raise ValidationError("payout must be a decimal amount", "payout")
        if parsed_payout <= ZERO:
            raise ValidationError("payout must be positive", "payout")
        if parsed_payout > MAX_MONEY:
            raise ValidationError(f"payout must not exceed {MAX_MONEY}", "payout")

    return PostbackParams(
        user_id=UserId(parsed_user),
        task_id=TaskId(parsed_task),
        payout=parsed_payout,
        transaction_id=transaction_id or None,
    )


def resolve_task_reward(
    payout: Decimal | None, task_reward: Decimal | None, default: Decimal,
) -> Decimal:
    """payout > the task's configured reward > the global default."""
    if payout is not None:
        return to_money(payout)
    if task_reward is not None:
        return to_money(task_reward)
    return to_money(default)


def resolve_referral_reward(
    setting_reward: Decimal | None, default: Decimal,
) -> Decimal:
    return to_money(setting_reward if setting_reward is not None else default)


def resolve_min_withdrawal(
    setting_minimum: Decimal | None, default: Decimal,
) -> Decimal:
    return to_money(setting_minimum if setting_minimum is not None else default)
