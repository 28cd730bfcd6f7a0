"""Tier-adjusted rewards, tip estimates and key conversion costs."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .constants import (
    DEFAULT_EXTERNAL_MOVE_POINTS,
    EXTERNAL_MOVE_FACTOR,
    EXTERNAL_MOVE_POINTS,
    GEM_TO_USD,
    IN_APP_ACTION_POINTS,
    KEY_CONVERSION_RATES,
    POINTS_PER_KEY,
    SHARE_CONTENT_BASE_POINTS,
    TIER_MULTIPLIERS,
)
from .errors import ValidationError
from .models import Balances, UserTier


@dataclass(frozen=True)
class Reward:
    points: int
    keys: int
    multiplier: float


def tier_multiplier(tier: Any) -> float:
    """Multiplier for a user tier; anything unrecognised counts as free."""
    return TIER_MULTIPLIERS[UserTier.parse(tier).value]


def external_move_reward(action: str, tier: Any) -> Reward:
    base = EXTERNAL_MOVE_POINTS.get(action, DEFAULT_EXTERNAL_MOVE_POINTS)
    multiplier = tier_multiplier(tier)
    points = int(math.floor(base * multiplier))
    keys = int(math.ceil(points / POINTS_PER_KEY))
    return Reward(points=points, keys=keys, multiplier=multiplier)


def in_app_action_reward(action: str, tier: Any) -> Reward:
    base = IN_APP_ACTION_POINTS.get(action, DEFAULT_EXTERNAL_MOVE_POINTS // EXTERNAL_MOVE_FACTOR)
    multiplier = tier_multiplier(tier)
    return Reward(points=int(math.floor(base * multiplier)), keys=0, multiplier=multiplier)


def reward(action: str, tier: Any, external: bool = True) -> Reward:
    if external:
        return external_move_reward(action, tier)
    return in_app_action_reward(action, tier)


def share_content_reward(tier: Any) -> Reward:
    multiplier = tier_multiplier(tier)
    return Reward(
        points=int(math.floor(SHARE_CONTENT_BASE_POINTS * multiplier)),
        keys=0,
        multiplier=multiplier,
    )


def tip_creator_estimate(gems: float) -> float:
    """USD the creator is shown as receiving. Display only, not a ledger value."""
    return gems * GEM_TO_USD


def conversion_cost(from_currency: str, keys: int) -> int:
    rate = KEY_CONVERSION_RATES.get(from_currency)
    if rate is None:
        raise ValidationError('from_currency', f"Cannot convert {from_currency!r} to keys")
    return keys * rate


def can_convert(balances: Balances, from_currency: str, keys: int) -> bool:
    if keys < 1:
        return False
    return balances.get(from_currency) >= conversion_cost(from_currency, keys)
