"""Share quantity limits and affordability checks.

These helpers are intentionally pure (no API calls) so they can be unit tested.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import DEFAULT_OFFER_FRACTION


class PurchaseBlock(Enum):
    UNAVAILABLE = "This content is unavailable for purchase"
    INSUFFICIENT_BALANCE = "Insufficient balance"


def _inventory_cap(available_inventory: Optional[float]) -> float:
    # Unknown or negative inventory means there is no hard cap.
    if isinstance(available_inventory, (int, float)) and available_inventory >= 0:
        return float(available_inventory)
    return math.inf


def _wallet_cap(wallet_balance: float, unit_price: float) -> float:
    if unit_price > 0:
        return float(math.floor(max(0.0, wallet_balance) / unit_price))
    return math.inf


def max_purchase_quantity(
    available_inventory: Optional[float],
    wallet_balance: float,
    unit_price: float,
) -> Optional[int]:
    """Largest quantity the wallet and inventory allow.

    Returns None when there is no finite positive bound. That covers both the
    unbounded case (free content, no inventory cap) and the disabled case
    (nothing affordable or nothing left); `purchase_eligibility` tells the
    two apart.
    """
    raw = min(_inventory_cap(available_inventory), _wallet_cap(wallet_balance, unit_price))
    if math.isfinite(raw) and raw > 0:
        return max(1, int(math.floor(raw)))
    return None


def clamp_quantity(current: int, maximum: Optional[int]) -> int:
    if maximum is not None:
        return max(1, min(maximum, current))
    return max(1, current)


def purchase_eligibility(
    unit_price: float,
    available_inventory: Optional[float],
    wallet_balance: float,
) -> bool:
    """Whether the content can be bought at all, independent of quantity."""
    if unit_price <= 0:
        return False
    if available_inventory is not None and available_inventory <= 0:
        return False
    raw = min(_inventory_cap(available_inventory), _wallet_cap(wallet_balance, unit_price))
    return raw > 0


def can_afford(total_cost: float, balance: float, eligible: bool) -> bool:
    return eligible and balance >= total_cost


def purchase_block_reason(
    unit_price: float,
    available_inventory: Optional[float],
    wallet_balance: float,
    quantity: int,
) -> Optional[PurchaseBlock]:
    """Why a purchase of `quantity` cannot proceed, or None if it can."""
    if unit_price <= 0:
        return PurchaseBlock.UNAVAILABLE
    if available_inventory is not None and available_inventory <= 0:
        return PurchaseBlock.UNAVAILABLE

    eligible = purchase_eligibility(unit_price, available_inventory, wallet_balance)
    if not can_afford(quantity * unit_price, wallet_balance, eligible):
        return PurchaseBlock.INSUFFICIENT_BALANCE
    return None


@dataclass(frozen=True)
class PurchaseLimits:
    unit_price: float
    available_inventory: Optional[float]
    wallet_balance: float
    max_quantity: Optional[int]
    eligible: bool


def purchase_limits(
    unit_price: float,
    available_inventory: Optional[float],
    wallet_balance: float,
) -> PurchaseLimits:
    """Recompute whenever inventory, price or wallet balance changes."""
    return PurchaseLimits(
        unit_price=unit_price,
        available_inventory=available_inventory,
        wallet_balance=wallet_balance,
        max_quantity=max_purchase_quantity(available_inventory, wallet_balance, unit_price),
        eligible=purchase_eligibility(unit_price, available_inventory, wallet_balance),
    )


def default_offer_quantity(owned_shares: int) -> int:
    """Suggested bid size: a quarter of the holding, rounded up."""
    if owned_shares <= 0:
        return 1
    return min(owned_shares, max(1, math.ceil(owned_shares * DEFAULT_OFFER_FRACTION)))
