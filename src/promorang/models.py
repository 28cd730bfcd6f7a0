"""DTOs mirroring server state (holdings, listings, offers, balances, plans).

The client never owns this state; every object is a read-only snapshot parsed
from a server payload. Parsers are tolerant: missing or malformed fields fall
back to safe defaults instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .constants import DEFAULT_TIER


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


class UserTier(str, Enum):
    FREE = 'free'
    PREMIUM = 'premium'
    SUPER = 'super'

    @classmethod
    def parse(cls, value: Any) -> 'UserTier':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.FREE


class ListingStatus(str, Enum):
    ACTIVE = 'active'
    FILLED = 'filled'
    CANCELLED = 'cancelled'


class OfferStatus(str, Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    DECLINED = 'declined'
    EXPIRED = 'expired'


def _parse_enum(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ContentShareHolding:
    content_id: str
    owned_shares: int
    available_to_sell: int
    current_price: float
    avg_cost: float = 0.0
    content_title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ContentShareHolding':
        owned = max(0, _as_int(data.get('owned_shares')))
        available = _as_int(data.get('available_to_sell'), owned)
        # available_to_sell can never exceed what is owned.
        available = max(0, min(available, owned))
        return cls(
            content_id=str(data.get('content_id', '')),
            owned_shares=owned,
            available_to_sell=available,
            current_price=max(0.0, _as_float(data.get('current_price'))),
            avg_cost=_as_float(data.get('avg_cost')),
            content_title=data.get('content_title'),
        )


@dataclass(frozen=True)
class ShareListing:
    id: str
    content_id: str
    quantity: int
    ask_price: float
    remaining_quantity: int
    status: ListingStatus = ListingStatus.ACTIVE
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ShareListing':
        quantity = _as_int(data.get('quantity'))
        return cls(
            id=str(data.get('id', '')),
            content_id=str(data.get('content_id', '')),
            quantity=quantity,
            ask_price=_as_float(data.get('ask_price')),
            remaining_quantity=_as_int(data.get('remaining_quantity'), quantity),
            status=_parse_enum(ListingStatus, data.get('status'), ListingStatus.ACTIVE),
            created_at=data.get('created_at'),
        )


@dataclass(frozen=True)
class ShareOffer:
    id: str
    content_id: str
    quantity: int
    bid_price: float
    seller_id: Optional[str] = None
    message: str = ''
    status: OfferStatus = OfferStatus.PENDING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ShareOffer':
        return cls(
            id=str(data.get('id', '')),
            content_id=str(data.get('content_id', '')),
            quantity=_as_int(data.get('quantity')),
            bid_price=_as_float(data.get('bid_price')),
            seller_id=data.get('seller_id'),
            message=data.get('message') or '',
            status=_parse_enum(OfferStatus, data.get('status'), OfferStatus.PENDING),
        )


@dataclass(frozen=True)
class Balances:
    """Wallet snapshot. Mutations happen server-side; refetch to observe them."""

    points: int = 0
    keys: int = 0
    gems: int = 0
    gold: int = 0
    usd: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Balances':
        usd = data.get('usd_balance', data.get('balance'))
        return cls(
            points=max(0, _as_int(data.get('points_balance'))),
            keys=max(0, _as_int(data.get('keys_balance'))),
            gems=max(0, _as_int(data.get('gems_balance'))),
            gold=max(0, _as_int(data.get('gold_collected'))),
            usd=max(0.0, _as_float(usd)),
        )

    def get(self, currency: str) -> float:
        return getattr(self, currency, 0)


@dataclass(frozen=True)
class AdvertiserPlan:
    id: str
    name: str
    price: float
    billing_interval: str = 'monthly'
    features: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AdvertiserPlan':
        return cls(
            id=str(data.get('id', '')),
            name=str(data.get('name', '')),
            price=_as_float(data.get('price')),
            billing_interval=data.get('billingInterval') or data.get('billing_interval') or 'monthly',
            features=[str(f) for f in _as_list(data.get('features'))],
        )


@dataclass(frozen=True)
class SubscriptionPlans:
    plans: List[AdvertiserPlan] = field(default_factory=list)
    current_tier: str = DEFAULT_TIER


@dataclass(frozen=True)
class CouponList:
    coupons: List[Dict[str, Any]] = field(default_factory=list)
    redemptions: List[Dict[str, Any]] = field(default_factory=list)
