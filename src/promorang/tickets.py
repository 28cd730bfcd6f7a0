"""Form state for the buy, list and offer flows.

A ticket holds what a modal would hold: the quantity and price being edited,
the limits they are clamped to, and the error to show. `submit` never raises
for validation, transport or business failures; it records the message on the
ticket and returns False so the user can retry or cancel.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import requests

from .errors import PromorangError, ValidationError
from .fee_calculator import FeeCalculator, ListingQuote
from .models import ContentShareHolding
from .position_sizing import (
    PurchaseBlock,
    clamp_quantity,
    default_offer_quantity,
    purchase_block_reason,
    purchase_limits,
)

logger = logging.getLogger(__name__)


class _Ticket:
    """Shared submit/close handling."""

    def __init__(self) -> None:
        self.error: Optional[str] = None
        self.field_errors: Dict[str, str] = {}
        self.result: Optional[Dict[str, Any]] = None
        self.submitting = False
        self.closed = False

    def close(self) -> None:
        """Responses that arrive after close() are dropped."""
        self.closed = True

    def _run(self, name: str, call: Callable[[], Dict[str, Any]]) -> bool:
        self.error = None
        self.field_errors = {}
        self.submitting = True
        try:
            result = call()
        except ValidationError as e:
            self.field_errors[e.field] = e.message
            return False
        except (PromorangError, requests.RequestException) as e:
            logger.error(f"{name} failed: {e}")
            if not self.closed:
                self.error = str(e) or f"{name} failed"
            return False
        finally:
            self.submitting = False

        if self.closed:
            logger.debug(f"{name} finished after the ticket was closed; result dropped")
            return False
        self.result = result
        return True


class PurchaseTicket(_Ticket):
    """Buy shares of a piece of content from the primary market."""

    def __init__(self, content_id: str, unit_price: float,
                 available_inventory: Optional[float], wallet_balance: float):
        super().__init__()
        self.content_id = content_id
        self.quantity = 1
        self.refresh(unit_price, available_inventory, wallet_balance)

    def refresh(self, unit_price: float, available_inventory: Optional[float], wallet_balance: float) -> None:
        """Recompute limits (on open, or when price/inventory/balance change)."""
        self.limits = purchase_limits(unit_price or 0.0, available_inventory, wallet_balance or 0.0)
        self.quantity = clamp_quantity(self.quantity, self.limits.max_quantity)

    def set_quantity(self, quantity: int) -> int:
        self.quantity = clamp_quantity(int(quantity), self.limits.max_quantity)
        return self.quantity

    def increment(self) -> int:
        return self.set_quantity(self.quantity + 1)

    def decrement(self) -> int:
        return self.set_quantity(self.quantity - 1)

    @property
    def total_cost(self) -> float:
        return self.quantity * self.limits.unit_price

    @property
    def block_reason(self) -> Optional[PurchaseBlock]:
        return purchase_block_reason(
            self.limits.unit_price,
            self.limits.available_inventory,
            self.limits.wallet_balance,
            self.quantity,
        )

    @property
    def can_submit(self) -> bool:
        return not self.submitting and self.block_reason is None

    def submit(self, service) -> bool:
        reason = self.block_reason
        if reason is not None:
            self.error = reason.value
            return False
        return self._run('Purchase', lambda: service.buy_shares(self.content_id, self.quantity))


class ListingTicket(_Ticket):
    """List owned shares for resale."""

    def __init__(self, content_id: str, available_to_sell: int, ask_price: float,
                 content_title: Optional[str] = None, fee_calculator: Optional[FeeCalculator] = None):
        super().__init__()
        self.content_id = content_id
        self.content_title = content_title
        self.available_to_sell = max(0, available_to_sell)
        self.fee_calculator = fee_calculator or FeeCalculator()
        self.quantity = max(1, self.available_to_sell)
        self.ask_price = ask_price

    @classmethod
    def from_holding(cls, holding: ContentShareHolding, **kwargs) -> 'ListingTicket':
        return cls(
            holding.content_id,
            holding.available_to_sell,
            holding.current_price,
            content_title=holding.content_title,
            **kwargs,
        )

    def set_quantity(self, quantity: int) -> int:
        self.quantity = clamp_quantity(int(quantity), self.available_to_sell or None)
        return self.quantity

    def set_ask_price(self, ask_price: float) -> None:
        self.ask_price = ask_price

    @property
    def quote(self) -> ListingQuote:
        return self.fee_calculator.quote(self.quantity, self.ask_price)

    def submit(self, service) -> bool:
        if self.available_to_sell <= 0:
            self.field_errors = {'quantity': 'No shares available to sell'}
            return False
        return self._run('Listing', lambda: service.create_share_listing(
            self.content_id,
            self.quantity,
            self.ask_price,
            content_title=self.content_title,
        ))


class OfferTicket(_Ticket):
    """Bid on another holder's shares."""

    def __init__(self, content_id: str, owned_shares: int, bid_price: float,
                 seller_id: Optional[str] = None, message: str = ''):
        super().__init__()
        self.content_id = content_id
        self.owned_shares = max(0, owned_shares)
        self.bid_price = bid_price
        self.seller_id = seller_id
        self.message = message
        self.quantity = default_offer_quantity(self.owned_shares)

    def set_quantity(self, quantity: int) -> int:
        self.quantity = clamp_quantity(int(quantity), self.owned_shares or None)
        return self.quantity

    @property
    def total(self) -> float:
        return FeeCalculator.offer_total(self.quantity, self.bid_price)

    def submit(self, service) -> bool:
        return self._run('Offer', lambda: service.create_share_offer(
            self.content_id,
            self.quantity,
            self.bid_price,
            seller_id=self.seller_id,
            message=self.message,
        ))
