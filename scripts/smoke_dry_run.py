#!/usr/bin/env python3
"""Dry-run smoke test (no network).

Drives the marketplace and advertiser services, plus the buy/list/offer
tickets, against an in-memory fake backend. This is meant as a quick sanity
check after refactors.

Usage:
    ./.venv/bin/python -m scripts.smoke_dry_run
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from promorang.api import AdvertiserService, MarketplaceService, PromorangClient
from promorang.config import Settings
from promorang.fee_calculator import format_quote
from promorang.rewards import external_move_reward, share_content_reward
from promorang.tickets import ListingTicket, OfferTicket, PurchaseTicket

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

BASE_URL = "https://smoke.invalid"


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.url = BASE_URL
        self._payload = payload

    def json(self) -> Any:
        return self._payload


class FakeBackendSession:
    """Minimal stand-in for the Promorang backend."""

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}
        self.wallet = 37.0
        self.coupons = [{"id": "cp1", "code": "WELCOME10"}]

    def _ok(self, data: Any) -> _FakeResponse:
        return _FakeResponse(200, {"status": "success", "data": data})

    def request(self, method: str, url: str, json: Optional[Dict[str, Any]] = None,
                params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> _FakeResponse:
        path = url[len(BASE_URL):]
        body = json or {}

        if (method, path) == ("GET", "/api/portfolio/holdings"):
            return self._ok({"holdings": [
                {"content_id": "c1", "owned_shares": 40, "available_to_sell": 40, "current_price": 2.5},
            ]})
        if (method, path) == ("POST", "/api/content/buy-shares"):
            cost = body["shares_count"] * 5.0
            if cost > self.wallet:
                return _FakeResponse(402, {"status": "error", "message": "Insufficient balance"})
            self.wallet -= cost
            return self._ok({"wallet_balance": self.wallet})
        if (method, path) == ("POST", "/api/marketplace/share-listings"):
            return self._ok({"listing": {"id": "l1", **body}})
        if (method, path) == ("POST", "/api/marketplace/share-offers"):
            return self._ok({"offer": {"id": "o1", **body}})
        if (method, path) == ("GET", "/api/advertisers/subscription/plans"):
            # Server omits current_tier on purpose.
            return self._ok({"plans": [{"id": "growth", "name": "Growth", "price": 99}]})
        if (method, path) == ("GET", "/api/advertisers/coupons"):
            return self._ok({"coupons": list(self.coupons)})
        if (method, path) == ("POST", "/api/advertisers/coupons"):
            coupon = {"id": f"cp{len(self.coupons) + 1}", **body}
            self.coupons.append(coupon)
            return self._ok({"coupon": coupon})

        return _FakeResponse(404, {"status": "error", "message": f"No route for {method} {path}"})

    def post(self, url: str, json: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> _FakeResponse:
        return self._ok({})


def _run_marketplace_smoke(client: PromorangClient) -> None:
    market = MarketplaceService(client)

    purchase = PurchaseTicket("c1", unit_price=5.0, available_inventory=10, wallet_balance=37.0)
    purchase.set_quantity(9)
    assert purchase.quantity == 7, purchase.quantity
    assert purchase.submit(market), purchase.error
    logger.info(f"Bought {purchase.quantity} shares, result={purchase.result}")

    [holding] = market.fetch_holdings()
    listing = ListingTicket.from_holding(holding)
    listing.set_quantity(10)
    logger.info(f"Listing quote: {format_quote(listing.quote)}")
    assert listing.submit(market), listing.error

    offer = OfferTicket("c1", owned_shares=holding.owned_shares, bid_price=2.25)
    assert offer.quantity == 10, offer.quantity
    assert offer.submit(market), offer.error

    # Wallet is now $2; a second purchase must be rejected locally.
    again = PurchaseTicket("c1", unit_price=5.0, available_inventory=3, wallet_balance=2.0)
    assert not again.submit(market)
    logger.info(f"Second purchase blocked: {again.error}")


def _run_advertiser_smoke(client: PromorangClient) -> None:
    advertiser = AdvertiserService(client)

    plans = advertiser.get_plans()
    assert plans.current_tier == "free", plans
    before = advertiser.list_coupons()
    advertiser.create_coupon({"code": "SUMMER25"})
    after = advertiser.list_coupons()
    assert len(after.coupons) == len(before.coupons) + 1
    logger.info(f"Coupons: {[c['id'] for c in after.coupons]}")


def _run_rewards_smoke() -> None:
    like = external_move_reward("like", "super")
    share = share_content_reward("free")
    logger.info(f"External like (super): {like.points} pts / {like.keys} keys; share (free): {share.points} pts")


def main() -> None:
    settings = Settings(api_base_url=BASE_URL, max_retries=1)
    client = PromorangClient(settings, session=FakeBackendSession())
    _run_marketplace_smoke(client)
    _run_advertiser_smoke(client)
    _run_rewards_smoke()
    print("smoke_dry_run: OK")


if __name__ == "__main__":
    main()
