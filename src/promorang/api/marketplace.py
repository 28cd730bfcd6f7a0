"""Share marketplace, tipping and currency conversion endpoints."""
import logging
from typing import Any, Dict, List, Optional

import requests

from ..errors import PromorangError, ValidationError
from ..fee_calculator import FeeCalculator
from ..models import ContentShareHolding, ShareListing, ShareOffer
from ..rewards import conversion_cost
from .client import PromorangClient

logger = logging.getLogger(__name__)

RECOVERABLE_ERRORS = (PromorangError, requests.RequestException)


def _items(data: Any, key: str) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get(key), list):
        items = data[key]
    else:
        return []
    return [item for item in items if isinstance(item, dict)]


def _data_dict(data: Any) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


class MarketplaceService:
    """Buy, list and bid on content shares.

    Inputs are validated before any request is sent. Reads return empty lists
    on failure; mutations log and re-raise.
    """

    def __init__(self, client: PromorangClient):
        self.client = client

    # ==================== PRIMARY MARKET ====================

    def buy_shares(self, content_id: str, shares_count: int) -> Dict[str, Any]:
        if shares_count is None or shares_count < 1:
            raise ValidationError('shares_count', 'Share count must be at least 1')
        try:
            result = self.client.post('/api/content/buy-shares', action='buy shares',
                                      json={'content_id': content_id, 'shares_count': int(shares_count)})
        except RECOVERABLE_ERRORS as e:
            logger.error(f"buy_shares failed for {content_id}: {e}")
            raise
        logger.info(f"Bought {shares_count} shares of {content_id}")
        return _data_dict(result.data)

    # ==================== SECONDARY MARKET ====================

    def create_share_listing(self, content_id: str, quantity: int, ask_price: float,
                             content_title: Optional[str] = None,
                             content_thumbnail: Optional[str] = None) -> Dict[str, Any]:
        FeeCalculator.validate_listing(quantity, ask_price)
        body = {
            'content_id': content_id,
            'content_title': content_title,
            'content_thumbnail': content_thumbnail,
            'quantity': int(quantity),
            'ask_price': float(ask_price),
        }
        try:
            result = self.client.post('/api/marketplace/share-listings', action='create listing', json=body)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"create_share_listing failed for {content_id}: {e}")
            raise
        data = _data_dict(result.data)
        return data.get('listing') or data

    def create_share_offer(self, content_id: str, quantity: int, bid_price: float,
                           seller_id: Optional[str] = None, message: str = '') -> Dict[str, Any]:
        if quantity is None or quantity <= 0:
            raise ValidationError('quantity', 'Quantity must be greater than 0')
        if bid_price is None or bid_price <= 0:
            raise ValidationError('bid_price', 'Bid price must be greater than 0')

        body: Dict[str, Any] = {
            'content_id': content_id,
            'quantity': int(quantity),
            'bid_price': float(bid_price),
            'message': message or '',
        }
        if seller_id:
            body['seller_id'] = seller_id
        try:
            result = self.client.post('/api/marketplace/share-offers', action='create offer', json=body)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"create_share_offer failed for {content_id}: {e}")
            raise
        data = _data_dict(result.data)
        return data.get('offer') or data

    def accept_share_offer(self, offer_id: str) -> Dict[str, Any]:
        try:
            result = self.client.post(f'/api/marketplace/share-offers/{offer_id}/accept',
                                      action='accept offer')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"accept_share_offer failed for {offer_id}: {e}")
            raise
        return _data_dict(result.data)

    def fetch_share_listings(self, content_id: Optional[str] = None) -> List[ShareListing]:
        params = {'content_id': content_id} if content_id else None
        try:
            result = self.client.get('/api/marketplace/share-listings', action='load listings', params=params)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"fetch_share_listings failed: {e}")
            return []
        return [ShareListing.from_dict(item) for item in _items(result.data, 'listings')]

    def fetch_share_offers(self, content_id: Optional[str] = None) -> List[ShareOffer]:
        params = {'content_id': content_id} if content_id else None
        try:
            result = self.client.get('/api/marketplace/share-offers', action='load offers', params=params)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"fetch_share_offers failed: {e}")
            return []
        return [ShareOffer.from_dict(item) for item in _items(result.data, 'offers')]

    def fetch_holdings(self) -> List[ContentShareHolding]:
        try:
            result = self.client.get('/api/portfolio/holdings', action='load holdings')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"fetch_holdings failed: {e}")
            return []
        return [ContentShareHolding.from_dict(item) for item in _items(result.data, 'holdings')]

    # ==================== WALLET ====================

    def tip_creator(self, content_id: str, gems: int) -> Dict[str, Any]:
        if gems is None or gems <= 0:
            raise ValidationError('tip_amount', 'Tip must be at least 1 gem')
        try:
            result = self.client.post('/api/content/tip', action='send tip',
                                      json={'content_id': content_id, 'tip_amount': gems})
        except RECOVERABLE_ERRORS as e:
            logger.error(f"tip_creator failed for {content_id}: {e}")
            raise
        return _data_dict(result.data)

    def convert_currency(self, from_currency: str, keys: int) -> Dict[str, Any]:
        """
        Convert points or gems into keys.

        Args:
            from_currency: 'points' or 'gems'
            keys: Number of keys to receive
        """
        if keys is None or keys < 1:
            raise ValidationError('amount', 'Amount must be at least 1')
        conversion_cost(from_currency, keys)
        try:
            result = self.client.post('/api/users/convert', action='convert currency', json={
                'from_currency': from_currency,
                'to_currency': 'keys',
                'amount': int(keys),
            })
        except RECOVERABLE_ERRORS as e:
            logger.error(f"convert_currency failed ({from_currency} -> keys): {e}")
            raise
        return _data_dict(result.data)
