"""Advertiser endpoints: subscription plans, coupons and campaigns."""
import copy
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import Settings
from ..constants import DEFAULT_TIER
from ..errors import PromorangError, ValidationError
from ..models import AdvertiserPlan, CouponList, SubscriptionPlans
from .cache import TTLCache
from .client import PromorangClient

logger = logging.getLogger(__name__)

PLANS_KEY = 'plans'
COUPONS_KEY = 'coupons'

COUPON_TARGET_TYPES = ('drop', 'leaderboard')

# Failures a read can recover from by returning a default.
RECOVERABLE_ERRORS = (PromorangError, requests.RequestException)


def normalise_plan_payload(payload: Any) -> SubscriptionPlans:
    """Shape a plans payload, defaulting anything the server left out."""
    if not isinstance(payload, dict):
        payload = {}
    plans = payload.get('plans')
    tier = payload.get('current_tier') or payload.get('currentTier')
    return SubscriptionPlans(
        plans=[AdvertiserPlan.from_dict(p) for p in plans if isinstance(p, dict)]
        if isinstance(plans, list) else [],
        current_tier=tier if isinstance(tier, str) and tier.strip() else DEFAULT_TIER,
    )


def normalise_coupon_payload(payload: Any) -> CouponList:
    """Shape a coupon list payload; every coupon gets an `assignments` list."""
    if not isinstance(payload, dict):
        payload = {}
    coupons = payload.get('coupons')
    redemptions = payload.get('redemptions')

    normalised: List[Dict[str, Any]] = []
    if isinstance(coupons, list):
        for coupon in coupons:
            if not isinstance(coupon, dict):
                continue
            assignments = coupon.get('assignments')
            normalised.append({**coupon, 'assignments': assignments if isinstance(assignments, list) else []})

    return CouponList(
        coupons=normalised,
        redemptions=redemptions if isinstance(redemptions, list) else [],
    )


def _as_list(data: Any, key: str) -> List[Any]:
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    return []


class AdvertiserService:
    """Advertiser API with cached plan and coupon reads.

    Reads degrade to empty defaults on failure; mutations log and re-raise.
    Plan and coupon mutations invalidate their cache family.
    """

    def __init__(self, client: PromorangClient, cache: Optional[TTLCache] = None,
                 settings: Optional[Settings] = None):
        self.client = client
        self.cache = cache or TTLCache()
        settings = settings or client.settings
        self.plans_ttl = settings.plans_cache_ttl
        self.coupons_ttl = settings.coupons_cache_ttl

    # ==================== SUBSCRIPTION ====================

    def get_plans(self, force_refresh: bool = False) -> SubscriptionPlans:
        def load() -> SubscriptionPlans:
            result = self.client.get('/api/advertisers/subscription/plans', action='load plans')
            return normalise_plan_payload(result.data)

        try:
            plans = self.cache.get_or_load(PLANS_KEY, load, self.plans_ttl, force_refresh=force_refresh)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"get_plans failed: {e}")
            self.cache.invalidate(PLANS_KEY)
            return SubscriptionPlans()
        # Callers get their own copy; the cached value stays as loaded.
        return copy.deepcopy(plans)

    def upgrade(self, plan_id: str) -> Dict[str, Any]:
        """
        Upgrade the advertiser subscription.

        Returns:
            The server's data merged with its message (e.g. {'plan': {...}, 'message': '...'})
        """
        try:
            result = self.client.post('/api/advertisers/subscription/upgrade',
                                      action='upgrade plan', json={'planId': plan_id})
        except RECOVERABLE_ERRORS as e:
            logger.error(f"upgrade failed for plan {plan_id}: {e}")
            raise

        self.cache.invalidate(PLANS_KEY)
        data = result.data if isinstance(result.data, dict) else {}
        return {**data, 'message': result.message}

    # ==================== COUPONS ====================

    def list_coupons(self, force_refresh: bool = False) -> CouponList:
        def load() -> CouponList:
            result = self.client.get('/api/advertisers/coupons', action='load coupons')
            return normalise_coupon_payload(result.data)

        try:
            coupons = self.cache.get_or_load(COUPONS_KEY, load, self.coupons_ttl, force_refresh=force_refresh)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"list_coupons failed: {e}")
            self.cache.invalidate(COUPONS_KEY)
            return CouponList()
        return copy.deepcopy(coupons)

    def get_coupon(self, coupon_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.client.get(f'/api/advertisers/coupons/{coupon_id}', action='load coupon')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"get_coupon failed for {coupon_id}: {e}")
            return None

        data = result.data if isinstance(result.data, dict) else {}
        coupon = data.get('coupon')
        if not isinstance(coupon, dict):
            return None
        return {
            **coupon,
            'assignments': _as_list(coupon, 'assignments'),
            'redemptions': _as_list(coupon, 'redemptions'),
        }

    def _coupon_mutation(self, path: str, action: str, body: Dict[str, Any]) -> Any:
        try:
            result = self.client.post(path, action=action, json=body)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"Failed to {action}: {e}")
            raise
        self.cache.invalidate(COUPONS_KEY)
        return result.data if isinstance(result.data, dict) else {}

    def create_coupon(self, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        data = self._coupon_mutation('/api/advertisers/coupons', 'create coupon', payload)
        return data.get('coupon')

    def assign_coupon(self, coupon_id: str, target_type: str, target_id: str,
                      target_label: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Attach a coupon to a drop or leaderboard.

        Args:
            coupon_id: Coupon to assign
            target_type: 'drop' or 'leaderboard'
            target_id: ID of the drop or leaderboard
            target_label: Optional display label
        """
        if target_type not in COUPON_TARGET_TYPES:
            raise ValidationError('target_type', f"target_type must be one of {', '.join(COUPON_TARGET_TYPES)}")
        if not target_id:
            raise ValidationError('target_id', 'target_id is required')

        body: Dict[str, Any] = {'target_type': target_type, 'target_id': target_id}
        if target_label:
            body['target_label'] = target_label
        data = self._coupon_mutation(f'/api/advertisers/coupons/{coupon_id}/assign', 'assign coupon', body)
        return data.get('assignment')

    def redeem_coupon(self, coupon_id: str, user_id: Optional[str] = None,
                      user_name: Optional[str] = None) -> Dict[str, Any]:
        """Redeem a coupon; returns {'redemption': ..., 'coupon': ...}."""
        body = {k: v for k, v in (('user_id', user_id), ('user_name', user_name)) if v}
        return self._coupon_mutation(f'/api/advertisers/coupons/{coupon_id}/redeem', 'redeem coupon', body)

    # ==================== CAMPAIGNS ====================

    def list_campaigns(self) -> List[Dict[str, Any]]:
        try:
            result = self.client.get('/api/advertisers/campaigns', action='load campaigns')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"list_campaigns failed: {e}")
            return []
        return _as_list(result.data, 'campaigns')

    def get_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.client.get(f'/api/advertisers/campaigns/{campaign_id}', action='load campaign')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"get_campaign failed for {campaign_id}: {e}")
            return None

        data = result.data
        if not isinstance(data, dict) or not isinstance(data.get('campaign'), dict):
            return None
        return {
            'campaign': data['campaign'],
            'metrics': _as_list(data, 'metrics'),
            'content': _as_list(data, 'content'),
            'coupons': _as_list(data, 'coupons'),
        }

    def get_campaign_drops(self, campaign_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.client.get(f'/api/advertisers/campaigns/{campaign_id}/drops', action='load drops')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"get_campaign_drops failed for {campaign_id}: {e}")
            return []
        return _as_list(result.data, 'drops')

    def update_campaign(self, campaign_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            result = self.client.patch(f'/api/advertisers/campaigns/{campaign_id}',
                                       action='update campaign', json=updates)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"update_campaign failed for {campaign_id}: {e}")
            raise
        return result.data.get('campaign') if isinstance(result.data, dict) else None

    def delete_campaign(self, campaign_id: str) -> bool:
        try:
            self.client.delete(f'/api/advertisers/campaigns/{campaign_id}', action='delete campaign')
        except RECOVERABLE_ERRORS as e:
            logger.error(f"delete_campaign failed for {campaign_id}: {e}")
            raise
        return True

    def add_campaign_funds(self, campaign_id: str, amount: float, provider: str = 'mock') -> Dict[str, Any]:
        if amount is None or amount <= 0:
            raise ValidationError('amount', 'Amount must be greater than 0')
        try:
            result = self.client.post(f'/api/advertisers/campaigns/{campaign_id}/funds',
                                      action='add funds', json={'amount': amount, 'provider': provider})
        except RECOVERABLE_ERRORS as e:
            logger.error(f"add_campaign_funds failed for {campaign_id}: {e}")
            raise
        return result.data if isinstance(result.data, dict) else {}

    def add_campaign_content(self, campaign_id: str, title: str, platform: str,
                             description: Optional[str] = None, media_url: Optional[str] = None,
                             status: Optional[str] = None) -> Dict[str, Any]:
        if not title:
            raise ValidationError('title', 'Title is required')
        if not platform:
            raise ValidationError('platform', 'Platform is required')

        body: Dict[str, Any] = {'title': title, 'platform': platform}
        for key, value in (('description', description), ('media_url', media_url), ('status', status)):
            if value:
                body[key] = value
        try:
            result = self.client.post(f'/api/advertisers/campaigns/{campaign_id}/content',
                                      action='add content', json=body)
        except RECOVERABLE_ERRORS as e:
            logger.error(f"add_campaign_content failed for {campaign_id}: {e}")
            raise
        data = result.data if isinstance(result.data, dict) else {}
        return data.get('content') or {}
