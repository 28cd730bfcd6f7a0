"""REST client and service wrappers for the Promorang backend."""
from .client import PromorangClient
from .cache import CacheState, TTLCache
from .envelope import Err, Ok, parse_envelope, unwrap
from .advertiser import AdvertiserService
from .marketplace import MarketplaceService

__all__ = [
    'PromorangClient',
    'CacheState',
    'TTLCache',
    'Ok',
    'Err',
    'parse_envelope',
    'unwrap',
    'AdvertiserService',
    'MarketplaceService',
]
