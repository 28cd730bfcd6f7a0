"""Client-side pricing, rewards and REST wrappers for the Promorang marketplace."""
from .errors import ApiError, PromorangError, ValidationError
from .fee_calculator import FeeCalculator, ListingQuote
from .models import UserTier

__all__ = [
    'ApiError',
    'PromorangError',
    'ValidationError',
    'FeeCalculator',
    'ListingQuote',
    'UserTier',
]

__version__ = '0.1.0'
