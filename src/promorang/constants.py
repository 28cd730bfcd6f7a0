"""Product policy constants shared by the pricing and reward helpers.

These values are set by the product, not by deployment, so they are not read
from the environment. Change them here and nowhere else.
"""

# Resale marketplace: the platform keeps 2.5% of every listing's gross proceeds.
PLATFORM_FEE_RATE = 0.025

# Make-offer modal suggests bidding on a quarter of the holding.
DEFAULT_OFFER_FRACTION = 0.25

# Tier multipliers applied to every points reward.
TIER_MULTIPLIERS = {
    'free': 1.0,
    'premium': 1.5,
    'super': 2.0,
}
DEFAULT_TIER = 'free'

# External moves pay 10x the equivalent in-app action.
EXTERNAL_MOVE_FACTOR = 10

EXTERNAL_MOVE_POINTS = {
    'like': 10,
    'comment': 30,
    'save': 50,
    'share': 100,
    'repost': 120,
}
DEFAULT_EXTERNAL_MOVE_POINTS = 10

IN_APP_ACTION_POINTS = {
    action: points // EXTERNAL_MOVE_FACTOR
    for action, points in EXTERNAL_MOVE_POINTS.items()
}

# 1 key per 20 points, external moves only.
POINTS_PER_KEY = 20

# Sharing a piece of content earns this many points before the tier multiplier.
SHARE_CONTENT_BASE_POINTS = 10

# Display-only estimate of what a creator receives per gem tipped.
GEM_TO_USD = 0.01

# Cost in source currency of a single key.
KEY_CONVERSION_RATES = {
    'points': 500,
    'gems': 2,
}

# Advertiser read caches (seconds).
PLANS_CACHE_TTL = 60
COUPONS_CACHE_TTL = 30
