"""Fee Calculator - resale listing payouts and offer totals."""
from dataclasses import dataclass

from .constants import PLATFORM_FEE_RATE
from .errors import ValidationError


@dataclass(frozen=True)
class ListingQuote:
    gross: float
    fee: float
    net: float


class FeeCalculator:
    """
    Calculates platform fees and seller payouts for share listings.

    Promorang fee structure:
    - Resale listings: 2.5% of gross proceeds, deducted from the seller payout
    - Buy-side purchases and offers: no platform fee on the client side
    """

    def __init__(self, platform_fee: float = PLATFORM_FEE_RATE):
        """
        Initialize fee calculator.

        Args:
            platform_fee: Platform fee as decimal (0.025 = 2.5%)
        """
        self.platform_fee = platform_fee

    def calculate_fee(self, gross: float) -> float:
        """
        Calculate the platform fee on gross proceeds.

        Args:
            gross: Total value of the listing (quantity * ask price)

        Returns:
            Fee amount in USD
        """
        return gross * self.platform_fee

    def quote(self, quantity: float, ask_price: float) -> ListingQuote:
        """
        Quote gross proceeds, fee and net payout for a resale listing.

        Values are not rounded; use format_quote() for display.

        Args:
            quantity: Number of shares to list
            ask_price: Asking price per share

        Returns:
            ListingQuote with gross, fee and net
        """
        gross = quantity * ask_price
        fee = self.calculate_fee(gross)
        return ListingQuote(gross=gross, fee=fee, net=gross - fee)

    @staticmethod
    def validate_listing(quantity: float, ask_price: float) -> None:
        """
        Reject non-positive quantity or price before anything is submitted.

        Raises:
            ValidationError: naming the offending field
        """
        if quantity is None or quantity <= 0:
            raise ValidationError('quantity', 'Quantity must be greater than 0')
        if ask_price is None or ask_price <= 0:
            raise ValidationError('ask_price', 'Price must be greater than 0')

    @staticmethod
    def offer_total(quantity: float, bid_price: float) -> float:
        """Total a buyer commits when making an offer."""
        return quantity * bid_price

    def get_fee_summary(self, quote: ListingQuote) -> dict:
        return {
            'gross': quote.gross,
            'fee': quote.fee,
            'net': quote.net,
            'fee_percent': self.platform_fee * 100,
        }


def format_quote(quote: ListingQuote) -> str:
    """
    Format a listing quote for display.

    Args:
        quote: ListingQuote from FeeCalculator.quote()

    Returns:
        Formatted string
    """
    return (
        f"Gross: ${quote.gross:.2f} | "
        f"Fee: ${quote.fee:.2f} | "
        f"Net: ${quote.net:.2f}"
    )
