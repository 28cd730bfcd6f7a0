import pytest
import requests

from promorang.api.marketplace import MarketplaceService
from promorang.errors import ApiError, ValidationError
from promorang.models import ListingStatus, OfferStatus

from conftest import fail, ok


@pytest.fixture
def market(client):
    return MarketplaceService(client)


def test_buy_shares_posts_content_and_count(market, session):
    session.route('POST', '/api/content/buy-shares', ok({'shares_purchased': 7}))
    assert market.buy_shares('c1', 7) == {'shares_purchased': 7}
    assert session.calls == [('POST', '/api/content/buy-shares', {'content_id': 'c1', 'shares_count': 7})]


def test_buy_shares_is_sent_once_when_reply_times_out(market, session):
    session.route('POST', '/api/content/buy-shares',
                  requests.exceptions.ReadTimeout("no reply"), ok({'shares_purchased': 7}))
    with pytest.raises(requests.exceptions.ReadTimeout):
        market.buy_shares('c1', 7)
    assert session.count('POST', '/api/content/buy-shares') == 1


def test_buy_shares_rejection_carries_server_message(market, session):
    session.route('POST', '/api/content/buy-shares', fail('Not enough shares available'))
    with pytest.raises(ApiError, match="Not enough shares available"):
        market.buy_shares('c1', 3)


def test_create_share_listing_body(market, session):
    session.route('POST', '/api/marketplace/share-listings', ok({'listing': {'id': 'l1'}}))
    listing = market.create_share_listing('c1', 10, 2.5, content_title='My clip', content_thumbnail='t.png')
    assert listing == {'id': 'l1'}
    assert session.calls[0][2] == {
        'content_id': 'c1',
        'content_title': 'My clip',
        'content_thumbnail': 't.png',
        'quantity': 10,
        'ask_price': 2.5,
    }


@pytest.mark.parametrize('quantity,price,field', [(0, 2.5, 'quantity'), (3, 0, 'ask_price'), (-1, -1, 'quantity')])
def test_create_share_listing_validates_before_request(market, session, quantity, price, field):
    with pytest.raises(ValidationError) as exc:
        market.create_share_listing('c1', quantity, price)
    assert exc.value.field == field
    assert session.calls == []


def test_create_share_offer_omits_missing_seller(market, session):
    session.route('POST', '/api/marketplace/share-offers', ok({'offer': {'id': 'o1'}}))
    assert market.create_share_offer('c1', 10, 2.25, message='Fair price?') == {'id': 'o1'}
    assert session.calls[0][2] == {'content_id': 'c1', 'quantity': 10, 'bid_price': 2.25, 'message': 'Fair price?'}

    market.create_share_offer('c1', 1, 2.0, seller_id='s9')
    assert session.calls[1][2]['seller_id'] == 's9'


def test_create_share_offer_validation(market, session):
    with pytest.raises(ValidationError) as exc:
        market.create_share_offer('c1', 5, 0)
    assert exc.value.field == 'bid_price'
    assert session.calls == []


def test_accept_share_offer(market, session):
    session.route('POST', '/api/marketplace/share-offers/o1/accept', ok({'offer': {'id': 'o1', 'status': 'accepted'}}))
    assert market.accept_share_offer('o1') == {'offer': {'id': 'o1', 'status': 'accepted'}}


def test_fetch_listings_and_offers(market, session):
    session.route('GET', '/api/marketplace/share-listings', ok({'listings': [
        {'id': 'l1', 'content_id': 'c1', 'quantity': 5, 'ask_price': 3.0, 'status': 'filled'},
        'junk',
    ]}))
    session.route('GET', '/api/marketplace/share-offers', ok([
        {'id': 'o1', 'content_id': 'c1', 'quantity': 2, 'bid_price': 1.5, 'status': 'declined'},
    ]))

    listings = market.fetch_share_listings()
    assert [(l.id, l.status) for l in listings] == [('l1', ListingStatus.FILLED)]

    offers = market.fetch_share_offers()
    assert [(o.id, o.status) for o in offers] == [('o1', OfferStatus.DECLINED)]


def test_fetch_holdings_degrades_to_empty(market, session):
    session.route('GET', '/api/portfolio/holdings', fail(status_code=500))
    assert market.fetch_holdings() == []


def test_fetch_holdings_parses_models(market, session):
    session.route('GET', '/api/portfolio/holdings', ok({'holdings': [
        {'content_id': 'c1', 'owned_shares': 40, 'available_to_sell': 40, 'current_price': 2.5},
    ]}))
    [holding] = market.fetch_holdings()
    assert (holding.owned_shares, holding.available_to_sell, holding.current_price) == (40, 40, 2.5)


def test_tip_creator(market, session):
    session.route('POST', '/api/content/tip', ok({'gems_balance': 90}))
    assert market.tip_creator('c1', 10) == {'gems_balance': 90}
    assert session.calls[0][2] == {'content_id': 'c1', 'tip_amount': 10}

    with pytest.raises(ValidationError):
        market.tip_creator('c1', 0)


def test_convert_currency(market, session):
    session.route('POST', '/api/users/convert', ok({'keys_balance': 3}))
    assert market.convert_currency('gems', 2) == {'keys_balance': 3}
    assert session.calls[0][2] == {'from_currency': 'gems', 'to_currency': 'keys', 'amount': 2}

    with pytest.raises(ValidationError):
        market.convert_currency('gold', 1)
    with pytest.raises(ValidationError):
        market.convert_currency('points', 0)
    assert len(session.calls) == 1
