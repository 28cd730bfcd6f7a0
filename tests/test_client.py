"""Tests for the Promorang API client."""
import pytest
import requests
from unittest.mock import Mock, patch

from promorang.api.client import PromorangClient
from promorang.api.envelope import Err, Ok, parse_envelope, unwrap
from promorang.config import Settings
from promorang.errors import ApiError

from conftest import FakeResponse, fail, ok


class TestPromorangClient:
    """Test suite for PromorangClient."""

    def test_client_initialization(self):
        """Test client initializes with default settings."""
        client = PromorangClient()
        assert client.base_url == "https://promorang-api.vercel.app"
        assert client.session.headers['User-Agent'] == PromorangClient.USER_AGENT
        assert 'Authorization' not in client.session.headers

    def test_client_with_token(self):
        """Test auth token is sent as a bearer header."""
        client = PromorangClient(Settings(auth_token="secret"))
        assert client.session.headers['Authorization'] == "Bearer secret"

    @patch('promorang.api.client.requests.Session.request')
    def test_get_returns_envelope_data(self, mock_request):
        """Test a success envelope is unwrapped into Ok."""
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.return_value = {'status': 'success', 'data': {'plans': []}, 'message': 'hi'}
        mock_request.return_value = mock_response

        client = PromorangClient()
        result = client.get('/api/advertisers/subscription/plans', action='load plans')

        assert result == Ok({'plans': []}, 'hi')
        mock_request.assert_called_once()
        args, kwargs = mock_request.call_args
        assert args == ('GET', 'https://promorang-api.vercel.app/api/advertisers/subscription/plans')
        assert kwargs['timeout'] == 30.0

    def test_http_error_uses_server_message(self, client, session):
        session.route('POST', '/api/content/buy-shares', fail('Insufficient funds', status_code=402))
        with pytest.raises(ApiError, match="Insufficient funds") as exc:
            client.post('/api/content/buy-shares', action='buy shares', json={})
        assert exc.value.status_code == 402

    def test_http_error_falls_back_to_templated_message(self, client, session):
        session.route('GET', '/api/advertisers/coupons', FakeResponse(503, raises=True))
        with pytest.raises(ApiError, match=r"Failed to load coupons \(503\)"):
            client.get('/api/advertisers/coupons', action='load coupons')

    def test_business_rejection_is_raised_verbatim(self, client, session):
        session.route('POST', '/api/advertisers/coupons', fail('Coupon code already exists'))
        with pytest.raises(ApiError, match="Coupon code already exists"):
            client.post('/api/advertisers/coupons', action='create coupon', json={})

    def test_unparseable_success_body_is_not_a_parse_exception(self, client, session):
        session.route('GET', '/api/advertisers/coupons', FakeResponse(200, raises=True))
        # Body treated as absent, so the envelope check fails with the generic message.
        with pytest.raises(ApiError, match="^Failed to load coupons$"):
            client.get('/api/advertisers/coupons', action='load coupons')

    def test_delete_accepts_empty_body(self, client, session):
        session.route('DELETE', '/api/advertisers/campaigns/c1', FakeResponse(204, raises=True))
        assert client.delete('/api/advertisers/campaigns/c1', action='delete campaign') == Ok(None)

    def test_retries_connection_errors_with_backoff(self, session):
        sleeps = []
        client = PromorangClient(Settings(api_base_url=session.base_url, max_retries=3),
                                 session=session, sleep=sleeps.append)
        session.route('GET', '/api/portfolio/holdings',
                      requests.exceptions.ConnectionError("reset"),
                      requests.exceptions.Timeout("slow"),
                      ok({'holdings': []}))

        result = client.get('/api/portfolio/holdings', action='load holdings')

        assert result.data == {'holdings': []}
        assert sleeps == [2, 4]
        assert session.count('GET', '/api/portfolio/holdings') == 3

    def test_gives_up_after_max_retries(self, session):
        client = PromorangClient(Settings(api_base_url=session.base_url, max_retries=2),
                                 session=session, sleep=lambda _: None)
        session.route('GET', '/api/portfolio/holdings', requests.exceptions.Timeout("slow"))
        with pytest.raises(requests.exceptions.Timeout):
            client.get('/api/portfolio/holdings', action='load holdings')
        assert session.count('GET', '/api/portfolio/holdings') == 2

    def test_post_is_not_resent_after_read_timeout(self, client, session):
        """A write that timed out waiting for the reply may already have been applied."""
        session.route('POST', '/api/content/buy-shares',
                      requests.exceptions.ReadTimeout("no reply"),
                      ok({'shares_purchased': 2}))
        with pytest.raises(requests.exceptions.ReadTimeout):
            client.post('/api/content/buy-shares', action='buy shares', json={'shares_count': 2})
        assert session.count('POST', '/api/content/buy-shares') == 1

    @pytest.mark.parametrize('error', [
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.ConnectTimeout("no route"),
    ])
    def test_post_retries_when_connection_was_never_made(self, client, session, error):
        session.route('POST', '/api/content/buy-shares', error, ok({'shares_purchased': 2}))
        result = client.post('/api/content/buy-shares', action='buy shares', json={'shares_count': 2})
        assert result.data == {'shares_purchased': 2}
        assert session.count('POST', '/api/content/buy-shares') == 2

    def test_zero_max_retries_still_sends_once(self, session):
        client = PromorangClient(Settings(api_base_url=session.base_url, max_retries=0),
                                 session=session, sleep=lambda _: None)
        session.route('GET', '/api/portfolio/holdings', ok({'holdings': []}))
        assert client.get('/api/portfolio/holdings', action='load holdings').data == {'holdings': []}

        session.route('GET', '/api/advertisers/coupons', requests.exceptions.Timeout("slow"))
        with pytest.raises(requests.exceptions.Timeout):
            client.get('/api/advertisers/coupons', action='load coupons')
        assert session.count('GET', '/api/advertisers/coupons') == 1

    def test_log_event_never_raises(self, client, session):
        client.log_event('share_created', {'contentId': 'c1'}, user_id='u1')
        assert session.posted[0]['json'] == {
            'event': 'share_created',
            'properties': {'contentId': 'c1'},
            'user_id': 'u1',
        }

        session.post = Mock(side_effect=requests.exceptions.ConnectionError("down"))
        client.log_event('share_created')


def test_parse_envelope_variants():
    assert parse_envelope({'status': 'success', 'data': [1]}, 'x') == Ok([1])
    assert parse_envelope({'status': 'error', 'message': 'nope', 'code': 'E1'}, 'x') == Err('nope', 'E1')
    assert parse_envelope({'status': 'error'}, 'Failed to load plans') == Err('Failed to load plans')
    assert parse_envelope(None, 'fallback') == Err('fallback')
    assert parse_envelope(['not', 'a', 'dict'], 'fallback') == Err('fallback')
    assert parse_envelope({'data': {}}, 'fallback') == Err('fallback')


def test_unwrap():
    assert unwrap(Ok({'a': 1})) == {'a': 1}
    with pytest.raises(ApiError, match="nope"):
        unwrap(Err('nope'))
