"""Promorang REST API client wrapper."""
import time
import logging
from typing import Any, Callable, Dict, Optional

import requests

from ..config import Settings
from ..errors import ApiError
from .envelope import Ok, parse_envelope

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = {'GET'}
RETRYABLE_READ_ERRORS = (requests.exceptions.Timeout, requests.exceptions.ConnectionError)
# ConnectTimeout is a ConnectionError; ReadTimeout is not.
RETRYABLE_WRITE_ERRORS = (requests.exceptions.ConnectionError,)


class PromorangClient:
    """Wrapper for the Promorang REST API with envelope parsing and retries."""

    USER_AGENT = "PromorangClient/1.0"
    TELEMETRY_PATH = "/api/telemetry/events"

    def __init__(self, settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the API client.

        Args:
            settings: Connection settings (defaults to Settings())
            session: HTTP session to use (a new requests.Session by default)
            sleep: Backoff sleep function, injectable for tests
        """
        self.settings = settings or Settings()
        self.base_url = self.settings.api_base_url.rstrip('/')
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Accept': 'application/json',
        })
        if self.settings.auth_token:
            self.session.headers['Authorization'] = f"Bearer {self.settings.auth_token}"
        self._sleep = sleep

    @staticmethod
    def _parse_json(response: requests.Response) -> Any:
        """Decode a response body, treating undecodable bodies as absent."""
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Failed to parse JSON response from {response.url}: {e}")
            return None

    def request(self, method: str, path: str, *, action: str,
                json: Optional[Dict[str, Any]] = None,
                params: Optional[Dict[str, Any]] = None,
                require_envelope: bool = True) -> Ok:
        """
        Send a request and validate the `{status, data, message}` envelope.

        Args:
            method: HTTP method
            path: Path beneath the API base URL (e.g., '/api/advertisers/coupons')
            action: Short description used in fallback error messages,
                    e.g. 'load plans' -> "Failed to load plans (500)"
            json: JSON body
            params: Query parameters
            require_envelope: When False, any 2xx body is accepted as-is

        Returns:
            Ok with the envelope's data and message

        Raises:
            ApiError: On non-2xx responses or a non-success envelope
            requests.RequestException: If the request failed after all retries
        """
        url = self.base_url + path
        max_retries = max(1, self.settings.max_retries)
        # A read timeout on a write may mean the server already applied it.
        retryable = RETRYABLE_READ_ERRORS if method in IDEMPOTENT_METHODS else RETRYABLE_WRITE_ERRORS

        for attempt in range(max_retries):
            try:
                response = self.session.request(
                    method, url, json=json, params=params, timeout=self.settings.request_timeout
                )
                break
            except retryable as e:
                if attempt < max_retries - 1:
                    # Exponential backoff: 2s, 4s, 8s
                    wait_time = 2 ** (attempt + 1)
                    logger.warning(f"Request timeout/connection error on {method} {path} "
                                   f"(attempt {attempt + 1}/{max_retries}). Retrying in {wait_time}s...")
                    self._sleep(wait_time)
                else:
                    logger.error(f"Request failed after {max_retries} attempts: {e}")
                    raise

        payload = self._parse_json(response)

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get('message') or payload.get('error')
            raise ApiError(message or f"Failed to {action} ({response.status_code})",
                           status_code=response.status_code)

        if not require_envelope:
            return Ok(payload)

        result = parse_envelope(payload, f"Failed to {action}")
        if not isinstance(result, Ok):
            raise ApiError(result.message, status_code=response.status_code, code=result.code)
        return result

    def get(self, path: str, *, action: str, params: Optional[Dict[str, Any]] = None) -> Ok:
        return self.request('GET', path, action=action, params=params)

    def post(self, path: str, *, action: str, json: Optional[Dict[str, Any]] = None) -> Ok:
        return self.request('POST', path, action=action, json=json or {})

    def patch(self, path: str, *, action: str, json: Optional[Dict[str, Any]] = None) -> Ok:
        return self.request('PATCH', path, action=action, json=json or {})

    def delete(self, path: str, *, action: str) -> Ok:
        return self.request('DELETE', path, action=action, require_envelope=False)

    def log_event(self, name: str, properties: Optional[Dict[str, Any]] = None,
                  user_id: Optional[str] = None) -> None:
        """Fire-and-forget telemetry. Never raises."""
        body: Dict[str, Any] = {'event': name, 'properties': properties or {}}
        if user_id:
            body['user_id'] = user_id
        try:
            self.session.post(self.base_url + self.TELEMETRY_PATH, json=body,
                              timeout=self.settings.request_timeout)
        except Exception as e:
            logger.debug(f"Telemetry event {name} dropped: {e}")
