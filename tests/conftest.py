from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from promorang.api.client import PromorangClient
from promorang.config import Settings


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, raises: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raises = raises
        self.url = 'https://test.invalid'

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._raises:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Replays queued responses per (method, path) and records every call."""

    def __init__(self, base_url: str = 'https://test.invalid'):
        self.base_url = base_url
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self._routes: Dict[Tuple[str, str], List[Any]] = {}
        self.posted: List[Dict[str, Any]] = []

    def route(self, method: str, path: str, *responses: Any) -> None:
        self._routes.setdefault((method, path), []).extend(responses)

    def request(self, method, url, json=None, params=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append((method, path, json))
        queue = self._routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, json=None, timeout=None):
        self.posted.append({'url': url, 'json': json})
        return FakeResponse(200, {'status': 'success', 'data': {}})

    def count(self, method: str, path: str) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)


def ok(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> FakeResponse:
    payload: Dict[str, Any] = {'status': 'success', 'data': data}
    if message:
        payload['message'] = message
    return FakeResponse(status_code, payload)


def fail(message: Optional[str] = None, status_code: int = 200) -> FakeResponse:
    payload: Dict[str, Any] = {'status': 'error'}
    if message:
        payload['message'] = message
    return FakeResponse(status_code, payload)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> PromorangClient:
    settings = Settings(api_base_url=session.base_url, max_retries=3)
    return PromorangClient(settings, session=session, sleep=lambda _: None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
