from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .constants import COUPONS_CACHE_TTL, PLANS_CACHE_TTL

DEFAULT_API_URL = "https://promorang-api.vercel.app"


class ConfigError(ValueError):
    pass


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def require(config: Mapping[str, Any], key: str) -> Any:
    if key not in config or _is_blank(config.get(key)):
        raise ConfigError(
            f"Missing required config key: {key}. "
            "Set it in the environment or in a .env file."
        )
    return config[key]


def optional(config: Mapping[str, Any], key: str) -> Optional[Any]:
    value = config.get(key)
    return None if _is_blank(value) else value


def require_int(config: Mapping[str, Any], key: str) -> int:
    value = require(config, key)
    try:
        return int(value)
    except Exception as e:
        raise ConfigError(f"Config key {key} must be an int, got {value!r}") from e


def require_float(config: Mapping[str, Any], key: str) -> float:
    value = require(config, key)
    try:
        return float(value)
    except Exception as e:
        raise ConfigError(f"Config key {key} must be a float, got {value!r}") from e


def _with_default(config: Mapping[str, Any], key: str, default: Any) -> Mapping[str, Any]:
    if optional(config, key) is None:
        return {key: default}
    return config


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_URL
    auth_token: Optional[str] = None
    request_timeout: float = 30.0
    max_retries: int = 3
    plans_cache_ttl: float = float(PLANS_CACHE_TTL)
    coupons_cache_ttl: float = float(COUPONS_CACHE_TTL)


def load_settings(env: Optional[Mapping[str, Any]] = None) -> Settings:
    """Build client settings from the environment.

    When ``env`` is omitted, a ``.env`` file in the working directory is
    loaded first and ``os.environ`` is used.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    max_retries = require_int(_with_default(env, 'PROMORANG_MAX_RETRIES', 3), 'PROMORANG_MAX_RETRIES')
    if max_retries < 1:
        raise ConfigError(f"Config key PROMORANG_MAX_RETRIES must be >= 1, got {max_retries}")

    return Settings(
        api_base_url=str(optional(env, 'PROMORANG_API_URL') or DEFAULT_API_URL).rstrip('/'),
        auth_token=optional(env, 'PROMORANG_AUTH_TOKEN'),
        request_timeout=require_float(
            _with_default(env, 'PROMORANG_REQUEST_TIMEOUT', 30.0), 'PROMORANG_REQUEST_TIMEOUT'
        ),
        max_retries=max_retries,
        plans_cache_ttl=require_float(
            _with_default(env, 'PROMORANG_PLANS_CACHE_TTL', PLANS_CACHE_TTL), 'PROMORANG_PLANS_CACHE_TTL'
        ),
        coupons_cache_ttl=require_float(
            _with_default(env, 'PROMORANG_COUPONS_CACHE_TTL', COUPONS_CACHE_TTL), 'PROMORANG_COUPONS_CACHE_TTL'
        ),
    )
