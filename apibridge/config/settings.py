"""
Settings loading for apibridge.

Reads the environment once and caches the result.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from apibridge.config.schemas import BridgeSettings

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> BridgeSettings:
    """
    Get bridge settings from environment.

    Uses lru_cache for singleton pattern. Call `get_settings.cache_clear()`
    after changing the environment in tests.
    """
    settings = BridgeSettings(
        base_url=os.getenv("OPENAPI_BASE_URL") or None,
        log_http=bool(os.getenv("MCP_LOG_HTTP") or os.getenv("DEBUG")),
    )
    logger.debug(
        f"[settings] Loaded settings: base_url={settings.base_url!r} "
        f"log_http={settings.log_http}"
    )
    return settings
