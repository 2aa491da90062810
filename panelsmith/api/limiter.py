"""Rate limiter shared by the app and the generation routers."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .settings import get_settings

limiter = Limiter(key_func=get_remote_address)


def generation_rate_limit() -> str:
    """Per-client limit for endpoints that start capability calls."""
    return get_settings().generation_rate_limit
