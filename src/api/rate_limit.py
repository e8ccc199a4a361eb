"""Rate limiting for the model-backed endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings


def _default_limits() -> list[str]:
    return [get_settings().rate_limit]


limiter = Limiter(key_func=get_remote_address, default_limits=_default_limits())
