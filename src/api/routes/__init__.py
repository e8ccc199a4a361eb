"""Route handlers for detection, redaction and health probes."""

from .health import router as health_router
from .redact import router as redact_router

__all__ = ["health_router", "redact_router"]
