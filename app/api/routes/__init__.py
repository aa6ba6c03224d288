"""Route package: exports every FastAPI router."""

from .analytics import router as analytics_router
from .health import router as health_router
from .observations import router as observations_router
from .trends import router as trends_router

__all__ = ["health_router", "observations_router", "trends_router", "analytics_router"]
