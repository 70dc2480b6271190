"""
app/api/routers package marker.
"""

from app.api.routers.date_range_router import router as date_range_router
from app.api.routers.summary_router import router as summary_router

__all__ = [
    "date_range_router",
    "summary_router",
]
