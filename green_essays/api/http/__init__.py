from green_essays.api.http.health import router as health_router
from green_essays.api.http.essays import router as essays_router

__all__ = [
    "health_router",
    "essays_router"
]
