from .onboarding import onboarding_router
from .threads    import threads_router
from .feed       import feed_router
from .admin      import admin_router

__all__ = [
    "onboarding_router", "threads_router", "feed_router", "admin_router",
]
