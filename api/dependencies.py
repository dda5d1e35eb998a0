"""
API dependencies for dependency injection
"""

from fastapi import Request

from services.alert_scheduler import AlertScheduler
from services.expiry_notifier import ExpiryNotifier


def get_notifier(request: Request) -> ExpiryNotifier:
    """
    The notifier built during application startup.

    Usage:
        @router.get("/example")
        async def example(notifier: ExpiryNotifier = Depends(get_notifier)):
            ...
    """
    return request.app.state.notifier


def get_scheduler(request: Request) -> AlertScheduler:
    """The alert scheduler built during application startup."""
    return request.app.state.scheduler
