"""Health check routes"""

from fastapi import APIRouter, Depends

from api.dependencies import get_notifier, get_scheduler
from app.config import settings
from services.alert_scheduler import AlertScheduler
from services.expiry_notifier import ExpiryNotifier

router = APIRouter(tags=["Health"])


@router.get("/health-check")
def health_check(
    notifier: ExpiryNotifier = Depends(get_notifier),
    scheduler: AlertScheduler = Depends(get_scheduler),
):
    """Basic health check with scheduler and messaging state"""
    return {
        "status": "ok",
        "service": settings.app_name,
        "scheduler_running": scheduler.running,
        "next_runs": scheduler.next_runs(),
        "messaging_configured": notifier.dispatcher.configured,
    }
