"""On-demand expiry alert routes"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
import logging

from api.dependencies import get_notifier
from app.exceptions import AllChannelsFailedError, FreshAlertError
from domain.enums import DispatchStatus
from domain.schemas.alert_schemas import TestAlertRequest
from services.expiry_notifier import ExpiryNotifier

router = APIRouter(prefix="/notify", tags=["Notifications"])
logger = logging.getLogger("freshalert.api.notify")


def _failure(exc: FreshAlertError) -> PlainTextResponse:
    if isinstance(exc, AllChannelsFailedError):
        return PlainTextResponse(
            f"Failed to send alert: {exc.message}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return PlainTextResponse(exc.message, status_code=exc.http_status)


@router.get("/user/{user_id}", response_class=PlainTextResponse)
async def notify_user(user_id: str, notifier: ExpiryNotifier = Depends(get_notifier)):
    """
    Send the expiring-soon alert (items due within 2 days) to one user now.

    Responds in plain text: nothing to notify, the channel used, a skip
    because messaging is not configured, or the failure reason.
    """
    try:
        result = await notifier.notify_user(user_id)
    except FreshAlertError as exc:
        logger.warning("On-demand notify for %s failed: %s", user_id, exc)
        return _failure(exc)
    return PlainTextResponse(result.as_text())


@router.post("/test", response_class=PlainTextResponse)
async def send_test_alert(
    payload: TestAlertRequest, notifier: ExpiryNotifier = Depends(get_notifier)
):
    """Send a sample Milk/Yogurt alert through the full channel chain."""
    try:
        result = await notifier.send_test_alert(payload.phone, payload.name)
    except FreshAlertError as exc:
        logger.warning("Test alert to %s failed: %s", payload.phone, exc)
        return _failure(exc)
    if result.status == DispatchStatus.SKIPPED:
        return PlainTextResponse("Alert skipped: messaging client not configured.")
    return PlainTextResponse(
        f"Test alert sent via {result.channel.value}. Check your phone and logs."
    )
