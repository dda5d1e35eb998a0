"""
Expiry Notifier - the compose + dispatch pipeline behind every alert.

Used by the two scheduled jobs and by the on-demand route. Store reads and
outbound sends are awaited one after another; within a job, users are
processed strictly in sequence so one user's whole fallback chain resolves
before the next user's starts.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

import anyio
from sqlalchemy.orm import Session

from app.exceptions import AllChannelsFailedError, NotFoundError
from domain.enums import DispatchStatus, NotifyOutcome
from domain.schemas.alert_schemas import (
    AlertPayload,
    DispatchResult,
    ExpiryGroup,
    JobReport,
    NotifyResult,
)
from services.alert_composer import (
    build_payload,
    build_template_vars,
    compose_alert_text,
    sample_items,
)
from services.channel_dispatcher import ChannelDispatcher
from services.expiry_query_service import ExpiryQueryService
from services.validators import validate_phone, validate_user_id

logger = logging.getLogger("freshalert.notifier")

T = TypeVar("T")

SOON_WINDOW_JOB = "soon_window"
TODAY_EXACT_JOB = "today_exact"


class ExpiryNotifier:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        dispatcher: ChannelDispatcher,
        clock: Callable[[], datetime],
    ):
        """
        Args:
            session_factory: opens a session on the shared engine
            dispatcher: channel fallback chain
            clock: returns the current, timezone-aware instant in the alert timezone
        """
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.clock = clock

    async def _query(self, fn: Callable[[ExpiryQueryService], T]) -> T:
        """Run a read-only query in a worker thread with its own session."""

        def run() -> T:
            with self.session_factory() as db:
                return fn(ExpiryQueryService(db))

        return await anyio.to_thread.run_sync(run)

    async def _deliver(self, group: ExpiryGroup, report: JobReport, today_exact: bool) -> None:
        """Compose at send time and dispatch; failures are counted, never raised."""
        try:
            payload = build_payload(group, self.clock(), today_exact=today_exact)
            result = await self.dispatcher.dispatch(group.phone, payload)
        except AllChannelsFailedError:
            report.failed += 1
            return
        except Exception:
            logger.exception("Error for user %s in %s job", group.user_id, report.job)
            report.failed += 1
            return

        if result.status == DispatchStatus.SENT:
            report.sent += 1
        else:
            report.skipped += 1

    async def run_soon_window_job(self) -> JobReport:
        """Alert every user with items expiring within the next two days."""
        logger.info("Checking for items expiring soon (<=2 days) and sending alerts...")
        today = self.clock().date()
        groups: List[ExpiryGroup] = await self._query(lambda q: q.soon_window_groups(today))

        report = JobReport(job=SOON_WINDOW_JOB, users_considered=len(groups))
        if not groups:
            logger.info("No items expiring within the next 2 days.")
            return report

        for group in groups:
            logger.info(
                "Sending 'expiring soon' alert for user %s (%s) for %d item(s).",
                group.user_id,
                group.phone,
                len(group.items),
            )
            await self._deliver(group, report, today_exact=False)

        logger.info("Soon-window job finished: %s", report.model_dump())
        return report

    async def run_today_exact_job(self) -> JobReport:
        """Tell every user what expires today, or that nothing does."""
        logger.info("Running daily 'expiring today' job.")
        today = self.clock().date()
        groups: List[ExpiryGroup] = await self._query(lambda q: q.today_exact_groups(today))

        report = JobReport(job=TODAY_EXACT_JOB, users_considered=len(groups))
        for group in groups:
            if group.items:
                logger.info(
                    "Sending today-expiring alert to %s for %d item(s).",
                    group.phone,
                    len(group.items),
                )
            else:
                logger.info("Sending 'none expiring' to %s", group.phone)
            await self._deliver(group, report, today_exact=True)

        logger.info("Today-exact job finished: %s", report.model_dump())
        return report

    async def notify_user(self, user_id) -> NotifyResult:
        """
        On-demand soon-window alert for one user.

        Raises:
            ServiceValidationError: user_id is not a positive integer, or the
                user's phone is malformed
            NotFoundError: no such user
            StoreError: a query failed
            AllChannelsFailedError: every channel failed
        """
        uid = validate_user_id(user_id)

        def lookup(q: ExpiryQueryService) -> Optional[tuple]:
            user = q.get_user(uid)
            return (user.id, user.name, user.phone) if user else None

        found = await self._query(lookup)
        if found is None:
            raise NotFoundError("User not found", details={"user_id": uid})
        _, _, phone = found
        validate_phone(phone)

        today = self.clock().date()
        groups = await self._query(lambda q: q.soon_window_groups(today, user_id=uid))
        if not groups or not groups[0].items:
            logger.info("No expiring-soon items for user %s", uid)
            return NotifyResult(outcome=NotifyOutcome.NO_ITEMS, user_id=uid)

        group = groups[0]
        payload = build_payload(group, self.clock())
        result = await self.dispatcher.dispatch(group.phone, payload)
        outcome = (
            NotifyOutcome.SENT if result.status == DispatchStatus.SENT else NotifyOutcome.SKIPPED
        )
        return NotifyResult(
            outcome=outcome, user_id=uid, item_count=len(group.items), dispatch=result
        )

    async def send_test_alert(self, phone: str, user_name: str = "") -> DispatchResult:
        """Dispatch a sample two-item alert to an arbitrary phone number."""
        validate_phone(phone)
        now = self.clock()
        payload = AlertPayload(
            body=compose_alert_text(sample_items(now.date()), user_name, reference_time=now),
            template_vars=build_template_vars(now),
        )
        return await self.dispatcher.dispatch(phone, payload)
