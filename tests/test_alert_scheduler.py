"""
Tests for the recurring job scheduler: lifecycle, registration and isolation
of job failures.
"""

import asyncio
import logging
from datetime import time
from zoneinfo import ZoneInfo

import pytest
from unittest.mock import AsyncMock, Mock

from app.exceptions import StoreError
from domain.schemas.alert_schemas import JobReport
from services.alert_scheduler import AlertScheduler
from services.expiry_notifier import SOON_WINDOW_JOB, TODAY_EXACT_JOB
from test_fixtures import make_settings


def _mock_notifier():
    notifier = Mock()
    notifier.run_soon_window_job = AsyncMock(return_value=JobReport(job=SOON_WINDOW_JOB))
    notifier.run_today_exact_job = AsyncMock(return_value=JobReport(job=TODAY_EXACT_JOB))
    return notifier


@pytest.mark.anyio
async def test_start_registers_both_jobs_and_stop_clears_them():
    scheduler = AlertScheduler(_mock_notifier(), make_settings())

    scheduler.start()
    try:
        assert scheduler.running is True
        runs = scheduler.next_runs()
        assert set(runs) == {SOON_WINDOW_JOB, TODAY_EXACT_JOB}
        assert all(value is not None for value in runs.values())
    finally:
        await scheduler.stop()

    assert scheduler.running is False
    assert scheduler.next_runs() == {SOON_WINDOW_JOB: None, TODAY_EXACT_JOB: None}


@pytest.mark.anyio
async def test_start_twice_is_a_no_op():
    scheduler = AlertScheduler(_mock_notifier(), make_settings())
    scheduler.start()
    try:
        first_task = scheduler._poll_task
        scheduler.start()
        assert scheduler._poll_task is first_task
        assert len(scheduler._scheduler.get_jobs()) == 2
    finally:
        await scheduler.stop()


@pytest.mark.anyio
async def test_stop_without_start():
    scheduler = AlertScheduler(_mock_notifier(), make_settings())
    await scheduler.stop()
    assert scheduler.running is False


@pytest.mark.anyio
async def test_triggered_jobs_run_notifier():
    notifier = _mock_notifier()
    scheduler = AlertScheduler(notifier, make_settings())
    scheduler.start()
    try:
        scheduler._scheduler.run_all()
        await asyncio.gather(*list(scheduler._inflight))
    finally:
        await scheduler.stop()

    notifier.run_soon_window_job.assert_awaited_once()
    notifier.run_today_exact_job.assert_awaited_once()


@pytest.mark.anyio
async def test_failing_job_is_logged_not_raised():
    notifier = _mock_notifier()
    notifier.run_soon_window_job.side_effect = StoreError("DB error (items): db down")
    scheduler = AlertScheduler(notifier, make_settings())

    assert await scheduler.run_soon_window_job() is None
    report = await scheduler.run_today_exact_job()
    assert report.job == TODAY_EXACT_JOB



def _registered(scheduler, tag):
    jobs = scheduler._scheduler.get_jobs(tag)
    assert len(jobs) == 1
    return jobs[0]


@pytest.mark.anyio
async def test_configured_times_and_timezones_reach_the_jobs():
    settings = make_settings(
        soon_job_time="07:30",
        soon_job_timezone="Europe/London",
        today_job_time="08:15",
        today_job_timezone="Asia/Kolkata",
    )
    scheduler = AlertScheduler(_mock_notifier(), settings)
    scheduler.start()
    try:
        soon = _registered(scheduler, SOON_WINDOW_JOB)
        today = _registered(scheduler, TODAY_EXACT_JOB)
    finally:
        await scheduler.stop()

    assert soon.at_time == time(7, 30)
    assert str(soon.at_time_zone) == "Europe/London"
    assert today.at_time == time(8, 15)
    assert str(today.at_time_zone) == "Asia/Kolkata"

    # next_run is naive host-local time
    soon_local = soon.next_run.astimezone(ZoneInfo("Europe/London"))
    today_ist = today.next_run.astimezone(ZoneInfo("Asia/Kolkata"))
    assert (soon_local.hour, soon_local.minute) == (7, 30)
    assert (today_ist.hour, today_ist.minute) == (8, 15)


@pytest.mark.anyio
async def test_default_today_job_fires_at_1550_ist_regardless_of_host_zone():
    scheduler = AlertScheduler(_mock_notifier(), make_settings())
    scheduler.start()
    try:
        soon = _registered(scheduler, SOON_WINDOW_JOB)
        today = _registered(scheduler, TODAY_EXACT_JOB)
    finally:
        await scheduler.stop()

    today_ist = today.next_run.astimezone(ZoneInfo("Asia/Kolkata"))
    assert (today_ist.hour, today_ist.minute) == (15, 50)
    assert str(today.at_time_zone) == "Asia/Kolkata"
    # soon-window job follows the host clock unless a timezone is configured
    assert soon.at_time == time(15, 51)
    assert soon.at_time_zone is None
    assert (soon.next_run.hour, soon.next_run.minute) == (15, 51)


@pytest.mark.anyio
async def test_stop_reports_in_flight_runs_without_cancelling(caplog):
    release = asyncio.Event()
    notifier = _mock_notifier()

    async def slow_job():
        await release.wait()
        return JobReport(job=SOON_WINDOW_JOB)

    notifier.run_soon_window_job = AsyncMock(side_effect=slow_job)
    scheduler = AlertScheduler(notifier, make_settings())
    scheduler.start()
    scheduler._trigger(SOON_WINDOW_JOB)
    await asyncio.sleep(0)
    (running,) = list(scheduler._inflight)

    with caplog.at_level(logging.WARNING, logger="freshalert.scheduler"):
        await scheduler.stop()

    assert "1 job run(s) still in flight" in caplog.text
    assert not running.cancelled()

    release.set()
    report = await running
    assert report.job == SOON_WINDOW_JOB
