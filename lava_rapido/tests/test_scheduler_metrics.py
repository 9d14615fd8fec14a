from __future__ import annotations

from lava_rapido.app.main import start_background_jobs, stop_background_jobs
from lava_rapido.app.services.scheduler_monitor import JOB_EXPENSE_REMINDERS, SchedulerMonitor


def test_background_jobs_respect_enable_flags(monkeypatch):
    started: list[str] = []

    SchedulerMonitor.reset()
    monkeypatch.setenv("ENABLE_EXPENSE_REMINDERS", "0")
    monkeypatch.setattr(
        "lava_rapido.app.main.start_expense_reminder_scheduler",
        lambda: started.append(JOB_EXPENSE_REMINDERS),
    )

    start_background_jobs()

    assert started == []
    snapshot = SchedulerMonitor.snapshot()
    assert snapshot[JOB_EXPENSE_REMINDERS]["enabled"] is False
    assert snapshot[JOB_EXPENSE_REMINDERS]["last_tick"] is None


def test_background_jobs_start_when_enabled(monkeypatch):
    started: list[str] = []

    SchedulerMonitor.reset()
    monkeypatch.setenv("ENABLE_EXPENSE_REMINDERS", "1")
    monkeypatch.setattr(
        "lava_rapido.app.main.start_expense_reminder_scheduler",
        lambda: started.append(JOB_EXPENSE_REMINDERS),
    )

    start_background_jobs()

    assert started == [JOB_EXPENSE_REMINDERS]
    assert SchedulerMonitor.snapshot()[JOB_EXPENSE_REMINDERS]["enabled"] is True


def test_background_jobs_stop_all(monkeypatch):
    stopped: list[str] = []

    monkeypatch.setattr(
        "lava_rapido.app.main.stop_expense_reminder_scheduler",
        lambda: stopped.append(JOB_EXPENSE_REMINDERS),
    )

    stop_background_jobs()

    assert stopped == [JOB_EXPENSE_REMINDERS]


def test_scheduler_health_endpoint_reports_status(api):
    SchedulerMonitor.reset()
    SchedulerMonitor.set_job_enabled(JOB_EXPENSE_REMINDERS, True)
    SchedulerMonitor.record_tick(JOB_EXPENSE_REMINDERS)
    SchedulerMonitor.record_error(JOB_EXPENSE_REMINDERS, "failing task")

    response = api.get("/")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    status = payload["jobs"][JOB_EXPENSE_REMINDERS]
    assert status["enabled"] is True
    assert status["runs"] == 1
    assert isinstance(status["last_tick"], str)
    assert any("failing task" in entry for entry in status["recent_errors"])
