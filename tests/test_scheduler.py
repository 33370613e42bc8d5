import logging
import threading

import pytest

from gphotos_repro.scheduler import MissedTickPolicy, Scheduler, TaskResult


def _task(name, calls, clock=None, runtime=0.0, error=None):
    def run():
        calls.append((name, clock() if clock else None))
        if clock and runtime:
            clock.advance(runtime)
        if error is not None:
            return TaskResult.failure(name, error)
        return TaskResult.success(name)
    return run


def test_first_tick_runs_immediately(clock):
    calls = []
    scheduler = Scheduler(clock=clock)
    scheduler.schedule_periodic("probe", _task("probe", calls, clock), interval=60)

    results = scheduler.run_pending()

    assert [r.name for r in results] == ["probe"]
    assert calls == [("probe", 0.0)]
    assert scheduler.next_due() == 60.0


def test_periodic_ticks_follow_interval(clock):
    calls = []
    scheduler = Scheduler(clock=clock)
    scheduler.schedule_periodic("probe", _task("probe", calls, clock), interval=60)
    scheduler.run_pending()

    clock.advance(59)
    assert scheduler.run_pending() == []

    clock.advance(1)
    scheduler.run_pending()
    clock.advance(60)
    scheduler.run_pending()

    assert [t for _, t in calls] == [0.0, 60.0, 120.0]


def test_same_due_time_runs_in_submission_order(clock):
    calls = []
    scheduler = Scheduler(clock=clock)
    scheduler.schedule_periodic("probe", _task("probe", calls), interval=60)
    scheduler.schedule_once("upload", _task("upload", calls))

    results = scheduler.run_pending()

    assert [r.name for r in results] == ["probe", "upload"]


def test_one_shot_runs_once(clock):
    calls = []
    scheduler = Scheduler(clock=clock)
    scheduler.schedule_once("upload", _task("upload", calls))

    scheduler.run_pending()
    clock.advance(600)
    scheduler.run_pending()

    assert len(calls) == 1
    assert scheduler.next_due() is None


def test_failed_result_is_logged_and_schedule_continues(clock, caplog):
    calls = []
    scheduler = Scheduler(clock=clock)
    scheduler.schedule_periodic(
        "probe", _task("probe", calls, error=ConnectionError("boom")), interval=60
    )

    with caplog.at_level(logging.ERROR, logger="gphotos_repro.scheduler"):
        results = scheduler.run_pending()

    assert not results[0].ok
    assert isinstance(results[0].error, ConnectionError)
    record = caplog.records[-1]
    assert "probe" in record.getMessage()
    assert record.exc_info[0] is ConnectionError

    clock.advance(60)
    scheduler.run_pending()
    assert len(calls) == 2


def test_escaping_exception_is_treated_as_failure(clock, caplog):
    def explode():
        raise ValueError("not caught by the task")

    scheduler = Scheduler(clock=clock)
    scheduler.schedule_periodic("probe", explode, interval=60)

    with caplog.at_level(logging.ERROR, logger="gphotos_repro.scheduler"):
        results = scheduler.run_pending()

    assert isinstance(results[0].error, ValueError)
    assert scheduler.next_due() == 60.0


def test_skip_policy_drops_missed_ticks(clock, caplog):
    calls = []
    scheduler = Scheduler(policy=MissedTickPolicy.SKIP, clock=clock)
    scheduler.schedule_periodic("probe", _task("probe", calls, clock, runtime=130), interval=60)

    with caplog.at_level(logging.WARNING, logger="gphotos_repro.scheduler"):
        results = scheduler.run_pending()

    assert len(results) == 1
    assert scheduler.next_due() == 180.0
    assert "skipped 2 tick(s)" in caplog.text


def test_catch_up_policy_runs_missed_ticks_back_to_back(clock):
    calls = []
    runtimes = iter([130.0])

    def slow_first_tick():
        calls.append(clock())
        clock.advance(next(runtimes, 0.0))
        return TaskResult.success("probe")

    scheduler = Scheduler(policy=MissedTickPolicy.CATCH_UP, clock=clock)
    scheduler.schedule_periodic("probe", slow_first_tick, interval=60)

    results = scheduler.run_pending()

    assert len(results) == 3
    assert calls == [0.0, 130.0, 130.0]
    assert scheduler.next_due() == 180.0


def test_policy_accepts_string_value():
    scheduler = Scheduler(policy="catch-up")
    assert scheduler._policy is MissedTickPolicy.CATCH_UP


@pytest.mark.parametrize("interval", [0, -5, float("nan"), float("inf")])
def test_unusable_interval_is_rejected(interval):
    with pytest.raises(ValueError):
        Scheduler().schedule_periodic("probe", lambda: TaskResult.success("probe"), interval)


def test_worker_thread_runs_jobs_sequentially():
    done = threading.Event()
    order = []

    def first():
        order.append("probe")
        return TaskResult.success("probe")

    def second():
        order.append("upload")
        done.set()
        return TaskResult.success("upload")

    scheduler = Scheduler()
    scheduler.schedule_periodic("probe", first, interval=3600)
    scheduler.schedule_once("upload", second)
    scheduler.start()
    try:
        assert done.wait(5)
    finally:
        scheduler.stop()
        scheduler.join(5)

    assert order == ["probe", "upload"]
