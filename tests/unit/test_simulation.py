import pytest

from vestvault.exceptions import ConfigurationError, ZeroDurationError
from vestvault.simulation import DEFAULT_START_TIME, ManualClock, load_plan, run_plan

PLAN = {
    "start_time": 1_700_000_000,
    "engine": {"address": "vault", "owner": "admin"},
    "funding": 36_500,
    "schedules": [
        {"title": "Seed", "beneficiary": "alice", "amount": 36_500, "duration": 100},
        {"title": "Advisor", "beneficiary": "bob", "amount": 3_650, "duration": 1},
    ],
    "claims": [
        {"schedule": 0, "day": 10},
        {"schedule": 0, "day": 10, "seconds": 1_000},
        {"schedule": 1, "day": 400},
        {"schedule": 1, "day": 401},
        {"schedule": 2, "day": 401},
    ],
}


def test_manual_clock():
    clock = ManualClock(100)
    clock.advance(5)
    assert clock.now() == 105
    clock.set(7)
    assert clock.now() == 7


def test_run_plan_outcomes():
    report = run_plan(PLAN)
    outcomes = [(o.schedule, o.outcome, o.amount) for o in report.outcomes]
    assert outcomes == [
        (0, "success", 10),
        (0, "ClaimTooSoonError", 0),
        (1, "success", 3_650),
        (1, "VestingCompletedError", 0),
        (2, "InvalidScheduleIndexError", 0),
    ]
    assert report.outcomes[0].day == 10
    assert report.outcomes[1].tokens_claimed == 10
    assert report.outcomes[4].tokens_claimed is None
    assert report.total_released == 3_660
    assert report.engine_balance == 36_500 - 3_660
    assert report.schedules[1]["is_completed"] is True


def test_unfunded_plan_reports_no_tokens():
    plan = dict(PLAN, funding=0, claims=[{"schedule": 0, "day": 3}])
    report = run_plan(plan)
    assert report.outcomes[0].outcome == "NoTokensAvailableError"
    assert report.engine_balance == 0


def test_invalid_schedule_aborts_run():
    plan = dict(PLAN, schedules=[{"title": "Bad", "beneficiary": "alice", "amount": 10, "duration": 0}])
    with pytest.raises(ZeroDurationError):
        run_plan(plan)


def test_plan_field_errors():
    with pytest.raises(ConfigurationError):
        run_plan({"schedules": [{"beneficiary": "alice", "duration": 10}]})
    with pytest.raises(ConfigurationError):
        run_plan({"claims": [{"schedule": "zero"}]})


def test_defaults():
    report = run_plan({})
    assert report.outcomes == []
    assert report.to_dict()["total_released"] == 0
    assert DEFAULT_START_TIME == 1_700_000_000


def test_load_plan(tmp_path):
    path = tmp_path / "plan.yaml"
    path.write_text("funding: 5\nschedules: []\n")
    assert load_plan(path) == {"funding": 5, "schedules": []}

    bad = tmp_path / "bad.yaml"
    bad.write_text("[1, 2")
    with pytest.raises(ConfigurationError):
        load_plan(bad)
    with pytest.raises(ConfigurationError):
        load_plan(tmp_path / "missing.yaml")
