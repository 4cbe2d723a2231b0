"""Tests for the batch runner — limiter + retry over planned actions."""

from __future__ import annotations

import asyncio

import pytest

from megaverse.core.errors import LimiterConfigError, RemoteError, RetriesExhaustedError
from megaverse.domain.grid import Point
from megaverse.domain.plan import Action, ActionKind, plan_actions
from megaverse.execution.batch import BatchRunner, list_only, run_all
from megaverse.execution.observer import RecordingObserver
from megaverse.execution.retry import RetryPolicy

FAST = RetryPolicy(retries=2, base_ms=0)


def _action(name: str, run) -> Action:
    return Action(ActionKind.CREATE, run, name)


async def _ok():
    return None


class TestRunAll:
    @pytest.mark.asyncio
    async def test_partial_failure_isolation(self):
        calls: list[int] = []

        def make(i):
            async def run():
                calls.append(i)
                if i == 3:
                    raise RemoteError("bad request", status=400)

            return run

        actions = [_action(f"A{i}", make(i)) for i in range(1, 6)]
        result = await run_all(actions, concurrency=2, policy=FAST)

        assert (result.succeeded, result.failed) == (4, 1)
        assert result.total == 5
        assert sorted(calls) == [1, 2, 3, 4, 5]
        (failure,) = result.failures()
        assert failure.action.describe == "A3"
        assert failure.attempts == 1
        assert isinstance(failure.error, RemoteError)

    @pytest.mark.asyncio
    async def test_transient_then_success_counts_as_success(self, fake_api, no_sleep):
        fake_api.failures[Point(0, 0)] = [503, None]
        plan = plan_actions([["POLYANET", "SPACE", "POLYANET"]], fake_api)
        observer = RecordingObserver()

        result = await run_all(plan.actions, 4, RetryPolicy(retries=3, base_ms=10), observer, sleep=no_sleep)

        assert (result.succeeded, result.failed) == (2, 0)
        assert len(fake_api.called("create_polyanet")) == 4
        retries = observer.of_type("retry")
        assert [(e.action, e.attempt) for e in retries] == [
            ("POLYANET @ (0,0)", 1),
            ("POLYANET @ (0,0)", 2),
        ]
        outcome = next(o for o in result.outcomes if o.action.point == Point(0, 0))
        assert outcome.attempts == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_is_a_counted_failure(self, fake_api, no_sleep):
        fake_api.failures[Point(0, 1)] = [500, 500, 500]
        plan = plan_actions([["POLYANET", "POLYANET"]], fake_api)
        observer = RecordingObserver()

        result = await run_all(plan.actions, 1, FAST, observer, sleep=no_sleep)

        assert (result.succeeded, result.failed) == (1, 1)
        (failure,) = result.failures()
        assert isinstance(failure.error, RetriesExhaustedError)
        assert failure.attempts == 3
        assert [e.action for e in observer.of_type("failed")] == ["POLYANET @ (0,1)"]
        assert len(observer.of_type("succeeded")) == 1

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self):
        active = 0
        peak = 0

        async def track():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.005)
            active -= 1

        actions = [_action(f"t{i}", track) for i in range(12)]
        result = await run_all(actions, concurrency=3, policy=FAST)
        assert result.succeeded == 12
        assert peak <= 3

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        result = await run_all([], concurrency=1)
        assert (result.succeeded, result.failed, result.total) == (0, 0, 0)
        assert result.ok

    @pytest.mark.asyncio
    async def test_observer_errors_are_ignored(self):
        class Broken:
            def on_retry(self, action, error, attempt):
                raise RuntimeError("nope")

            def on_success(self, action):
                raise RuntimeError("nope")

            def on_failure(self, action, error):
                raise RuntimeError("nope")

        result = await run_all([_action("a", _ok)], 1, FAST, Broken())
        assert result.succeeded == 1

    def test_invalid_concurrency_rejected_before_running(self):
        with pytest.raises(LimiterConfigError):
            BatchRunner(0)


class TestBatchResult:
    @pytest.mark.asyncio
    async def test_to_dict(self):
        async def boom():
            raise RemoteError("gone", status=404)

        result = await run_all([_action("ok", _ok), _action("bad", boom)], 2, FAST)
        d = result.to_dict()
        assert d["total"] == 2
        assert d["succeeded"] == 1
        assert d["failed"] == 1
        assert d["failures"][0]["action"] == "bad"
        assert d["duration_seconds"] >= 0
        assert not result.ok

    @pytest.mark.asyncio
    async def test_outcome_timestamps(self):
        result = await run_all([_action("ok", _ok)], 1, FAST)
        (outcome,) = result.outcomes
        assert outcome.status == "succeeded"
        assert outcome.duration_seconds is not None


class TestListOnly:
    def test_labels_in_plan_order_without_running(self, fake_api):
        plan = plan_actions([["POLYANET", "SPACE"], ["BLUE_SOLOON", "RIGHT_COMETH"]], fake_api)
        assert list_only(plan.actions) == [
            "POLYANET @ (0,0)",
            "BLUE_SOLOON @ (1,0)",
            "RIGHT_COMETH @ (1,1)",
        ]
        assert fake_api.calls == []
