"""Unit tests for the render executor."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import ClassVar

import pytest

from derplot.config.logging_policy import DebugPolicy, RuntimeChecks
from derplot.config.models import RendererConfig, RendererCtx
from derplot.engine import dispatch as dispatch_mod
from derplot.engine.dispatch import DispatchEngine
from derplot.metrics import Metrics
from derplot.render.commands import PlotRawPoint, SetFrontColor, Terminate
from derplot.render.display_buffer import DisplayBuffer
from derplot.render.render_state import RenderState, RenderStateOwnershipError


@dataclass(frozen=True)
class Gate:
    """Command that parks the executor until ``release`` is set."""

    entered: threading.Event
    release: threading.Event
    kind: ClassVar[str] = "gate"


@dataclass(frozen=True)
class Boom:
    kind: ClassVar[str] = "boom"


@pytest.fixture
def gated_apply(monkeypatch):
    real_apply = dispatch_mod.apply_command

    def apply(command, state):
        if isinstance(command, Gate):
            command.entered.set()
            command.release.wait(timeout=5)
            return False
        return real_apply(command, state)

    monkeypatch.setattr(dispatch_mod, "apply_command", apply)


def make_engine(**ctx_kwargs) -> tuple[DispatchEngine, RenderState, Metrics]:
    state = RenderState(DisplayBuffer(4, 4))
    metrics = Metrics()
    engine = DispatchEngine(state, ctx=RendererCtx(**ctx_kwargs), metrics=metrics)
    engine.start()
    return engine, state, metrics


def test_thread_uses_configured_name_and_daemon_flag():
    engine, _, _ = make_engine(cfg=RendererConfig(thread_name="plot-exec", daemon=False))
    try:
        assert engine.thread is not None
        assert engine.thread.name == "plot-exec"
        assert engine.thread.daemon is False
        assert engine.running
    finally:
        engine.shutdown()
    assert not engine.thread.is_alive()
    assert engine.terminated


def test_commands_apply_in_submission_order():
    engine, state, metrics = make_engine()
    try:
        for color in range(1, 51):
            engine.submit(SetFrontColor(color))
            engine.submit(PlotRawPoint((color % 4, 0)))
        engine.drain()
        assert state.front_color == 50
        assert state.buffer.data()[0].tolist() == [48, 49, 50, 47]
        assert metrics.counter(dispatch_mod.SUBMITTED) == 100
        assert metrics.counter(dispatch_mod.APPLIED) == 100
    finally:
        engine.shutdown()


def test_drain_waits_for_in_flight_command(gated_apply):
    engine, state, _ = make_engine()
    entered, release = threading.Event(), threading.Event()
    drained = threading.Event()
    try:
        engine.submit(Gate(entered, release))
        engine.submit(SetFrontColor(9))
        assert entered.wait(timeout=5)

        def waiter() -> None:
            engine.drain()
            drained.set()

        t = threading.Thread(target=waiter)
        t.start()
        assert not drained.wait(timeout=0.1)
        release.set()
        assert drained.wait(timeout=5)
        t.join(timeout=5)
        assert state.front_color == 9
    finally:
        release.set()
        engine.shutdown()


def test_commands_behind_terminate_are_discarded(gated_apply):
    engine, state, metrics = make_engine()
    entered, release = threading.Event(), threading.Event()
    engine.submit(Gate(entered, release))
    assert entered.wait(timeout=5)
    engine.submit(Terminate())
    engine.submit(SetFrontColor(5))
    engine.submit(SetFrontColor(6))
    release.set()
    engine.drain()
    assert engine.terminated
    engine.shutdown()
    assert state.front_color == 0xFFFFFFFF
    assert metrics.counter(dispatch_mod.DROPPED) == 2
    assert engine.pending() == 0


def test_submit_after_shutdown_is_dropped():
    engine, state, metrics = make_engine()
    engine.submit(SetFrontColor(1))
    engine.shutdown()
    assert not engine.submit(SetFrontColor(2))
    engine.drain()
    assert state.front_color == 1
    assert metrics.counter(dispatch_mod.DROPPED) == 1


def test_shutdown_is_idempotent():
    engine, _, _ = make_engine()
    engine.shutdown()
    engine.shutdown()
    assert engine.terminated
    assert not engine.running


def test_failing_command_is_logged_and_loop_survives(caplog):
    engine, state, metrics = make_engine()
    try:
        with caplog.at_level(logging.ERROR, logger="derplot.engine.dispatch"):
            engine.submit(Boom())  # type: ignore[arg-type]
            engine.submit(SetFrontColor(4))
            engine.drain()
        assert state.front_color == 4
        assert any("boom" in rec.getMessage() and rec.exc_info for rec in caplog.records)
        assert metrics.counter(dispatch_mod.APPLIED) == 2
    finally:
        engine.shutdown()


def test_apply_timings_and_queue_depth_are_recorded():
    engine, _, metrics = make_engine()
    try:
        engine.submit(SetFrontColor(1))
        engine.drain()
    finally:
        engine.shutdown()
    snap = metrics.snapshot()
    assert snap["histograms"][dispatch_mod.APPLY_MS]["count"] == 1
    assert dispatch_mod.QUEUE_DEPTH in snap["gauges"]


def test_executor_owns_state_when_check_enabled():
    policy = DebugPolicy(enabled=True, checks=RuntimeChecks(owner_thread=True))
    state = RenderState(DisplayBuffer(2, 2), debug_policy=policy)
    engine = DispatchEngine(state, ctx=RendererCtx(debug_policy=policy))
    engine.start()
    try:
        engine.submit(SetFrontColor(3))
        engine.drain()
        assert state.front_color == 3
        # the executor bound itself as owner, so this thread may not mutate
        with pytest.raises(RenderStateOwnershipError):
            state.set_front_color(1)
    finally:
        engine.shutdown()


def test_unstarted_engine_shutdown_closes_queue():
    state = RenderState(DisplayBuffer(2, 2))
    engine = DispatchEngine(state)
    engine.shutdown()
    assert engine.terminated
    assert not engine.submit(SetFrontColor(1))
    engine.drain()
