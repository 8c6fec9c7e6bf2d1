"""Render executor: one thread applying queued commands to a render state."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from derplot.config.models import RendererCtx
from derplot.engine.command_queue import CommandQueue
from derplot.metrics import Metrics
from derplot.render.commands import Command, Terminate, apply_command
from derplot.render.render_state import RenderState


logger = logging.getLogger(__name__)

SUBMITTED = "derplot_commands_submitted"
APPLIED = "derplot_commands_applied"
DROPPED = "derplot_commands_dropped"
QUEUE_DEPTH = "derplot_queue_depth"
APPLY_MS = "derplot_apply_ms"


class DispatchEngine:
    """Apply submitted commands in FIFO order on a dedicated thread.

    The render state is only touched from the executor thread. ``drain``
    blocks until everything submitted so far has been applied; ``shutdown``
    queues a :class:`Terminate`, joins the thread and discards whatever was
    still queued behind it. Submissions after termination are dropped.
    """

    def __init__(
        self,
        state: RenderState,
        *,
        ctx: Optional[RendererCtx] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self._ctx = ctx or RendererCtx()
        self._state = state
        self._metrics = metrics
        self._queue: CommandQueue[Command] = CommandQueue()
        self._terminated = threading.Event()
        self._shutdown_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        policy = self._ctx.debug_policy
        self._log_dispatch = policy.logging.log_dispatch
        self._log_lifecycle = policy.logging.log_lifecycle
        self._check_owner = policy.checks.owner_thread

    # --- Lifecycle ----------------------------------------------------------------
    def start(self) -> None:
        if self._thread is not None:
            return
        cfg = self._ctx.cfg
        self._thread = threading.Thread(target=self._run, name=cfg.thread_name, daemon=cfg.daemon)
        self._thread.start()

    @property
    def running(self) -> bool:
        t = self._thread
        return t is not None and t.is_alive() and not self._terminated.is_set()

    @property
    def terminated(self) -> bool:
        return self._terminated.is_set()

    @property
    def thread(self) -> Optional[threading.Thread]:
        return self._thread

    # --- Producer API -------------------------------------------------------------
    def submit(self, command: Command) -> bool:
        """Queue ``command``; returns False when it was dropped."""

        accepted = self._queue.put(command)
        if self._metrics is not None:
            self._metrics.inc(SUBMITTED if accepted else DROPPED)
            self._metrics.set(QUEUE_DEPTH, float(self._queue.qsize()))
        if not accepted:
            if self._log_dispatch:
                logger.debug("dropped %s after shutdown", command.kind)
        elif self._log_dispatch:
            logger.debug("queued %s", command.kind)
        return accepted

    def drain(self) -> None:
        """Block until every command submitted before the call has been applied."""

        if self._thread is None:
            return
        self._queue.wait_idle()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Terminate the executor and join it; safe to call more than once."""

        with self._shutdown_lock:
            thread = self._thread
            if thread is None:
                self._queue.close()
                self._terminated.set()
                return
            self._queue.put(Terminate())
            if thread is not threading.current_thread():
                thread.join(timeout=timeout)
                if thread.is_alive():
                    logger.warning("render executor %s did not stop within %ss", thread.name, timeout)

    def pending(self) -> int:
        return self._queue.qsize()

    # --- Executor -----------------------------------------------------------------
    def _run(self) -> None:
        state = self._state
        if self._check_owner:
            state.bind_owner()
        logger.info("render executor started: thread=%s", threading.current_thread().name)
        metrics = self._metrics
        while True:
            command = self._queue.take()
            if isinstance(command, Terminate):
                dropped = self._queue.close()
                if metrics is not None and dropped:
                    metrics.inc(DROPPED, dropped)
                if dropped and self._log_lifecycle:
                    logger.debug("discarded %d commands queued behind terminate", dropped)
                self._terminated.set()
                self._queue.task_done()
                break
            t0 = time.perf_counter()
            try:
                apply_command(command, state)
            except Exception:
                logger.exception("render command %s failed", command.kind)
            finally:
                if metrics is not None:
                    metrics.observe_ms(APPLY_MS, (time.perf_counter() - t0) * 1000.0)
                    metrics.inc(APPLIED)
                    metrics.set(QUEUE_DEPTH, float(self._queue.qsize()))
                self._queue.task_done()
            if self._log_dispatch:
                logger.debug("applied %s", command.kind)
        logger.info("render executor stopped: thread=%s", threading.current_thread().name)


__all__ = [
    "APPLIED",
    "APPLY_MS",
    "DROPPED",
    "DispatchEngine",
    "QUEUE_DEPTH",
    "SUBMITTED",
]
