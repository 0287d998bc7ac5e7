"""Sequential IP -> coordinates -> pass times lookup chain.

Two encodings of the same chain are exposed. `next_pass_times_for_current_location`
awaits each stage in turn and raises the first error. `next_pass_times_with_callback`
runs that coroutine as a task and reports through a `callback(error, result)`
invoked exactly once. Neither retries, wraps or swallows a stage error.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator, Callable, List, Optional

from isspass.fetch.endpoints import DEFAULT_ENDPOINTS, Endpoints
from isspass.fetch.session import ApiSession, create_api_session
from isspass.models import PassWindow
from isspass.observability.log import get_logger
from isspass.observability.metrics import MetricsRegistry
from isspass.observability.tracing import run_context
from isspass.orchestrator.state import PipelineRun, PipelineStage
from isspass.resolvers.geo import resolve_coordinates
from isspass.resolvers.ip import resolve_my_ip
from isspass.resolvers.passes import resolve_pass_times

LOGGER = get_logger(__name__)

DEFAULT_USER_AGENT = "isspass/0.1"
DEFAULT_TIMEOUT_SECONDS = 10.0

PassTimesCallback = Callable[[Optional[BaseException], Optional[List[PassWindow]]], None]


@contextlib.asynccontextmanager
async def _session_scope(session: Optional[ApiSession]) -> AsyncIterator[ApiSession]:
    if session is not None:
        yield session
        return
    async with create_api_session(user_agent=DEFAULT_USER_AGENT, timeout=DEFAULT_TIMEOUT_SECONDS) as owned:
        yield owned


async def run_pipeline(
    run: PipelineRun,
    session: ApiSession,
    *,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    metrics: Optional[MetricsRegistry] = None,
) -> List[PassWindow]:
    """Drive `run` through every stage, failing it on the first error."""
    metrics = metrics if metrics is not None else MetricsRegistry()
    with run_context(run_id=run.run_id):
        try:
            run.advance(PipelineStage.AWAIT_IP)
            ip = await resolve_my_ip(session, endpoints=endpoints, metrics=metrics)
            run.advance(PipelineStage.AWAIT_COORDS)
            coords = await resolve_coordinates(session, ip, endpoints=endpoints, metrics=metrics)
            run.advance(PipelineStage.AWAIT_PASSES)
            passes = await resolve_pass_times(session, coords, endpoints=endpoints, metrics=metrics)
            run.advance(PipelineStage.DONE)
        except Exception as exc:
            if not run.finished:
                run.mark_failed(exc)
            metrics.incr("pipelines_failed")
            LOGGER.warning("pipeline_failed", stage=getattr(exc, "stage", None), error=str(exc))
            raise
        metrics.incr("pipelines_succeeded")
        LOGGER.info("pipeline_done", passes=len(passes))
    return passes


async def next_pass_times_for_current_location(
    session: Optional[ApiSession] = None,
    *,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    metrics: Optional[MetricsRegistry] = None,
    run_id: Optional[str] = None,
) -> List[PassWindow]:
    """Return upcoming ISS pass windows for the caller's current location.

    A session is created for the call when none is supplied. `run_id` tags the
    log events of this call; a fresh one is generated when omitted.
    """
    run = PipelineRun(run_id=run_id) if run_id else PipelineRun()
    async with _session_scope(session) as active:
        return await run_pipeline(run, active, endpoints=endpoints, metrics=metrics)


def next_pass_times_with_callback(
    callback: PassTimesCallback,
    *,
    session: Optional[ApiSession] = None,
    endpoints: Endpoints = DEFAULT_ENDPOINTS,
    metrics: Optional[MetricsRegistry] = None,
    run_id: Optional[str] = None,
) -> "asyncio.Task[List[PassWindow]]":
    """Start the lookup on the running loop and report via `callback(error, result)`.

    The callback receives `(None, passes)` on success and `(error, None)` on
    failure. Must be called from inside a running event loop.
    """
    loop = asyncio.get_running_loop()
    task = loop.create_task(
        next_pass_times_for_current_location(session, endpoints=endpoints, metrics=metrics, run_id=run_id)
    )

    def _deliver(done: "asyncio.Task[List[PassWindow]]") -> None:
        if done.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        error = done.exception()
        if error is not None:
            callback(error, None)
            return
        callback(None, done.result())

    task.add_done_callback(_deliver)
    return task
