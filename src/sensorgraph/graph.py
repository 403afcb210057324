"""Redraw orchestration for a single sensor chart.

A :class:`SensorGraph` ties a data source and a renderer to one named
series.  Every trigger (attach, interval or column change, manual refresh,
timer tick) runs the same pipeline: resolve the time window, fetch the
series, scale it, build a fresh :class:`~sensorgraph.core.RenderContext` and
hand the resulting plan to the renderer.

Only one redraw runs at a time.  Triggers arriving while a redraw is loading
are coalesced: they mark a single pending redraw that starts as soon as the
current one finishes, however many triggers arrived in between.

Errors from the pipeline (:class:`~sensorgraph.errors.SensorGraphError`)
end the redraw in :attr:`GraphState.ERROR` with the message stored in
:attr:`SensorGraph.error`; the previous plan stays in place and the next
trigger tries again.  Other exceptions also end in ERROR but propagate to
whoever awaits the redraw; the refresh timer logs them and keeps polling.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, List, Optional

from .config import Settings
from .core import Interval, RenderContext, resolve
from .errors import SensorGraphError
from .ingest import DataSource
from .types import Column, RenderPlan
from .viz import Renderer

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GraphState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class SensorGraph:
    """Polling chart of one sensor series."""

    def __init__(
        self,
        name: str,
        source: DataSource,
        renderer: Renderer,
        *,
        settings: Settings | None = None,
        interval: Interval | str | None = None,
        column: Column | str | None = None,
        clock: Clock | None = None,
    ) -> None:
        if settings is None:
            settings = Settings()
        chart = settings.chart

        self.name = name
        self.source = source
        self.renderer = renderer
        self.settings = settings
        self.area = chart.plot_area()
        self.delay = chart.delay
        self.clock = clock or utc_now

        # the interval stays unparsed so a bad key surfaces as a redraw error
        self._interval: Interval | str = chart.interval if interval is None else interval
        self._column = Column.parse(chart.column if column is None else column)

        self.state = GraphState.IDLE
        self.transitions: Deque[GraphState] = deque(maxlen=32)
        self.error: Optional[str] = None
        self.address: Optional[str] = None
        self.context: Optional[RenderContext] = None
        self.plan: Optional[RenderPlan] = None
        self.redraws = 0
        self.attempts = 0

        self._attached = False
        self._inflight: Optional[asyncio.Task] = None
        self._pending = False
        self._timer: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"SensorGraph({self.name!r}, interval={self._interval!r}, column={self._column.value!r}, state={self.state.value})"

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def interval(self) -> Interval | str:
        return self._interval

    @property
    def column(self) -> Column:
        return self._column

    @property
    def columns(self) -> List[Column]:
        """Columns requested from the source, selected column first."""

        extra = [c for c in self.settings.chart.columns if c is not self._column]
        return [self._column, *extra]

    def set_interval(self, interval: Interval | str) -> Optional[asyncio.Task]:
        self._interval = interval
        return self.request_redraw("interval")

    def set_column(self, column: Column | str) -> Optional[asyncio.Task]:
        self._column = Column.parse(column)
        return self.request_redraw("column")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def attach(self, *, poll: bool = True) -> None:
        """Start the chart: draw once and, with ``poll``, arm the refresh timer."""

        if self._attached:
            return
        self._attached = True
        if poll:
            self._timer = asyncio.get_running_loop().create_task(
                self._tick(), name=f"sensorgraph-timer-{self.name}"
            )
        task = self.request_redraw("attach")
        if task is not None:
            await task

    async def detach(self) -> None:
        """Stop the timer and any redraw in flight; later triggers are ignored."""

        self._attached = False
        self._pending = False
        for task in (self._timer, self._inflight):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._timer = None
        self._inflight = None
        if self.state is GraphState.LOADING:
            self._set_state(GraphState.IDLE)

    async def __aenter__(self) -> "SensorGraph":
        await self.attach()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.detach()

    # ------------------------------------------------------------------
    # Redraw
    # ------------------------------------------------------------------

    def request_redraw(self, reason: str = "refresh") -> Optional[asyncio.Task]:
        """Trigger a redraw and return the task carrying it.

        Returns ``None`` when the graph is detached.  While a redraw is in
        flight the trigger is folded into one pending redraw and the running
        task is returned.
        """

        if not self._attached:
            logger.debug("%s: ignoring %s trigger, graph detached", self.name, reason)
            return None
        if self.busy:
            logger.debug("%s: %s trigger coalesced into pending redraw", self.name, reason)
            self._pending = True
            return self._inflight
        self._inflight = asyncio.get_running_loop().create_task(
            self._drain(reason), name=f"sensorgraph-redraw-{self.name}"
        )
        return self._inflight

    async def refresh(self) -> None:
        """Redraw now and wait until the chart has settled."""

        task = self.request_redraw("refresh")
        if task is not None:
            await task

    async def _drain(self, reason: str) -> None:
        while True:
            self._pending = False
            await self._redraw(reason)
            if not (self._pending and self._attached):
                return
            reason = "pending"

    def _set_state(self, state: GraphState) -> None:
        logger.debug("%s: %s -> %s", self.name, self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    async def _redraw(self, reason: str) -> None:
        self._set_state(GraphState.LOADING)
        self.attempts += 1
        logger.debug("%s: redraw (%s)", self.name, reason)
        try:
            window = resolve(self._interval, self.clock(), labels=self.settings.labels)
            series = await self.source.fetch(self.name, window.min_t, window.max_t, self.columns)
            if series:
                context = RenderContext.build(self.area, window, series, self._column)
                title = self.name if series.address is None else f"{self.name}  {series.address}"
                plan = context.plan(series, title=title)
                self.renderer.render(plan)
                self.context = context
                self.plan = plan
                self.address = series.address
            else:
                logger.debug("%s: empty series, nothing to draw", self.name)
        except SensorGraphError as exc:
            self._set_state(GraphState.ERROR)
            self.error = str(exc) or type(exc).__name__
            logger.warning("%s: redraw failed: %s", self.name, self.error)
            return
        except Exception as exc:
            self._set_state(GraphState.ERROR)
            self.error = f"{type(exc).__name__}: {exc}"
            raise

        self.error = None
        self._set_state(GraphState.READY)
        self.redraws += 1
        self._set_state(GraphState.IDLE)

    async def _tick(self) -> None:
        while self._attached:
            await asyncio.sleep(self.delay)
            task = self.request_redraw("timer")
            if task is None:
                continue
            try:
                await asyncio.shield(task)
            except Exception:
                logger.exception("%s: timer redraw crashed", self.name)
