"""Drawing render plans with matplotlib.

The renderer works in surface pixels: the figure is exactly ``width`` x
``height`` pixels, a single axes object spans it, and the y axis is inverted
so the coordinates in a :class:`~sensorgraph.types.RenderPlan` can be used
as they are.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from ..config import Settings, VizSettings
from ..types import RenderPlan
from .styles import chart_style

logger = logging.getLogger(__name__)

LABEL_GAP = 6
UNIT_OFFSET = (12, 20)


@runtime_checkable
class Renderer(Protocol):
    """Anything that can draw a :class:`~sensorgraph.types.RenderPlan`."""

    def render(self, plan: RenderPlan) -> None:
        """Draw ``plan``, replacing whatever was drawn before."""


class FigureRenderer:
    """Renderer drawing onto a fixed-size matplotlib figure.

    When ``output`` is set each rendered plan is written there as an image
    (format taken from the suffix).  ``renders`` counts completed draws.
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 300,
        *,
        dpi: int = 100,
        viz: VizSettings | None = None,
        output: str | Path | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.dpi = dpi
        self.viz = viz or VizSettings()
        self.output = Path(output) if output else None
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        FigureCanvasAgg(self.figure)
        self.last_plan: Optional[RenderPlan] = None
        self.renders = 0

    @classmethod
    def from_settings(cls, settings: Settings, output: str | Path | None = None) -> "FigureRenderer":
        chart = settings.chart
        return cls(chart.width, chart.height, dpi=chart.dpi, viz=settings.viz, output=output)

    def _draw(self, plan: RenderPlan) -> None:
        viz = self.viz
        area = plan.area
        self.figure.clear()
        ax = self.figure.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, self.width)
        ax.set_ylim(self.height, 0)
        ax.set_axis_off()

        ax.add_patch(
            Rectangle((area.min_x, area.min_y), area.rng_x, area.rng_y,
                      facecolor=viz.background, edgecolor="none")
        )

        for tick in plan.ticks_y:
            ax.hlines(tick.position, area.min_x, area.max_x, colors=viz.grid_color, linewidth=1)
            ax.text(area.min_x - LABEL_GAP, tick.position, tick.label, ha="right", va="center")
        for tick in plan.ticks_x:
            ax.vlines(tick.position, area.min_y, area.max_y, colors=viz.grid_color, linewidth=1)
            ax.text(tick.position, area.max_y + LABEL_GAP, tick.label, ha="center", va="top")

        if plan.zero_crossing_y is not None:
            ax.hlines(plan.zero_crossing_y, area.min_x, area.max_x,
                      colors=viz.baseline_color, linewidth=1.5)

        if plan.unit:
            ax.text(area.min_x - UNIT_OFFSET[0], area.min_y - UNIT_OFFSET[1], plan.unit,
                    ha="center", va="center")
        if plan.title:
            ax.text(area.max_x, area.min_y - UNIT_OFFSET[1], plan.title, ha="right", va="center")

        if plan.points:
            xs, ys = zip(*plan.points)
            ax.plot(xs, ys, color=viz.line_color, linewidth=viz.line_width)

    def render(self, plan: RenderPlan) -> None:
        with chart_style():
            self._draw(plan)
            if self.output is not None:
                self.output.parent.mkdir(parents=True, exist_ok=True)
                self.figure.savefig(self.output, dpi=self.dpi)
                logger.debug("wrote %s", self.output)
        self.last_plan = plan
        self.renders += 1
