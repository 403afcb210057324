"""Matplotlib styles for sensorgraph charts."""

from __future__ import annotations

import matplotlib as mpl

# Base rcParams used while drawing a chart.  The values can be overridden by
# supplying a different mapping to :func:`chart_style`.
BASE_STYLE = {
    "font.size": 9,
    "font.family": "sans-serif",
    "text.color": "black",
    "lines.solid_joinstyle": "round",
    "lines.solid_capstyle": "round",
    "savefig.facecolor": "white",
}


def chart_style(extra: dict | None = None):
    """Return an rc context applying the chart style.

    Parameters
    ----------
    extra:
        Optional dictionary of rcParams that override the base style.
    """
    style = BASE_STYLE.copy()
    if extra:
        style.update(extra)
    return mpl.rc_context(style)
