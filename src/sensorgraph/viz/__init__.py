"""Renderers for sensor charts."""

from .render import FigureRenderer, Renderer

__all__ = ["FigureRenderer", "Renderer"]
