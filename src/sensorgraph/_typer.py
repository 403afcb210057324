"""Helpers for reporting errors from Typer commands."""

from __future__ import annotations

from typing import Any, NoReturn, Optional

import typer

from .errors import SensorGraphError


def bad_parameter(
    message: str,
    *,
    ctx: Optional[typer.Context] = None,
    param: Any = None,
    param_hint: Optional[str] = None,
) -> NoReturn:
    """Raise :class:`typer.BadParameter` forwarding only the hints given.

    Typer rejects ``None`` for some of these keywords depending on the
    installed version, so unset values are dropped before the call.
    """

    kwargs: dict[str, Any] = {}
    if ctx is not None:
        kwargs["ctx"] = ctx
    if param is not None:
        kwargs["param"] = param
    if param_hint is not None:
        kwargs["param_hint"] = param_hint
    raise typer.BadParameter(message, **kwargs)


def fail(exc: SensorGraphError, *, code: int = 1) -> NoReturn:
    """Print ``exc`` on stderr and exit with ``code``."""

    typer.secho(f"error: {exc}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code)
