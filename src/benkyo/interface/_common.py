"""Shared helpers for CLI commands."""

from datetime import datetime, timezone
from typing import Any, NoReturn

import typer

from benkyo.application.config import AppConfig, resolve_config
from benkyo.application.factory import get_review_service
from benkyo.application.review_service import ReviewService
from benkyo.domain.errors import BenkyoError
from benkyo.infrastructure.clock import FixedClock


def _resolve_with_overrides(**kwargs: Any) -> AppConfig:
    """Resolve config, ignoring options the user did not pass."""
    return resolve_config({k: v for k, v in kwargs.items() if v is not None})


def _parse_at(value: str | None) -> datetime | None:
    """Parse an --at timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        at = datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Not an ISO-8601 timestamp: {value}", param_hint="--at") from None
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    return at


def _service_from_ctx(ctx: typer.Context) -> ReviewService:
    obj = ctx.ensure_object(dict)
    try:
        config = _resolve_with_overrides(**obj.get("overrides", {}))
        at = obj.get("at")
        return get_review_service(config, clock=FixedClock(at) if at else None)
    except (BenkyoError, ValueError) as e:
        _fail(e)


def _fail(error: Exception) -> NoReturn:
    typer.secho(f"Error: {error}", fg="red", err=True)
    raise typer.Exit(1)
