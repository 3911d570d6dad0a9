"""benkyo CLI: review cards, inspect the due queue, and run the server."""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import typer

from benkyo.application.config import resolve_config
from benkyo.domain.errors import BenkyoError
from benkyo.domain.models import Card, CardKind, Rating
from benkyo.interface._common import _fail, _parse_at, _resolve_with_overrides, _service_from_ctx

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="benkyo: spaced-repetition review scheduler for Japanese study cards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Manage benkyo configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    store: Annotated[
        str | None, typer.Option(help="Card store backend: memory or json.")
    ] = None,
    store_path: Annotated[Path | None, typer.Option(help="Path to the JSON card store.")] = None,
    at: Annotated[
        str | None,
        typer.Option(help="Act as if the current time were this ISO-8601 timestamp (UTC if naive)."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for benkyo."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"store": store, "store_path": store_path}
    ctx.obj["at"] = _parse_at(at)

    if verbose:
        logging.getLogger("benkyo").setLevel(logging.DEBUG if verbose > 1 else logging.INFO)


def _card_line(card: Card) -> str:
    state = card.state
    when = state.next_review_at.strftime("%Y-%m-%d %H:%M") if state.next_review_at else "new"
    mark = "*" if card.is_bookmarked else " "
    return f"{mark} {card.id}  {card.front:<12} {when:<16} streak={state.streak} ivl={state.interval_days}d"


def _state_dict(card: Card) -> dict:
    from benkyo.infrastructure.stores.serialization import card_to_dict

    return card_to_dict(card)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to review.")],
    rating: Annotated[str, typer.Argument(help="again, good or easy.")],
    expected_version: Annotated[
        int | None, typer.Option(help="Fail if the card changed since this version.")
    ] = None,
):
    """[bold green]Rate[/bold green] a card and schedule its next review."""
    service = _service_from_ctx(ctx)
    try:
        card = service.review(card_id, rating, expected_version=expected_version)
    except BenkyoError as e:
        _fail(e)

    state = card.state
    color = "red" if Rating.parse(rating) is Rating.AGAIN else "green"
    typer.secho(
        f"{card.front}: next review in {state.interval_days} day(s) "
        f"({state.next_review_at:%Y-%m-%d %H:%M %Z}), streak {state.streak}",
        fg=color,
    )


@app.command()
def due(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option(help="Show at most this many cards.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List due cards in review order (new cards first)."""
    service = _service_from_ctx(ctx)
    try:
        cards = service.due_queue(limit)
    except BenkyoError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps([_state_dict(c) for c in cards], ensure_ascii=False, indent=2))
        return

    if not cards:
        typer.secho("Nothing due. お疲れ様!", fg="green")
        return

    typer.echo(f"Due: {len(cards)}")
    for card in cards:
        typer.echo(_card_line(card))


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show learning statistics."""
    service = _service_from_ctx(ctx)
    try:
        s = service.stats()
    except BenkyoError as e:
        _fail(e)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "totalWords": s.total_words,
                    "learnedWords": s.learned_words,
                    "dueToday": s.due_today,
                    "totalReviews": s.total_reviews,
                    "accuracy": s.accuracy,
                    "streak": s.streak,
                    "masteryPercentage": s.mastery_percentage,
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Cards: {s.total_words}  Learned: {s.learned_words}  Due: {s.due_today}")
    typer.echo(f"Reviews: {s.total_reviews}  Accuracy: {s.accuracy}%  Best streak: {s.streak}")
    typer.echo(f"Mastery: {s.mastery_percentage}%")


@app.command()
def activity(
    ctx: typer.Context,
    days: Annotated[int, typer.Option(help="Number of days to show.")] = 7,
):
    """Show daily review counts and the study-day streak."""
    service = _service_from_ctx(ctx)
    try:
        summary = service.activity(days)
    except BenkyoError as e:
        _fail(e)

    for entry in summary.days:
        bar = "#" * min(entry.reviewed, 50)
        typer.echo(f"{entry.day.isoformat()}  {entry.reviewed:>4} reviewed  {entry.learned:>3} learned  {bar}")
    typer.secho(f"Study-day streak: {summary.study_day_streak}", fg="cyan")


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Prompt side (word, kanji or grammar point).")],
    back: Annotated[str, typer.Argument(help="Answer side.")] = "",
    kind: Annotated[
        CardKind, typer.Option(help="Card kind.")
    ] = CardKind.VOCABULARY,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable).")] = None,
):
    """Add a new card."""
    service = _service_from_ctx(ctx)
    try:
        card = service.add_card(front, back, kind, tag or [])
    except BenkyoError as e:
        _fail(e)
    typer.secho(f"Added {card.id}", fg="green")


@app.command("import")
def import_deck(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML deck file.")],
):
    """Import cards from a YAML deck file. Cards whose id already exists are skipped."""
    from benkyo.infrastructure.deck_loader import load_deck

    service = _service_from_ctx(ctx)
    try:
        added, skipped = service.import_cards(load_deck(path))
    except BenkyoError as e:
        _fail(e)
    typer.secho(f"Imported {added} cards ({skipped} skipped).", fg="green")


@app.command()
def serve(
    ctx: typer.Context,
    port: Annotated[
        int | None, typer.Option(help="Port to bind the server to. Defaults to the configured port.")
    ] = None,
    host: Annotated[
        str | None, typer.Option(help="Host to bind the server to. Defaults to the configured host.")
    ] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    overrides = ctx.ensure_object(dict).get("overrides", {})
    try:
        config = _resolve_with_overrides(**overrides, host=host, port=port)
    except (BenkyoError, ValueError) as e:
        _fail(e)

    # The server process resolves its own config; global options reach it through the environment.
    if overrides.get("store") is not None:
        os.environ["BENKYO_STORE"] = config.store
    if overrides.get("store_path") is not None:
        os.environ["BENKYO_STORE_PATH"] = str(config.store_path)

    logger.info(f"Serving on {config.host}:{config.port} with the {config.store} store")
    uvicorn.run("benkyo.server:app", host=config.host, port=config.port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
