import logging
import time
from contextlib import asynccontextmanager
from datetime import date, datetime
from functools import lru_cache
from typing import Annotated, Literal

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from benkyo.application.review_service import ReviewService
from benkyo.consts import VERSION
from benkyo.domain.errors import (
    BenkyoError,
    ConcurrentUpdateConflict,
    InvalidArgument,
    NotFound,
)
from benkyo.domain.models import Card, CardKind, DailyActivity, ReviewState, Stats

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("benkyo.server")


@lru_cache(maxsize=1)
def get_review_service() -> ReviewService:
    """Build the process-wide review service from resolved configuration."""
    from benkyo.application.config import resolve_config
    from benkyo.application.factory import get_review_service as build_service

    config = resolve_config()
    logging.getLogger("benkyo").setLevel(config.log_level)
    logger.info(f"Using {config.store} card store ({config.store_path})")
    return build_service(config)


Service = Annotated[ReviewService, Depends(get_review_service)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"benkyo server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("benkyo server shutting down...")


app = FastAPI(
    title="benkyo",
    description="Spaced-repetition review scheduler for Japanese study cards.",
    version=VERSION,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ConcurrentUpdateConflict)
async def conflict_handler(request: Request, exc: ConcurrentUpdateConflict):
    # Clients must reload the card before asking again; retrying would double-count.
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "currentVersion": exc.actual},
    )


@app.exception_handler(BenkyoError)
async def benkyo_error_handler(request: Request, exc: BenkyoError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewStateResponse(CamelModel):
    is_learned: bool
    reviews: int
    correct_count: int
    incorrect_count: int
    streak: int
    interval_days: int
    last_reviewed_at: datetime | None
    next_review_at: datetime | None

    @classmethod
    def from_state(cls, state: ReviewState) -> "ReviewStateResponse":
        return cls(
            is_learned=state.is_learned,
            reviews=state.reviews,
            correct_count=state.correct_count,
            incorrect_count=state.incorrect_count,
            streak=state.streak,
            interval_days=state.interval_days,
            last_reviewed_at=state.last_reviewed_at,
            next_review_at=state.next_review_at,
        )


class ReviewResponse(ReviewStateResponse):
    id: str
    version: int

    @classmethod
    def from_card(cls, card: Card) -> "ReviewResponse":
        base = ReviewStateResponse.from_state(card.state)
        return cls(id=card.id, version=card.version, **base.model_dump())


class CardResponse(CamelModel):
    id: str
    front: str
    back: str
    kind: CardKind
    tags: list[str]
    is_bookmarked: bool
    version: int
    state: ReviewStateResponse

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            front=card.front,
            back=card.back,
            kind=card.kind,
            tags=list(card.tags),
            is_bookmarked=card.is_bookmarked,
            version=card.version,
            state=ReviewStateResponse.from_state(card.state),
        )


class StatsResponse(CamelModel):
    total_words: int
    learned_words: int
    due_today: int
    total_reviews: int
    accuracy: int
    streak: int
    mastery_percentage: int

    @classmethod
    def from_stats(cls, stats: Stats) -> "StatsResponse":
        return cls(
            total_words=stats.total_words,
            learned_words=stats.learned_words,
            due_today=stats.due_today,
            total_reviews=stats.total_reviews,
            accuracy=stats.accuracy,
            streak=stats.streak,
            mastery_percentage=stats.mastery_percentage,
        )


class DailyActivityResponse(CamelModel):
    day: date
    reviewed: int
    learned: int

    @classmethod
    def from_activity(cls, activity: DailyActivity) -> "DailyActivityResponse":
        return cls(day=activity.day, reviewed=activity.reviewed, learned=activity.learned)


class ActivityResponse(CamelModel):
    days: list[DailyActivityResponse]
    study_day_streak: int


class ReviewRequest(CamelModel):
    # Validated by the scheduler so unknown ratings map to 400, not 422.
    rating: str
    expected_version: int | None = Field(default=None, ge=0)


class NewCardRequest(CamelModel):
    front: str = Field(min_length=1)
    back: str = ""
    kind: Literal["vocabulary", "kanji", "grammar"] = "vocabulary"
    tags: list[str] = Field(default_factory=list)
    id: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


start_time = time.time()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.post("/cards/{card_id}/review", response_model=ReviewResponse, response_model_by_alias=True)
def review_card(card_id: str, req: ReviewRequest, service: Service):
    """
    Rate a card and return its updated review state.
    """
    card = service.review(card_id, req.rating, expected_version=req.expected_version)
    return ReviewResponse.from_card(card)


@app.get("/cards/due", response_model=list[CardResponse], response_model_by_alias=True)
def due_cards(
    service: Service,
    limit: Annotated[int | None, Query(ge=0)] = None,
):
    """Due cards in review order: new cards first, then by next review time."""
    return [CardResponse.from_card(c) for c in service.due_queue(limit)]


@app.get("/cards/stats", response_model=StatsResponse, response_model_by_alias=True)
def card_stats(service: Service):
    return StatsResponse.from_stats(service.stats())


@app.get("/activity", response_model=ActivityResponse, response_model_by_alias=True)
def activity(
    service: Service,
    days: Annotated[int, Query(gt=0, le=366)] = 7,
):
    summary = service.activity(days)
    return ActivityResponse(
        days=[DailyActivityResponse.from_activity(a) for a in summary.days],
        study_day_streak=summary.study_day_streak,
    )


@app.post("/cards", response_model=CardResponse, response_model_by_alias=True, status_code=201)
def add_card(req: NewCardRequest, service: Service):
    card = service.add_card(req.front, req.back, req.kind, req.tags, card_id=req.id)
    return CardResponse.from_card(card)


@app.get("/cards/{card_id}", response_model=CardResponse, response_model_by_alias=True)
def get_card(card_id: str, service: Service):
    return CardResponse.from_card(service.get_card(card_id))


@app.post("/cards/{card_id}/bookmark", response_model=CardResponse, response_model_by_alias=True)
def toggle_bookmark(card_id: str, service: Service):
    return CardResponse.from_card(service.toggle_bookmark(card_id))
