"""
Service Factory
Centralizes the logic for selecting the card store and building the review service.
"""

from benkyo.application.config import AppConfig
from benkyo.application.review_service import ReviewService
from benkyo.application.scheduler import ReviewPolicy
from benkyo.domain.ports import CardStore, Clock
from benkyo.infrastructure.clock import SystemClock
from benkyo.infrastructure.stores import JsonCardStore, MemoryCardStore


def get_card_store(config: AppConfig) -> CardStore:
    """
    Returns the CardStore implementation selected by config.
    """
    if config.store == "memory":
        return MemoryCardStore()
    return JsonCardStore(config.store_path)


def get_review_policy(config: AppConfig) -> ReviewPolicy:
    return ReviewPolicy(
        good_growth=config.good_growth,
        easy_growth=config.easy_growth,
        sticky_learned=config.sticky_learned,
    )


def get_review_service(config: AppConfig, clock: Clock | None = None) -> ReviewService:
    return ReviewService(
        store=get_card_store(config),
        clock=clock or SystemClock(),
        policy=get_review_policy(config),
    )
