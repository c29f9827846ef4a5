"""
Per-application service wiring.

:func:`build_services` constructs every collaborator once from the
settings; routes reach them through :func:`get_services`.  Nothing in
here holds request state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import current_app

from audit_api.config import Settings
from audit_api.infrastructure.store import InMemoryStore, RecordStore
from audit_api.services.aggregation_service import DailyAggregator
from audit_api.services.auth_service import TokenService, UserDirectory
from audit_api.services.normalizer_service import RecordNormalizer
from audit_api.services.query_service import PagedQueryExecutor
from audit_api.services.validation_service import DateRangeValidator, PaginationResolver

EXTENSION_KEY = "audit_api"


@dataclass(frozen=True)
class Services:
    settings: Settings
    store: RecordStore
    executor: PagedQueryExecutor
    normalizer: RecordNormalizer
    aggregator: DailyAggregator
    tokens: TokenService
    users: UserDirectory


def _default_store(settings: Settings) -> RecordStore:
    if settings.store_backend == "firestore":
        from audit_api.infrastructure.firestore_store import FirestoreStore
        return FirestoreStore()
    return InMemoryStore()


def build_services(settings: Settings, store: Optional[RecordStore] = None) -> Services:
    store = store if store is not None else _default_store(settings)
    executor = PagedQueryExecutor(
        store=store,
        date_validator=DateRangeValidator(settings.pagination),
        pagination=PaginationResolver(settings.pagination),
    )
    return Services(
        settings=settings,
        store=store,
        executor=executor,
        normalizer=RecordNormalizer(),
        aggregator=DailyAggregator(),
        tokens=TokenService(settings),
        users=UserDirectory(settings.users),
    )


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
