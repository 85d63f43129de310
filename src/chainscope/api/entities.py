"""Read-side routers: paginated queries and id lookups per entity kind."""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends

from chainscope.api.auth import api_settings
from chainscope.settings import Settings
from chainscope.store.entity_queries import (
    AddressCondition,
    AddressFilter,
    AddressRecord,
    AssetCondition,
    AssetFilter,
    AssetRecord,
    CaseCondition,
    CaseFilter,
    CaseRecord,
    ReporterCondition,
    ReporterFilter,
    ReporterRecord,
)
from chainscope.store.entity_store import EntityStore
from chainscope.store.identity import EntityKind
from chainscope.store.query import EntityInput, EntityPage, Paginator

router = APIRouter(tags=["entities"])


@lru_cache
def get_entity_store() -> EntityStore:
    """Dependency provider for the shared EntityStore instance."""

    return EntityStore()


def _with_default_page(request: EntityInput, settings: Settings) -> EntityInput:
    if request.pagination is not None:
        return request
    return request.model_copy(update={"pagination": Paginator(page_size=settings.api.default_page_size)})


@router.post("/addresses/query", response_model=EntityPage[AddressRecord])
def query_addresses(
    request: EntityInput[AddressFilter, AddressCondition],
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(api_settings),
) -> EntityPage[AddressRecord]:
    return store.list_addresses(_with_default_page(request, settings))


@router.post("/assets/query", response_model=EntityPage[AssetRecord])
def query_assets(
    request: EntityInput[AssetFilter, AssetCondition],
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(api_settings),
) -> EntityPage[AssetRecord]:
    return store.list_assets(_with_default_page(request, settings))


@router.post("/cases/query", response_model=EntityPage[CaseRecord])
def query_cases(
    request: EntityInput[CaseFilter, CaseCondition],
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(api_settings),
) -> EntityPage[CaseRecord]:
    return store.list_cases(_with_default_page(request, settings))


@router.post("/reporters/query", response_model=EntityPage[ReporterRecord])
def query_reporters(
    request: EntityInput[ReporterFilter, ReporterCondition],
    store: EntityStore = Depends(get_entity_store),
    settings: Settings = Depends(api_settings),
) -> EntityPage[ReporterRecord]:
    return store.list_reporters(_with_default_page(request, settings))


@router.get("/addresses/{entity_id}", response_model=AddressRecord)
def get_address(entity_id: str, store: EntityStore = Depends(get_entity_store)):
    return store.get(EntityKind.ADDRESS, entity_id)


@router.get("/assets/{entity_id}", response_model=AssetRecord)
def get_asset(entity_id: str, store: EntityStore = Depends(get_entity_store)):
    return store.get(EntityKind.ASSET, entity_id)


@router.get("/cases/{entity_id}", response_model=CaseRecord)
def get_case(entity_id: str, store: EntityStore = Depends(get_entity_store)):
    return store.get(EntityKind.CASE, entity_id)


@router.get("/reporters/{entity_id}", response_model=ReporterRecord)
def get_reporter(entity_id: str, store: EntityStore = Depends(get_entity_store)):
    return store.get(EntityKind.REPORTER, entity_id)
