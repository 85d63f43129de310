"""Push endpoints used by chain indexers."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from chainscope.api.auth import require_api_key
from chainscope.store.entity_writer import EntityWriter
from chainscope.store.payloads import PushBatch, PushEvent

router = APIRouter(prefix="/events", tags=["events"])
LOGGER = logging.getLogger(__name__)


class PushResponse(BaseModel):
    id: str


class PushBatchResponse(BaseModel):
    ids: List[str] = Field(default_factory=list)
    count: int = 0


@lru_cache
def get_entity_writer() -> EntityWriter:
    """Dependency provider for the shared EntityWriter instance."""

    return EntityWriter()


@router.post("", response_model=PushResponse, status_code=status.HTTP_202_ACCEPTED)
def push_event(
    event: PushEvent,
    _: None = Depends(require_api_key),
    writer: EntityWriter = Depends(get_entity_writer),
) -> PushResponse:
    """Upsert one entity observed on ``event.network``."""

    entity_id = writer.push_event(event)
    LOGGER.debug("Accepted %s push for %s", event.data.kind, entity_id)
    return PushResponse(id=entity_id)


@router.post("/batch", response_model=PushBatchResponse, status_code=status.HTTP_202_ACCEPTED)
def push_batch(
    batch: PushBatch,
    _: None = Depends(require_api_key),
    writer: EntityWriter = Depends(get_entity_writer),
) -> PushBatchResponse:
    """Upsert every payload of ``batch`` in one transaction; all or nothing."""

    ids = writer.push_many(batch.network, batch.data)
    LOGGER.info("Accepted batch of %d payloads on %s", len(ids), batch.network)
    return PushBatchResponse(ids=ids, count=len(ids))
