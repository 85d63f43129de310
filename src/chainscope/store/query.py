"""Generic pagination, filtering and ordering shared by every entity kind.

Each kind contributes an :class:`EntityQuerySpec` (its table, filter
predicates, sortable columns and row decoder); :func:`paginate` owns the
page arithmetic and pushes filtering, ordering and counting down to SQL.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, List, Sequence, TypeVar

import sqlalchemy as sa
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from chainscope.store.errors import InvalidPaginationInput

DEFAULT_PAGE_NUM = 1
DEFAULT_PAGE_SIZE = 25

T = TypeVar("T")
F = TypeVar("F")
C = TypeVar("C")


class Ordering(str, Enum):
    """Sort direction."""

    ASC = "Asc"
    DESC = "Desc"


class Paginator(BaseModel):
    """1-based page selector."""

    page_num: int = DEFAULT_PAGE_NUM
    page_size: int = DEFAULT_PAGE_SIZE

    def check(self) -> "Paginator":
        """Return ``self`` after validating both bounds.

        Raises:
            InvalidPaginationInput: If either value is below 1.
        """

        if self.page_num < 1:
            raise InvalidPaginationInput(f"page_num must be >= 1, got {self.page_num}")
        if self.page_size < 1:
            raise InvalidPaginationInput(f"page_size must be >= 1, got {self.page_size}")
        return self

    @property
    def offset(self) -> int:
        return (self.page_num - 1) * self.page_size


class EntityInput(BaseModel, Generic[F, C]):
    """Query request accepted for every entity kind."""

    filtering: F | None = None
    ordering: Ordering = Ordering.ASC
    ordering_condition: C | None = None
    pagination: Paginator | None = None


class EntityPage(BaseModel, Generic[T]):
    """One page of records plus totals computed across all pages."""

    data: List[T] = Field(default_factory=list)
    total: int = 0
    page_count: int = 0


class EntityQuerySpec(Generic[T, F, C]):
    """Kind-specific capabilities consumed by :func:`paginate`."""

    table: sa.Table
    record_model: type[T]
    default_condition: C

    def filter_predicates(self, filtering: F) -> Sequence[sa.ColumnElement[bool]]:  # pragma: no cover - interface only
        raise NotImplementedError

    def order_columns(self, condition: C) -> Sequence[sa.ColumnElement[Any]]:  # pragma: no cover - interface only
        raise NotImplementedError

    def decode(self, row: Any) -> T:  # pragma: no cover - interface only
        raise NotImplementedError


def page_count(total: int, page_size: int) -> int:
    """Return ``ceil(total / page_size)``."""

    return -(-total // page_size)


def paginate(session: Session, spec: EntityQuerySpec[T, F, C], request: EntityInput[F, C] | None = None) -> EntityPage[T]:
    """Run ``request`` against ``spec.table`` and return the requested page.

    Args:
        session: Open session; both statements run inside it.
        spec: Capabilities for the entity kind being queried.
        request: Filter, ordering and pagination; defaults apply when omitted.

    Returns:
        The page of decoded records, the filtered total and the page count.
        Pages past the end come back empty with correct totals.

    Raises:
        InvalidPaginationInput: If the paginator is out of bounds. Raised
            before any statement is issued.
    """

    request = request or EntityInput()
    paginator = (request.pagination or Paginator()).check()
    predicates = list(spec.filter_predicates(request.filtering)) if request.filtering is not None else []

    count_stmt = sa.select(sa.func.count()).select_from(spec.table).where(*predicates)
    total = session.execute(count_stmt).scalar_one()
    pages = page_count(total, paginator.page_size)
    if paginator.offset >= total:
        return EntityPage[spec.record_model](data=[], total=total, page_count=pages)

    condition = request.ordering_condition if request.ordering_condition is not None else spec.default_condition
    direction = sa.desc if request.ordering is Ordering.DESC else sa.asc
    columns = list(spec.order_columns(condition))
    # id keeps the order total so consecutive pages never overlap
    if not any(column is spec.table.c.id for column in columns):
        columns.append(spec.table.c.id)
    order_by = [direction(column) for column in columns]

    stmt = (
        sa.select(spec.table)
        .where(*predicates)
        .order_by(*order_by)
        .limit(paginator.page_size)
        .offset(paginator.offset)
    )
    rows = session.execute(stmt).mappings().all()
    return EntityPage[spec.record_model](data=[spec.decode(row) for row in rows], total=total, page_count=pages)


__all__ = [
    "DEFAULT_PAGE_NUM",
    "DEFAULT_PAGE_SIZE",
    "Ordering",
    "Paginator",
    "EntityInput",
    "EntityPage",
    "EntityQuerySpec",
    "page_count",
    "paginate",
]
