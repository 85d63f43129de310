"""Unit tests for the generic pagination and filter layer."""

from __future__ import annotations

import uuid

import pytest

from chainscope.store.entity_queries import (
    AddressCondition,
    AddressFilter,
    CaseCondition,
    CaseFilter,
    ReporterFilter,
)
from chainscope.store.errors import InvalidPaginationInput, UnknownEnumValue
from chainscope.store.payloads import AddressPayload, CasePayload, ReporterPayload
from chainscope.store.query import EntityInput, Ordering, Paginator, page_count

CASE_UUID = uuid.UUID("aa1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d")
REPORTER_UUID = uuid.UUID("bb1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d")


def _seed_addresses(writer, count: int, *, category: str = "Scam", network: str = "Ethereum", start: int = 0) -> None:
    payloads = [
        AddressPayload(
            address=f"0x{index:04d}",
            case_id=CASE_UUID,
            reporter_id=REPORTER_UUID,
            risk=index % 10,
            category=category,
            confirmations=index,
        )
        for index in range(start, start + count)
    ]
    writer.push_many(network, payloads)


def _page(store, *, page_num: int, page_size: int, filtering=None, **kwargs):
    request = EntityInput[AddressFilter, AddressCondition](
        filtering=filtering,
        pagination=Paginator(page_num=page_num, page_size=page_size),
        **kwargs,
    )
    return store.list_addresses(request)


def test_thirty_records_split_into_three_full_pages(writer, store) -> None:
    _seed_addresses(writer, 30)

    pages = [_page(store, page_num=num, page_size=10) for num in (1, 2, 3)]

    seen = [record.id for page in pages for record in page.data]
    assert all(len(page.data) == 10 for page in pages)
    assert len(set(seen)) == 30
    assert seen == sorted(seen)
    for page in pages:
        assert page.total == 30
        assert page.page_count == 3


def test_page_past_the_end_is_empty_with_totals(writer, store) -> None:
    _seed_addresses(writer, 30)

    page = _page(store, page_num=4, page_size=10)

    assert page.data == []
    assert page.total == 30
    assert page.page_count == 3


def test_filter_total_ignores_page_size(writer, store) -> None:
    _seed_addresses(writer, 12, category="Scam")
    _seed_addresses(writer, 8, category="Mixer", start=100)

    for size in (1, 5, 50):
        page = _page(store, page_num=1, page_size=size, filtering=AddressFilter(category="Mixer"))
        assert page.total == 8
        assert page.page_count == page_count(8, size)
        assert all(record.category == "Mixer" for record in page.data)


def test_filter_by_network_and_risk_range(writer, store) -> None:
    _seed_addresses(writer, 20, network="Ethereum")
    _seed_addresses(writer, 20, network="Bsc")

    page = _page(
        store,
        page_num=1,
        page_size=100,
        filtering=AddressFilter(network="Bsc", min_risk=3, max_risk=4),
    )

    assert page.total == 4
    assert {record.network for record in page.data} == {"Bsc"}
    assert {record.risk for record in page.data} == {3, 4}


def test_descending_order_on_chosen_column(writer, store) -> None:
    _seed_addresses(writer, 10)

    page = _page(
        store,
        page_num=1,
        page_size=3,
        ordering=Ordering.DESC,
        ordering_condition=AddressCondition.RISK,
    )

    assert [record.risk for record in page.data] == [9, 8, 7]


def test_defaults_apply_when_request_is_omitted(writer, store) -> None:
    _seed_addresses(writer, 3)

    page = store.list_addresses()

    assert page.total == 3
    assert page.page_count == 1
    assert [record.address for record in page.data] == ["0x0000", "0x0001", "0x0002"]


def test_empty_store_has_zero_pages(store) -> None:
    page = store.list_cases()

    assert page.total == 0
    assert page.page_count == 0
    assert page.data == []


@pytest.mark.parametrize("page_num,page_size", [(0, 10), (1, 0), (-1, 5)])
def test_invalid_pagination_is_rejected(store, page_num: int, page_size: int) -> None:
    with pytest.raises(InvalidPaginationInput):
        _page(store, page_num=page_num, page_size=page_size)


def test_unknown_enum_in_filter_is_rejected(store) -> None:
    with pytest.raises(UnknownEnumValue):
        _page(store, page_num=1, page_size=10, filtering=AddressFilter(category="Phishing"))


def test_case_and_reporter_queries_decode_external_names(writer, store) -> None:
    writer.push_many(
        "Solana",
        [
            CasePayload(id=CASE_UUID, name="Rug", url="https://example.org/c", status="Closed", reporter_id=REPORTER_UUID),
            ReporterPayload(
                id=REPORTER_UUID,
                account="reporter-account",
                role="Authority",
                status="Active",
                name="Authority",
                url="https://example.org/r",
                stake=1,
                unlock_timestamp=2,
            ),
        ],
    )

    cases = store.list_cases(
        EntityInput[CaseFilter, CaseCondition](filtering=CaseFilter(status="Closed"), ordering_condition=CaseCondition.NAME)
    )
    reporters = store.list_reporters(EntityInput(filtering=ReporterFilter(role="Authority")))

    assert cases.total == 1
    assert cases.data[0].status == "Closed"
    assert cases.data[0].case_id == CASE_UUID
    assert reporters.total == 1
    assert reporters.data[0].role == "Authority"
    assert reporters.data[0].status == "Active"


def test_page_count_rounds_up() -> None:
    assert page_count(0, 10) == 0
    assert page_count(30, 10) == 3
    assert page_count(31, 10) == 4


@pytest.mark.parametrize("ordering", [Ordering.ASC, Ordering.DESC])
def test_decimal_string_columns_sort_numerically(writer, store, ordering: Ordering) -> None:
    _seed_addresses(writer, 12, start=95)
    _seed_addresses(writer, 3, start=8)

    page = _page(
        store,
        page_num=1,
        page_size=20,
        ordering=ordering,
        ordering_condition=AddressCondition.CONFIRMATIONS,
    )

    confirmations = [int(record.confirmations) for record in page.data]
    expected = sorted([8, 9, 10] + list(range(95, 107)))
    assert confirmations == (expected if ordering is Ordering.ASC else expected[::-1])
