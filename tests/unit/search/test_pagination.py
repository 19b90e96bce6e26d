import pytest
from hypothesis import given, strategies as st

from ruido.domain.search import coerce_page, get_pagination, total_pages
from ruido.domain.search.pagination import MAX_OFFSET
from ruido.settings import PAGE_SIZE


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 1),
        ("", 1),
        ("abc", 1),
        ("0", 1),
        ("-4", 1),
        (0, 1),
        (True, 1),
        ("nan", 1),
        ("inf", 1),
        ("3", 3),
        (" 2 ", 2),
        ("2.9", 2),
        (5, 5),
    ],
)
def test_coerce_page(raw, expected):
    assert coerce_page(raw) == expected


@pytest.mark.unit
@given(st.one_of(st.none(), st.text(), st.integers(), st.floats(allow_nan=True, allow_infinity=True)))
def test_coerce_page_always_returns_a_positive_int(raw):
    page = coerce_page(raw)
    assert isinstance(page, int)
    assert page >= 1


@pytest.mark.unit
@given(st.integers(min_value=1, max_value=10_000))
def test_pagination_window_follows_page(page):
    pagination = get_pagination(page)
    assert pagination.page == page
    assert pagination.take == PAGE_SIZE == 24
    assert pagination.skip == (page - 1) * PAGE_SIZE


@pytest.mark.unit
@pytest.mark.parametrize(
    "total, expected",
    [(0, 0), (1, 1), (24, 1), (25, 2), (48, 2), (49, 3)],
)
def test_total_pages_rounds_up(total, expected):
    assert total_pages(total) == expected


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["1e20", "99999999999999999999", 10**30, 1e300])
def test_huge_pages_keep_offset_in_bigint_range(raw):
    pagination = get_pagination(raw)
    assert pagination.page > 1
    assert 0 < pagination.skip <= MAX_OFFSET
    assert pagination.skip > MAX_OFFSET - 2 * PAGE_SIZE


@pytest.mark.unit
@given(st.integers(min_value=1), st.integers(min_value=1, max_value=500))
def test_offset_never_exceeds_bigint(page, page_size):
    assert get_pagination(page, page_size).skip <= MAX_OFFSET
