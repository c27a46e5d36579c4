"""Unit tests for page window arithmetic."""

from __future__ import annotations

import pytest

from dumont.pagination import (
    InvalidPaginationError,
    Page,
    PaginationOptions,
    has_more,
)


@pytest.mark.parametrize(
    ("total", "page_number", "page_size", "expected"),
    [
        (100, 0, 50, True),
        (100, 1, 50, False),
        (10, 0, 50, False),
        (51, 0, 50, True),
        (50, 0, 50, False),
        (0, 0, 1, False),
    ],
)
def test_has_more(total: int, page_number: int, page_size: int, expected: bool) -> None:
    """has_more reports whether rows exist beyond the requested page."""
    assert has_more(page_number, page_size, total) is expected, (
        f"has_more({page_number}, {page_size}, {total}) should be {expected}"
    )


def test_defaults_match_first_page_of_fifty() -> None:
    """Default options select the first fifty rows."""
    options = PaginationOptions()
    assert (options.offset, options.limit) == (0, 50)


def test_offset_skips_preceding_pages() -> None:
    """The offset counts every row on earlier pages."""
    options = PaginationOptions(page_number=3, page_size=20)
    assert options.offset == 60
    assert options.limit == 20


@pytest.mark.parametrize(
    ("page_number", "page_size", "field"),
    [(0, 0, "page_size"), (0, -5, "page_size"), (-1, 10, "page_number")],
)
def test_rejects_impossible_windows(
    page_number: int, page_size: int, field: str
) -> None:
    """A zero or negative size and a negative page number are rejected."""
    with pytest.raises(InvalidPaginationError) as excinfo:
        PaginationOptions(page_number=page_number, page_size=page_size)
    assert excinfo.value.name == field


def test_page_build_computes_has_more() -> None:
    """Page.build freezes the items and derives has_more from the total."""
    page = Page.build(["a", "b"], total_count=5, options=PaginationOptions(0, 2))
    assert page.items == ("a", "b")
    assert page.total_count == 5
    assert page.has_more is True

    last = Page.build(["e"], total_count=5, options=PaginationOptions(2, 2))
    assert last.has_more is False
