"""Page window arithmetic shared by every list operation.

List operations fetch one window of rows ordered by primary key and report
the total row count alongside it, so callers can tell whether another page
follows.

Example:
-------
Fetch the second page of fifty rows::

    options = PaginationOptions(page_number=1, page_size=50)
    page = await service.list_organizations(options)
    if page.has_more:
        ...

"""

from __future__ import annotations

import dataclasses

DEFAULT_PAGE_NUMBER = 0
DEFAULT_PAGE_SIZE = 50


class InvalidPaginationError(ValueError):
    """Raised when pagination parameters cannot describe a page window."""

    def __init__(self, name: str, value: int, minimum: int) -> None:
        """Build a consistent error message for the invalid parameter."""
        self.name = name
        self.value = value
        msg = f"{name} must be >= {minimum}, got {value}"
        super().__init__(msg)


def has_more(page_number: int, page_size: int, total_count: int) -> bool:
    """Return whether rows exist beyond the requested page.

    No validation happens here; callers build ``PaginationOptions`` first,
    which rejects a zero page size.

    Examples
    --------
    >>> has_more(0, 50, 100)
    True
    >>> has_more(1, 50, 100)
    False

    """
    return (page_number + 1) * page_size < total_count


@dataclasses.dataclass(frozen=True, slots=True)
class PaginationOptions:
    """Requested page window.

    Attributes
    ----------
    page_number
        Zero-based index of the page to fetch.
    page_size
        Maximum number of rows per page; must be at least one.

    """

    page_number: int = DEFAULT_PAGE_NUMBER
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        """Reject windows that cannot be computed."""
        if self.page_number < 0:
            raise InvalidPaginationError("page_number", self.page_number, 0)
        if self.page_size < 1:
            raise InvalidPaginationError("page_size", self.page_size, 1)

    @property
    def offset(self) -> int:
        """Number of ordered rows preceding this page."""
        return self.page_number * self.page_size

    @property
    def limit(self) -> int:
        """Maximum number of rows to fetch for this page."""
        return self.page_size

    def has_more(self, total_count: int) -> bool:
        """Return whether rows exist beyond this page."""
        return has_more(self.page_number, self.page_size, total_count)


@dataclasses.dataclass(frozen=True, slots=True)
class Page[T]:
    """One window of list results with the information to request the next."""

    items: tuple[T, ...]
    total_count: int
    has_more: bool

    @classmethod
    def build(
        cls, items: list[T], total_count: int, options: PaginationOptions
    ) -> Page[T]:
        """Assemble a page from fetched rows and the overall row count."""
        return cls(
            items=tuple(items),
            total_count=total_count,
            has_more=options.has_more(total_count),
        )


__all__ = [
    "DEFAULT_PAGE_NUMBER",
    "DEFAULT_PAGE_SIZE",
    "InvalidPaginationError",
    "Page",
    "PaginationOptions",
    "has_more",
]
