"""
Pagination of ordered result sets.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple, TypeVar

from pkgsearch.core.exceptions import ConfigurationError
from pkgsearch.core.interfaces import PageDescriptor, SortDirection


logger = logging.getLogger(__name__)

T = TypeVar("T")

# API clients have always received page + 1 as the "next" link, including on
# the last page. Leave False until clients are confirmed to expect a clamped value.
CLAMP_NEXT_PAGE_LINK = False


class Paginator:
    """
    Slices ordered sequences into fixed-size pages.
    """

    def __init__(self, page_size: int, clamp_next: bool = CLAMP_NEXT_PAGE_LINK):
        """
        Initialize the paginator.

        Args:
            page_size: Number of items per page.
            clamp_next: Whether the "next" link stops at the last page.

        Raises:
            ConfigurationError: If ``page_size`` is not a positive integer.
        """
        if not isinstance(page_size, int) or isinstance(page_size, bool) or page_size < 1:
            raise ConfigurationError(f"Page size must be a positive integer, got {page_size!r}")
        self.page_size = page_size
        self.clamp_next = clamp_next

    @staticmethod
    def total_pages(total_count: int, page_size: int) -> int:
        """Number of pages for ``total_count`` items; at least one."""
        return max(1, math.ceil(total_count / page_size))

    def paginate(
        self,
        items: Sequence[T],
        page: int,
        page_size: Optional[int] = None,
        direction: Optional[SortDirection] = None,
    ) -> Tuple[List[T], PageDescriptor]:
        """
        Select one page of items.

        Args:
            items: Ordered items.
            page: 1-based page number. Values below 1 select the first page.
            page_size: Items per page for this call. Defaults to the configured size.
            direction: Sort direction the items were ordered in, for link metadata.

        Returns:
            The page's items, empty when ``page`` is past the last page, and
            its pagination metadata.
        """
        if page_size is None:
            page_size = self.page_size
        elif isinstance(page_size, bool) or page_size < 1:
            raise ValueError(f"Page size must be a positive integer, got {page_size!r}")
        if page < 1:
            page = 1

        total_count = len(items)
        total_pages = self.total_pages(total_count, page_size)

        start = min((page - 1) * page_size, total_count)
        end = min(page * page_size, total_count)
        page_items = list(items[start:end])

        next_page = page + 1
        if self.clamp_next:
            next_page = min(next_page, total_pages)

        descriptor = PageDescriptor(
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            next_page=next_page,
            direction=direction,
        )
        logger.debug(f"Page {page}/{total_pages}: {len(page_items)} of {total_count} items")
        return page_items, descriptor
