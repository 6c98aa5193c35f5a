"""
Stable ordering of catalog packages.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Union

from pkgsearch.core.exceptions import InvalidSortKey
from pkgsearch.core.interfaces import PackageRecord, ScoredPackage, SortDirection, SortKey


logger = logging.getLogger(__name__)

SortItem = Union[PackageRecord, ScoredPackage]

_MISSING_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def _record(item: SortItem) -> PackageRecord:
    return item.package if isinstance(item, ScoredPackage) else item


def _relevance(item: SortItem) -> float:
    if not isinstance(item, ScoredPackage):
        raise InvalidSortKey(SortKey.RELEVANCE.value)
    return item.score


def _timestamp(value: Optional[datetime]) -> datetime:
    return value if value is not None else _MISSING_TIMESTAMP


_KEY_FUNCTIONS = {
    SortKey.RELEVANCE: _relevance,
    SortKey.DOWNLOADS: lambda item: _record(item).downloads,
    SortKey.STARS: lambda item: _record(item).stars_count,
    SortKey.CREATED: lambda item: _timestamp(_record(item).created),
    SortKey.UPDATED: lambda item: _timestamp(_record(item).updated),
}


class PackageSorter:
    """
    Orders packages by a sort key and direction.

    Sorting is stable in both directions: items with equal keys keep their
    input order, which keeps pagination reproducible across identical requests.
    Relevance ties are broken by package name, ascending.
    """

    def sort(
        self,
        items: Sequence[SortItem],
        key: Union[SortKey, str],
        direction: Optional[Union[SortDirection, str]] = None,
    ) -> List[SortItem]:
        """
        Sort packages.

        Args:
            items: Packages, or scored packages when sorting by relevance
            key: Sort key or its name
            direction: Sort direction; None uses the key's default direction

        Returns:
            A new, ordered list.

        Raises:
            InvalidSortKey: If the key is unknown, or is relevance and the items
                carry no scores.
        """
        sort_key = SortKey.parse(key)
        resolved = self.resolve_direction(sort_key, direction)
        key_function: Callable[[SortItem], object] = _KEY_FUNCTIONS[sort_key]

        ordered = list(items)
        if sort_key is SortKey.RELEVANCE:
            ordered.sort(key=lambda item: _record(item).name.casefold())
        # reverse=True keeps equal items in input order
        ordered.sort(key=key_function, reverse=resolved is SortDirection.DESC)

        logger.debug(f"Sorted {len(ordered)} packages by {sort_key.value} {resolved.value}")
        return ordered

    @staticmethod
    def resolve_direction(key: SortKey, direction: Optional[Union[SortDirection, str]]) -> SortDirection:
        """Resolve the explicit direction, or the key's default when none was given."""
        parsed = SortDirection.parse(direction)
        return parsed if parsed is not None else key.default_direction
