"""Filtered, searched and sorted views over the reminder collection."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from . import config
from .models import Reminder


class FilterStatus(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    PAUSED = "paused"


class SortBy(str, Enum):
    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"
    PRIORITY = "priority"
    CREATED_DESC = "created-desc"


SORT_LABELS = {
    SortBy.DATE_ASC: "Date (Oldest First)",
    SortBy.DATE_DESC: "Date (Newest First)",
    SortBy.PRIORITY: "Priority (High to Low)",
    SortBy.CREATED_DESC: "Recently Created",
}


@dataclass(frozen=True)
class Filters:
    status: FilterStatus = FilterStatus.ALL


def project(
    reminders: Iterable[Reminder],
    filters: Filters,
    search_query: str,
    sort_by: SortBy,
) -> list[Reminder]:
    """Derive the list shown to the user.

    Filters by status, keeps reminders whose title or description contains
    the query (case-insensitive, blank query keeps everything), then sorts.
    Sorting is stable, so ties keep their collection order.
    """
    result = list(reminders)

    if filters.status is not FilterStatus.ALL:
        want_active = filters.status is FilterStatus.ACTIVE
        result = [r for r in result if r.active == want_active]

    query = (search_query or "").strip().lower()
    if query:
        result = [
            r for r in result
            if query in r.title.lower() or query in (r.description or "").lower()
        ]

    if sort_by is SortBy.DATE_ASC:
        result.sort(key=lambda r: r.anchor)
    elif sort_by is SortBy.DATE_DESC:
        result.sort(key=lambda r: r.anchor, reverse=True)
    elif sort_by is SortBy.PRIORITY:
        result.sort(key=lambda r: r.priority.weight, reverse=True)
    elif sort_by is SortBy.CREATED_DESC:
        result.sort(key=lambda r: r.created_at, reverse=True)

    return result


@dataclass
class ViewState:
    """The current filter, search and sort selection. Never persisted."""
    filters: Filters = field(default_factory=lambda: Filters(FilterStatus(config.DEFAULT_FILTER_STATUS)))
    search_query: str = ""
    sort_by: SortBy = field(default_factory=lambda: SortBy(config.DEFAULT_SORT_BY))

    def apply(self, reminders: Iterable[Reminder]) -> list[Reminder]:
        return project(reminders, self.filters, self.search_query, self.sort_by)
