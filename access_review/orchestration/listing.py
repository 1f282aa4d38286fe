"""
Application listing - filter, search, sort, prioritise and paginate.

Per-state totals are counted over the search filter only, so a
client can show counts on every state tab while one tab is selected.

Priority: reviewers see DAC_REVIEW applications first unless they filtered
down to some other set of states; applicants (and reviewers who filtered
that way) see applications waiting on revisions first. The partition is
stable and runs over the whole result before it is paged.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from access_review.kernel.errors import InvalidRequestError
from access_review.kernel.models.application import REVISION_STATES, Application, ApplicationState

TOTAL = "TOTAL"


class SortField(str, Enum):
    """Columns an application list can be ordered by."""
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    STATE = "state"


class SortKey(NamedTuple):
    field: SortField
    descending: bool = False


DEFAULT_SORT = (SortKey(SortField.CREATED_AT),)


def parse_sort(values: Optional[Sequence[str]]) -> List[SortKey]:
    """
    Parse ``field`` / ``-field`` sort terms.

    Raises:
        InvalidRequestError: unknown sort field
    """
    keys: List[SortKey] = []
    for raw in values or ():
        descending = raw.startswith("-")
        name = raw[1:] if descending else raw
        try:
            keys.append(SortKey(SortField(name), descending))
        except ValueError:
            raise InvalidRequestError(
                f"Cannot sort applications by {name!r}",
                field="sort",
                allowed=[f.value for f in SortField],
            ) from None
    return keys


class ApplicationQuery(BaseModel):
    """Filters and paging for one listing call."""

    model_config = ConfigDict(frozen=True)

    states: List[ApplicationState] = Field(default_factory=list)
    search: Optional[str] = None
    sort: List[SortKey] = Field(default_factory=lambda: list(DEFAULT_SORT))
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)
    applicant_view: bool = False


class ApplicationPage(BaseModel):
    """One page of applications plus per-state totals."""

    items: List[Application]
    total: int
    page: int
    page_size: int
    has_more: bool
    counts: Dict[str, int]


def matches_search(application: Application, search: Optional[str]) -> bool:
    """
    Case-insensitive match of any search term against the application id,
    applicant name, institutional email or primary affiliation.
    """
    terms = (search or "").lower().split()
    if not terms:
        return True
    contents = application.contents
    name = f"{contents.applicant_first_name or ''} {contents.applicant_last_name or ''}"
    haystack = [
        str(application.id),
        name,
        contents.applicant_institutional_email or "",
        contents.applicant_primary_affiliation or "",
    ]
    haystack = [value.lower() for value in haystack]
    return any(term in value for term in terms for value in haystack)


def priority_states(states: Sequence[ApplicationState], applicant_view: bool) -> FrozenSet[ApplicationState]:
    """States listed ahead of the rest for this query."""
    if not applicant_view and (not states or (len(states) > 1 and ApplicationState.DAC_REVIEW in states)):
        return frozenset({ApplicationState.DAC_REVIEW})
    return REVISION_STATES


def _sort_value(application: Application, field: SortField):
    if field == SortField.STATE:
        return application.state.value
    return getattr(application, field.value)


def sort_applications(applications: Iterable[Application], keys: Sequence[SortKey]) -> List[Application]:
    ordered = list(applications)
    # stable sorts applied last key first give a multi-key order
    for key in reversed(keys or DEFAULT_SORT):
        ordered.sort(key=lambda a: _sort_value(a, key.field), reverse=key.descending)
    return ordered


def count_by_state(applications: Iterable[Application]) -> Dict[str, int]:
    counts = {state.value: 0 for state in ApplicationState}
    total = 0
    for application in applications:
        counts[application.state.value] += 1
        total += 1
    counts[TOTAL] = total
    return counts


def list_applications(applications: Iterable[Application], query: ApplicationQuery) -> ApplicationPage:
    visible = [a for a in applications if matches_search(a, query.search)]
    counts = count_by_state(visible)

    selected = [a for a in visible if not query.states or a.state in query.states]
    ordered = sort_applications(selected, query.sort)
    first = priority_states(query.states, query.applicant_view)
    ordered = [a for a in ordered if a.state in first] + [a for a in ordered if a.state not in first]

    start = (query.page - 1) * query.page_size
    items = ordered[start:start + query.page_size]
    return ApplicationPage(
        items=items,
        total=len(ordered),
        page=query.page,
        page_size=query.page_size,
        has_more=start + len(items) < len(ordered),
        counts=counts,
    )
