# lapse/domain/filters.py
"""
Domain models for the filter sidebar: filter state, dimensions and options.
"""
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict, FrozenSet

from ..exceptions import UnknownDimensionError

ALL = "All"


class FilterDimension(Enum):
    """
    Filterable dimensions that have a dropdown of options.

    The value is both the FilterState attribute and the FlatItem attribute
    the options are drawn from.
    """
    JURISDICTION = "jurisdiction"
    MANAGEMENT_DOMAIN = "management_domain"
    ACT_NAME = "act_name"
    LEGISLATION_NAME = "legislation_name"
    CLAUSE_TYPE = "clause_type"
    ACTIONABLE_TYPE = "actionable_type"
    RESPONSIBLE_OFFICIAL = "responsible_official"
    DISCRETION_TYPE = "discretion_type"

    @classmethod
    def parse(cls, value) -> 'FilterDimension':
        """
        Accept a FilterDimension, its value ("act_name") or the camelCase
        form used by the web client ("actName").

        Raises:
            UnknownDimensionError: if nothing matches
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        normalized = "".join(f"_{c.lower()}" if c.isupper() else c for c in text).lstrip("_")
        for member in cls:
            if member.value in (text, normalized) or member.name == text:
                return member
        raise UnknownDimensionError(text)

    @property
    def section_scoped(self) -> bool:
        """Whether this predicate is evaluated per section rather than per row."""
        return self not in ROW_SCOPED_DIMENSIONS


ROW_SCOPED_DIMENSIONS: FrozenSet[FilterDimension] = frozenset({
    FilterDimension.JURISDICTION,
    FilterDimension.ACT_NAME,
    FilterDimension.LEGISLATION_NAME,
})

# Changing a key dimension resets the dimensions listed for it
DOWNSTREAM: Dict[FilterDimension, FrozenSet[FilterDimension]] = {
    FilterDimension.JURISDICTION: frozenset({FilterDimension.ACT_NAME, FilterDimension.LEGISLATION_NAME}),
    FilterDimension.MANAGEMENT_DOMAIN: frozenset({FilterDimension.ACT_NAME, FilterDimension.LEGISLATION_NAME}),
    FilterDimension.ACT_NAME: frozenset({FilterDimension.LEGISLATION_NAME}),
}


@dataclass(frozen=True)
class FilterState:
    """
    Current selection of every filter.

    "All" (or an empty search term) means the filter is inactive.
    Use :meth:`with_change` rather than ``dataclasses.replace`` so the
    cascading resets are applied.
    """
    jurisdiction: str = ALL
    management_domain: str = ALL
    act_name: str = ALL
    legislation_name: str = ALL
    search_term: str = ""
    clause_type: str = ALL
    actionable_type: str = ALL
    responsible_official: str = ALL
    discretion_type: str = ALL

    def value_of(self, dimension: FilterDimension) -> str:
        return getattr(self, dimension.value)

    def is_active(self, dimension: FilterDimension) -> bool:
        value = (self.value_of(dimension) or "").strip()
        return bool(value) and value != ALL

    @property
    def search_active(self) -> bool:
        return bool(self.search_term and self.search_term.strip())

    def with_change(self, key, value: str) -> 'FilterState':
        """
        Return a copy with *key* set to *value* and downstream filters reset.

        Setting ``act_name`` clears ``legislation_name``; setting
        ``management_domain`` or ``jurisdiction`` clears both.

        Args:
            key: A FilterDimension, a field name, or "search_term"
            value: New value ("All" to clear)
        """
        if key in ("search_term", "searchTerm"):
            return replace(self, search_term=value or "")
        dimension = FilterDimension.parse(key)
        changes = {dimension.value: value or ALL}
        for reset in DOWNSTREAM.get(dimension, ()):
            changes[reset.value] = ALL
        return replace(self, **changes)

    def cleared(self, *dimensions: FilterDimension) -> 'FilterState':
        """Return a copy with the given dimensions set to "All" (no cascading)."""
        return replace(self, **{d.value: ALL for d in dimensions})

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class FilterOption:
    """One dropdown entry: a value and how many rows carry it."""
    name: str
    count: int

    def to_dict(self) -> dict:
        return {'name': self.name, 'count': self.count}
