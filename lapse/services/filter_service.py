# lapse/services/filter_service.py
"""
Filter engine for the legislation explorer.

Filtering happens in two stages:

1. **Row-scoped** predicates (jurisdiction, act, legislation and the
   legislation-type constraint) drop individual rows.
2. **Section-scoped** predicates (management domain, free-text search and
   the four clause attributes) are evaluated per section: when *any* row of
   a section satisfies all of them, *every* surviving row of that section
   is kept, so a section is never shown with some paragraphs hidden.

Dropdown options are computed against the rows that pass every *other*
active filter, so an option is only offered when choosing it returns rows.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..config import AppConfig
from ..domain.filters import DOWNSTREAM, FilterDimension, FilterOption, FilterState
from ..domain.flat_item import FlatItem
from ..domain.legislation import Legislation
from ..logging_config import get_logger
from ..utils.text_normalization import contains_casefold, split_multi_value
from .section_service import SectionAggregator

logger = get_logger('filter_service')

# FlatItem attribute holding the values of each clause-attribute dimension
CLAUSE_ATTRIBUTES: Dict[FilterDimension, str] = {
    FilterDimension.CLAUSE_TYPE: 'clause_types',
    FilterDimension.ACTIONABLE_TYPE: 'actionable_types',
    FilterDimension.RESPONSIBLE_OFFICIAL: 'responsible_officials',
    FilterDimension.DISCRETION_TYPE: 'discretion_types',
}


def _same(a: str, b: str) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


class FilterEngine:
    """
    Evaluates a FilterState against FlatItems and computes dropdown options.

    Every method is a pure function of its arguments.
    """

    def __init__(self, config: AppConfig, aggregator: Optional[SectionAggregator] = None):
        """
        Initialize the filter engine.

        Args:
            config: Application configuration
            aggregator: Section aggregator used for grouping (created if omitted)
        """
        self.config = config
        self.aggregator = aggregator or SectionAggregator(config)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def values_of(self, item: FlatItem, dimension: FilterDimension) -> Tuple[str, ...]:
        """The values *item* carries for *dimension*, split and trimmed."""
        if dimension in CLAUSE_ATTRIBUTES:
            values = getattr(item, CLAUSE_ATTRIBUTES[dimension])
            # Tolerate values that still hold an encoded list
            return tuple(v for value in values for v in split_multi_value(value, self.config.join.multi_value_separator))
        if dimension is FilterDimension.MANAGEMENT_DOMAIN:
            return split_multi_value(item.management_domain, self.config.join.multi_value_separator)
        value = (getattr(item, dimension.value) or "").strip()
        return (value,) if value else ()

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def row_matches(self, item: FlatItem, state: FilterState, type_constraint: bool = True) -> bool:
        """
        Row-scoped predicates: jurisdiction, act, legislation and type.

        With ``type_constraint``, selecting an Act without a specific
        legislation keeps only rows of the Act itself.
        """
        if state.is_active(FilterDimension.JURISDICTION) and not _same(item.jurisdiction, state.jurisdiction):
            return False
        if state.is_active(FilterDimension.ACT_NAME) and not _same(item.act_name, state.act_name):
            return False
        if state.is_active(FilterDimension.LEGISLATION_NAME):
            return _same(item.legislation_name, state.legislation_name)
        if type_constraint and state.is_active(FilterDimension.ACT_NAME):
            return _same(item.legislation_type, self.config.filters.act_legislation_type)
        return True

    def section_predicates_match(self, item: FlatItem, state: FilterState) -> bool:
        """Section-scoped predicates evaluated against a single row."""
        if state.is_active(FilterDimension.MANAGEMENT_DOMAIN):
            if not contains_casefold(self.values_of(item, FilterDimension.MANAGEMENT_DOMAIN), state.management_domain.strip()):
                return False
        if state.search_active and state.search_term.strip().lower() not in item.search_blob:
            return False
        for dimension in CLAUSE_ATTRIBUTES:
            if state.is_active(dimension):
                if not contains_casefold(self.values_of(item, dimension), state.value_of(dimension).strip()):
                    return False
        return True

    def has_section_predicates(self, state: FilterState) -> bool:
        return state.search_active or any(
            state.is_active(d) for d in FilterDimension if d.section_scoped
        )

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def apply_filters(self, items: Sequence[FlatItem], state: FilterState) -> List[FlatItem]:
        """
        Return the rows selected by *state*, in input order.

        Args:
            items: Joined FlatItems
            state: Current filter state

        Returns:
            Every row of every section in which at least one row satisfies
            all section-scoped predicates

        Raises:
            TypeError: if *items* is not a sequence of FlatItem
        """
        self._check_items(items)
        rows = [item for item in items if self.row_matches(item, state)]
        if not self.has_section_predicates(state):
            return rows

        matched_sections = {
            key
            for key, members in self.aggregator.group(rows).items()
            if any(self.section_predicates_match(member, state) for member in members)
        }
        result = [item for item in rows if self.aggregator.group_key(item) in matched_sections]
        logger.debug(f"Filter kept {len(result)}/{len(items)} rows in {len(matched_sections)} sections")
        return result

    def matching_item_ids(self, items: Iterable[FlatItem], state: FilterState) -> Set[str]:
        """
        Ids of the rows that satisfy every predicate themselves.

        Rows kept only because a sibling in their section matched are
        excluded, so callers can mark the paragraphs that caused a match.
        """
        return {
            item.item_id
            for item in items
            if self.row_matches(item, state) and self.section_predicates_match(item, state)
        }

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def compute_options(
        self,
        items: Sequence[FlatItem],
        state: FilterState,
        dimension
    ) -> List[FilterOption]:
        """
        Dropdown options for *dimension* in the context of the other filters.

        The context is every row that passes all active filters except
        *dimension* and the dimensions reset by it. Values are counted once
        per row, deduplicated case-insensitively (first-seen casing wins)
        and sorted by name, or by descending count for prevalence-ordered
        dimensions. An "All" entry counting the distinct values comes first.

        Raises:
            UnknownDimensionError: if *dimension* is not a FilterDimension
        """
        self._check_items(items)
        dimension = FilterDimension.parse(dimension)
        excluded = {dimension} | set(DOWNSTREAM.get(dimension, ()))
        context_state = state.cleared(*excluded)
        # Regulations of the selected Act must stay listable
        type_constraint = dimension is not FilterDimension.LEGISLATION_NAME
        # Selecting an act alone keeps only Act-type rows, so only those vouch for it
        acts_only = dimension is FilterDimension.ACT_NAME

        counts: Dict[str, List] = {}
        for item in items:
            if not self.row_matches(item, context_state, type_constraint=type_constraint):
                continue
            if not self.section_predicates_match(item, context_state):
                continue
            if acts_only and not _same(item.legislation_type, self.config.filters.act_legislation_type):
                continue
            seen_in_row = set()
            for value in self.values_of(item, dimension):
                key = value.casefold()
                if key in seen_in_row:
                    continue
                seen_in_row.add(key)
                if key in counts:
                    counts[key][1] += 1
                else:
                    counts[key] = [value, 1]

        options = [FilterOption(name=name, count=count) for name, count in counts.values()]
        if dimension.value in self.config.filters.count_sorted_dimensions:
            options.sort(key=lambda o: (-o.count, o.name.casefold()))
        else:
            options.sort(key=lambda o: o.name.casefold())

        return [FilterOption(name=self.config.filters.all_value, count=len(options))] + options

    def compute_all_options(
        self,
        items: Sequence[FlatItem],
        state: FilterState
    ) -> Dict[FilterDimension, List[FilterOption]]:
        """Options for every dimension."""
        return {dimension: self.compute_options(items, state, dimension) for dimension in FilterDimension}

    # ------------------------------------------------------------------
    # Current legislation
    # ------------------------------------------------------------------

    def current_legislation(
        self,
        legislation: Iterable[Legislation],
        state: FilterState
    ) -> Optional[Legislation]:
        """
        The legislation record being viewed.

        That is the selected legislation if one is chosen, else the Act
        record of the selected act, else None.
        """
        if not state.is_active(FilterDimension.ACT_NAME) and not state.is_active(FilterDimension.LEGISLATION_NAME):
            return None
        for record in legislation:
            if state.is_active(FilterDimension.JURISDICTION) and not _same(record.jurisdiction, state.jurisdiction):
                continue
            if state.is_active(FilterDimension.ACT_NAME) and not _same(record.act_name, state.act_name):
                continue
            if state.is_active(FilterDimension.LEGISLATION_NAME):
                if _same(record.legislation_name, state.legislation_name):
                    return record
            elif record.is_act:
                return record
        return None

    @staticmethod
    def _check_items(items) -> None:
        if items is None or isinstance(items, (str, bytes)):
            raise TypeError("Filtering requires the joined FlatItems; got nothing to filter")
        for item in items:
            if not isinstance(item, FlatItem):
                raise TypeError(
                    f"Filtering requires joined FlatItems, got {type(item).__name__}; run the join first"
                )
