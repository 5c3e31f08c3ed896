# lapse/services/explorer_service.py
"""
Session facade for the legislation explorer.

The explorer owns one loaded corpus and answers every query the UI or the
API needs: filtered items, sections, dropdown options, keyword scoping,
summary statistics and exports. The corpus is immutable once loaded; a
reload replaces it wholesale.
"""
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..config import AppConfig
from ..domain.filters import FilterDimension, FilterOption, FilterState
from ..domain.flat_item import FlatItem
from ..domain.legislation import Legislation
from ..domain.section import SectionGroup
from ..domain.source_tables import SourceTables
from ..exceptions import CorpusNotLoadedError
from ..logging_config import get_logger, log_section
from .corpus_cache import CorpusCache
from .export_service import ExportService
from .filter_service import FilterEngine
from .ingestion_service import IngestionService
from .join_service import JoinDiagnostic, JoinResult, JoinService
from .keyword_scope_service import KeywordScopeResolver
from .section_service import SectionAggregator
from .summary_service import CorpusSummary, SummaryService

logger = get_logger('explorer')

EXPORT_FORMATS = ('xlsx', 'csv')


class LegislationExplorer:
    """
    Coordinates ingestion, join, filtering and export for one session.

    Usage:
        explorer = LegislationExplorer(load_config())
        explorer.load_directory("data/")
        state = FilterState().with_change("management_domain", "Fisheries")
        sections = explorer.sections(state)
    """

    def __init__(self, config: AppConfig, cache: Optional[CorpusCache] = None):
        """
        Initialize the explorer and its services.

        Args:
            config: Application configuration
            cache: Cache for joined corpora (a private one is created if omitted)
        """
        self.config = config
        self.cache = cache or CorpusCache()

        self.ingestion = IngestionService(config)
        self.joiner = JoinService(config)
        self.aggregator = SectionAggregator(config)
        self.filters = FilterEngine(config, self.aggregator)
        self.summaries = SummaryService(config, self.aggregator)
        self.exporter = ExportService(config)

        # (join result, keyword resolver), swapped as one value on reload
        self._loaded: Optional[Tuple[JoinResult, KeywordScopeResolver]] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, tables: SourceTables) -> JoinResult:
        """
        Load (or reload) a corpus from fully materialized source tables.

        The join result is cached under the tables' content hash, so
        reloading identical tables is cheap.

        Args:
            tables: The four source tables

        Returns:
            The JoinResult now being served
        """
        log_section(logger, "Loading corpus")
        result = self.cache.get_or_build(tables, lambda: self.joiner.join(tables))
        self._loaded = (result, KeywordScopeResolver(self.config, result.governance))
        logger.info(
            f"Corpus ready: {len(result.items)} items, {result.paragraph_count} paragraphs, "
            f"{len(result.diagnostics)} diagnostics"
        )
        return result

    def load_directory(self, path: Union[str, Path]) -> JoinResult:
        """Read the source tables from *path* and load them."""
        return self.load(self.ingestion.load_directory(path))

    def invalidate(self) -> None:
        """Drop the loaded corpus and every cached join."""
        self.cache.invalidate()
        self._loaded = None
        logger.info("Corpus unloaded")

    @property
    def is_loaded(self) -> bool:
        return self._loaded is not None

    def _require_loaded(self, operation: str) -> Tuple[JoinResult, KeywordScopeResolver]:
        loaded = self._loaded
        if loaded is None:
            raise CorpusNotLoadedError(operation)
        return loaded

    def _require(self, operation: str) -> JoinResult:
        return self._require_loaded(operation)[0]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def load_result(self) -> JoinResult:
        return self._require("read corpus status")

    @property
    def all_items(self) -> List[FlatItem]:
        return self._require("list items").items

    @property
    def diagnostics(self) -> List[JoinDiagnostic]:
        return self._require("read diagnostics").diagnostics

    @property
    def legislation(self) -> Dict[str, Legislation]:
        return self._require("read legislation").legislation

    def items(self, state: Optional[FilterState] = None) -> List[FlatItem]:
        """FlatItems selected by *state* (everything when omitted)."""
        result = self._require("filter items")
        return self.filters.apply_filters(result.items, state or FilterState())

    def sections(self, state: Optional[FilterState] = None) -> List[SectionGroup]:
        """Sections selected by *state*, merged for display."""
        return self.aggregator.aggregate(self.items(state))

    def matching_item_ids(self, state: FilterState) -> set:
        return self.filters.matching_item_ids(self._require("filter items").items, state)

    def options(self, state: FilterState, dimension) -> List[FilterOption]:
        """
        Dropdown options for one dimension.

        Raises:
            UnknownDimensionError: for an unknown dimension
        """
        return self.filters.compute_options(self._require("compute options").items, state, dimension)

    def all_options(self, state: FilterState) -> Dict[FilterDimension, List[FilterOption]]:
        return self.filters.compute_all_options(self._require("compute options").items, state)

    def current_legislation(self, state: FilterState) -> Optional[Legislation]:
        return self.filters.current_legislation(self.legislation.values(), state)

    def resolve_keywords(self, keyword_string: str, text: str, domain: Optional[str] = None) -> List[str]:
        """Scope a keyword string to *domain* (see KeywordScopeResolver)."""
        _, resolver = self._require_loaded("resolve keywords")
        return resolver.resolve_domain_keywords(keyword_string, text, domain)

    def summary(self, state: Optional[FilterState] = None) -> CorpusSummary:
        state = state or FilterState()
        return self.summaries.summarize(self.items(state), domain=state.management_domain)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, state: Optional[FilterState] = None, fmt: str = 'xlsx') -> bytes:
        """
        Export the selected items.

        Args:
            state: Filter state (everything when omitted)
            fmt: "xlsx" (with a Sections sheet) or "csv"

        Returns:
            File contents

        Raises:
            ValueError: for an unsupported format
        """
        fmt = (fmt or '').lower().lstrip('.')
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt!r} (expected one of {', '.join(EXPORT_FORMATS)})")

        items = self.items(state)
        df = self.exporter.build_dataframe(items)
        if fmt == 'csv':
            return self.exporter.to_csv_bytes(df)
        sections_df = self.exporter.build_sections_dataframe(self.aggregator.aggregate(items))
        return self.exporter.to_excel_bytes(df, sections_df)
