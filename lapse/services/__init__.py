# Services module for the LAPSE legislation explorer
from .ingestion_service import IngestionService
from .join_service import JoinService, JoinResult, JoinDiagnostic
from .section_service import SectionAggregator, paragraph_sort_key
from .filter_service import FilterEngine
from .keyword_scope_service import KeywordScopeResolver
from .summary_service import SummaryService, CorpusSummary, ClauseDomainShare
from .export_service import ExportService
from .corpus_cache import CorpusCache
from .explorer_service import LegislationExplorer

__all__ = [
    'IngestionService',
    'JoinService',
    'JoinResult',
    'JoinDiagnostic',
    'SectionAggregator',
    'paragraph_sort_key',
    'FilterEngine',
    'KeywordScopeResolver',
    'SummaryService',
    'CorpusSummary',
    'ClauseDomainShare',
    'ExportService',
    'CorpusCache',
    'LegislationExplorer',
]
