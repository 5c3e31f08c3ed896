# Domain models for the LAPSE legislation explorer
from .paragraph import Paragraph
from .legislation import Legislation, LegislationType
from .keywords import (
    IucnKeyword,
    GovernanceKeyword,
    KeywordMatcher,
    IucnDictionary,
    GovernanceDictionary,
)
from .source_tables import SourceTables
from .flat_item import FlatItem
from .section import SectionGroup, SectionKey
from .filters import ALL, FilterDimension, FilterState, FilterOption, DOWNSTREAM

__all__ = [
    'Paragraph',
    'Legislation',
    'LegislationType',
    'IucnKeyword',
    'GovernanceKeyword',
    'KeywordMatcher',
    'IucnDictionary',
    'GovernanceDictionary',
    'SourceTables',
    'FlatItem',
    'SectionGroup',
    'SectionKey',
    'ALL',
    'FilterDimension',
    'FilterState',
    'FilterOption',
    'DOWNSTREAM',
]
