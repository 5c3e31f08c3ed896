# Utils module for the LAPSE legislation explorer
from .text_normalization import (
    clean_cell,
    split_multi_value,
    join_multi_value,
    unique_casefold,
    contains_casefold,
    compile_word_pattern,
    natural_sort_key,
)
from .csv_utils import detect_delimiter, detect_encoding, clean_csv_headers, resolve_columns
from .timing import Timer, PhaseTimer

__all__ = [
    'clean_cell',
    'split_multi_value',
    'join_multi_value',
    'unique_casefold',
    'contains_casefold',
    'compile_word_pattern',
    'natural_sort_key',
    'detect_delimiter',
    'detect_encoding',
    'clean_csv_headers',
    'resolve_columns',
    'Timer',
    'PhaseTimer',
]
