# lapse/utils/csv_utils.py
"""
CSV and column-detection utilities for the source tables.
"""
import csv
import sys
from typing import Dict, Iterable, List, Optional

# Paragraph bodies can exceed the default csv field size limit
csv.field_size_limit(sys.maxsize)


def detect_encoding(file_bytes: bytes, fallback: str = 'utf-8') -> str:
    """
    Detect the encoding of a byte string.

    Args:
        file_bytes: Raw bytes to analyze
        fallback: Encoding returned when no candidate decodes cleanly

    Returns:
        Detected or fallback encoding string
    """
    # utf-8-sig first so a BOM never leaks into the first header
    for encoding in ('utf-8-sig', 'utf-8', 'cp1252'):
        try:
            file_bytes.decode(encoding)
            return encoding
        except (UnicodeDecodeError, LookupError):
            continue
    return fallback


def detect_delimiter(text_sample: str, candidates: Optional[List[str]] = None) -> str:
    """
    Detect the CSV delimiter from a text sample.

    Args:
        text_sample: Sample of CSV text (first few KB)
        candidates: List of candidate delimiters to try

    Returns:
        Detected delimiter character
    """
    if candidates is None:
        candidates = [',', ';', '\t', '|']

    try:
        dialect = csv.Sniffer().sniff(text_sample, delimiters=''.join(candidates))
        return dialect.delimiter
    except csv.Error:
        pass

    # Fallback: the candidate that occurs most often in the header line
    header = text_sample.splitlines()[0] if text_sample else ""
    best_delimiter = candidates[0]
    max_count = 0
    for delim in candidates:
        count = header.count(delim)
        if count > max_count:
            max_count = count
            best_delimiter = delim
    return best_delimiter


def clean_csv_headers(headers: Iterable) -> List[str]:
    """
    Clean CSV headers by removing BOM and whitespace.

    Args:
        headers: Header values

    Returns:
        Cleaned header list
    """
    return [str(h).replace('\ufeff', '').strip() if h is not None else '' for h in headers]


def resolve_columns(
    available: Iterable[str],
    aliases: Dict[str, List[str]]
) -> Dict[str, Optional[str]]:
    """
    Map canonical field names to the actual column names of a table.

    Matching is case-insensitive and the first alias present wins.
    Fields with no matching column map to None.

    Args:
        available: Column names found in the file
        aliases: Canonical field -> accepted column names

    Returns:
        Canonical field -> actual column name (or None)
    """
    lower_map = {str(col).strip().lower(): col for col in available}
    resolved: Dict[str, Optional[str]] = {}
    for canonical, names in aliases.items():
        resolved[canonical] = None
        for name in names:
            if name.lower() in lower_map:
                resolved[canonical] = lower_map[name.lower()]
                break
    return resolved
