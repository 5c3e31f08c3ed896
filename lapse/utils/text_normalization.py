# lapse/utils/text_normalization.py
"""
Text helpers for semicolon-encoded fields, case-insensitive dedup and
keyword pattern compilation.
"""
import re
from typing import Iterable, List, Optional, Pattern, Tuple


def clean_cell(value) -> str:
    """
    Turn a raw table cell into a stripped string.

    ``None`` and float NaN (what pandas yields for blank Excel cells) become "".
    """
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value).strip()


def split_multi_value(value: Optional[str], separator: str = ";") -> Tuple[str, ...]:
    """
    Split a semicolon-encoded field into its trimmed, non-empty parts.

    Order is preserved; duplicates are kept (see :func:`unique_casefold`).
    """
    if not value:
        return ()
    return tuple(part.strip() for part in str(value).split(separator) if part.strip())


def join_multi_value(values: Iterable[str], separator: str = "; ") -> str:
    """Inverse of :func:`split_multi_value`."""
    return separator.join(v for v in values if v)


def unique_casefold(values: Iterable[str]) -> Tuple[str, ...]:
    """
    Deduplicate case-insensitively, keeping the first-seen casing.

    >>> unique_casefold(["Mandatory", "mandatory", "Discretionary"])
    ('Mandatory', 'Discretionary')
    """
    seen = set()
    result: List[str] = []
    for value in values:
        if not value:
            continue
        key = value.casefold()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return tuple(result)


def contains_casefold(values: Iterable[str], wanted: str) -> bool:
    """Case-insensitive membership test."""
    wanted_key = wanted.casefold()
    return any(v.casefold() == wanted_key for v in values)


def compile_word_pattern(keyword: str) -> Optional[Pattern]:
    """
    Compile a whole-word, case-insensitive matcher for *keyword*.

    The keyword is escaped first, so characters such as ``(`` or ``+`` match
    literally. Returns None if the keyword is empty or cannot be compiled.
    """
    keyword = keyword.strip() if keyword else ""
    if not keyword:
        return None
    try:
        return re.compile(rf'\b{re.escape(keyword.lower())}\b')
    except re.error:
        return None


_NUMERIC_RUN = re.compile(r'(\d+)')


def natural_sort_key(value: str) -> Tuple:
    """
    Sort key that compares digit runs numerically ("2" < "10" < "10a").
    """
    parts = _NUMERIC_RUN.split(value or "")
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part.casefold())
        for part in parts
        if part != ""
    )

