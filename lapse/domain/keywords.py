# lapse/domain/keywords.py
"""
Keyword dictionaries used to classify paragraphs.

Two dictionaries are supported:

* **IUCN** - keyword -> threat category (substring match, many-to-one).
* **Governance** - management domain -> ordered (keyword, scope) pairs
  (whole-word match). Domains missing from this dictionary are
  "non-governance" and are never keyword-filtered.

Every keyword's matcher is compiled once when the dictionary is built.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from ..logging_config import get_logger
from ..utils.text_normalization import compile_word_pattern

logger = get_logger('domain.keywords')


@dataclass(frozen=True)
class IucnKeyword:
    """One row of the IUCN keyword table."""
    keyword: str
    threat: str


@dataclass(frozen=True)
class GovernanceKeyword:
    """One row of the governance keyword table."""
    domain: str
    keyword: str
    scope: str = ""


@dataclass(frozen=True)
class KeywordMatcher:
    """
    A keyword with its precompiled whole-word pattern.

    ``pattern`` is None when the keyword could not be compiled; such a
    matcher never matches.
    """
    keyword: str
    scope: str = ""
    pattern: Optional[Pattern] = field(default=None, compare=False, repr=False)

    @classmethod
    def build(cls, keyword: str, scope: str = "") -> 'KeywordMatcher':
        pattern = compile_word_pattern(keyword)
        if pattern is None and keyword.strip():
            logger.warning(f"Keyword {keyword!r} could not be compiled; it will never match")
        return cls(keyword=keyword.strip(), scope=scope, pattern=pattern)

    def matches(self, lower_text: str) -> bool:
        """Whole-word test against already-lowercased text."""
        return self.pattern is not None and self.pattern.search(lower_text) is not None


class IucnDictionary:
    """
    Keyword -> IUCN threat category lookup.

    Keys are lowercased; a keyword listed twice keeps the later category,
    at the position where it was first listed.
    """

    def __init__(self, rows: Iterable[IucnKeyword]):
        self._threats: Dict[str, str] = {}
        for row in rows:
            keyword = row.keyword.strip().lower()
            if keyword and row.threat.strip():
                self._threats[keyword] = row.threat.strip()

    def __len__(self) -> int:
        return len(self._threats)

    def classify(self, text: str) -> Tuple[str, ...]:
        """
        Return the threat categories whose keywords occur in *text*.

        Matching is a case-insensitive substring test. Categories are unique
        and ordered by the first keyword (in dictionary order) that matched.
        """
        if not text:
            return ()
        lower_text = text.lower()
        matched: List[str] = []
        for keyword, threat in self._threats.items():
            if threat not in matched and keyword in lower_text:
                matched.append(threat)
        return tuple(matched)


class GovernanceDictionary:
    """
    Management domain -> keyword matchers lookup.

    Domain names are compared case-insensitively.
    """

    def __init__(self, rows: Iterable[GovernanceKeyword]):
        self._domains: Dict[str, List[KeywordMatcher]] = {}
        for row in rows:
            domain = row.domain.strip().lower()
            if not domain or not row.keyword.strip():
                continue
            matchers = self._domains.setdefault(domain, [])
            if all(m.keyword.lower() != row.keyword.strip().lower() for m in matchers):
                matchers.append(KeywordMatcher.build(row.keyword, row.scope))

    def __len__(self) -> int:
        return len(self._domains)

    def __contains__(self, domain: object) -> bool:
        return isinstance(domain, str) and domain.strip().lower() in self._domains

    @property
    def domains(self) -> List[str]:
        """Lowercased names of all governance domains."""
        return list(self._domains)

    def keywords_for(self, domain: str) -> List[str]:
        """Dictionary keywords registered for *domain* (empty if none)."""
        return [m.keyword for m in self._domains.get((domain or "").strip().lower(), [])]

    def matchers_for(self, domain: str) -> List[KeywordMatcher]:
        return list(self._domains.get((domain or "").strip().lower(), []))

    def match(self, text: str, domains: Iterable[str]) -> Tuple[str, ...]:
        """
        Return keywords of *domains* that occur as whole words in *text*.

        Keywords come out in domain order, then dictionary order, without
        duplicates.
        """
        if not text:
            return ()
        lower_text = text.lower()
        matched: List[str] = []
        seen = set()
        for domain in domains:
            for matcher in self._domains.get(domain.strip().lower(), []):
                key = matcher.keyword.lower()
                if key not in seen and matcher.matches(lower_text):
                    seen.add(key)
                    matched.append(matcher.keyword)
        return tuple(matched)
