# lapse/services/keyword_scope_service.py
"""
Keyword scoping and highlighting support.

A paragraph assigned to several management domains carries the keywords of
all of them. When the user is looking at one domain, only that domain's
keywords should be highlighted; this service narrows the keyword list
accordingly.
"""
import re
from typing import Iterable, List, Optional, Tuple

from ..config import AppConfig
from ..domain.keywords import GovernanceDictionary
from ..logging_config import get_logger
from ..utils.text_normalization import split_multi_value

logger = get_logger('keyword_scope_service')


class KeywordScopeResolver:
    """
    Resolves which keywords apply to a text span under an active domain.
    """

    def __init__(self, config: AppConfig, governance: Optional[GovernanceDictionary] = None):
        """
        Initialize the resolver.

        Args:
            config: Application configuration
            governance: Governance dictionary built during the join
        """
        self.config = config
        self.governance = governance or GovernanceDictionary([])

    def resolve_domain_keywords(
        self,
        keyword_string: str,
        text: str,
        domain: Optional[str] = None
    ) -> List[str]:
        """
        Narrow *keyword_string* to the keywords of *domain* present in *text*.

        Args:
            keyword_string: Semicolon-encoded keywords carried by the row
            text: The paragraph or section body the keywords belong to
            domain: Active management domain ("All" or None when unset)

        Returns:
            The split keywords unchanged when *domain* is unset or not a
            governance domain; otherwise the domain's dictionary keywords
            occurring as whole words in *text*, in dictionary order
        """
        all_keywords = list(split_multi_value(keyword_string, self.config.join.multi_value_separator))
        domain = (domain or "").strip()
        if not domain or domain == self.config.filters.all_value or domain not in self.governance:
            return all_keywords

        lower_text = (text or "").lower()
        resolved = [
            matcher.keyword
            for matcher in self.governance.matchers_for(domain)
            if matcher.matches(lower_text)
        ]
        logger.debug(f"Scoped {len(all_keywords)} keywords to {len(resolved)} for domain {domain!r}")
        return resolved

    @staticmethod
    def split_highlights(text: str, terms: Iterable[str]) -> List[Tuple[str, bool]]:
        """
        Split *text* into ``(segment, is_match)`` pairs for highlighting.

        Matching is case-insensitive and not word-bounded; longer terms win
        where terms overlap. Concatenating the segments yields *text*.

        >>> KeywordScopeResolver.split_highlights("Fish habitat", ["fish"])
        [('Fish', True), (' habitat', False)]
        """
        if not text:
            return []
        cleaned = sorted({t.strip() for t in terms if t and t.strip()}, key=len, reverse=True)
        if not cleaned:
            return [(text, False)]

        try:
            pattern = re.compile("|".join(re.escape(t) for t in cleaned), re.IGNORECASE)
        except re.error as e:
            logger.warning(f"Highlight pattern failed, returning plain text: {e}")
            return [(text, False)]

        segments: List[Tuple[str, bool]] = []
        position = 0
        for match in pattern.finditer(text):
            if match.start() > position:
                segments.append((text[position:match.start()], False))
            segments.append((match.group(0), True))
            position = match.end()
        if position < len(text):
            segments.append((text[position:], False))
        return segments
