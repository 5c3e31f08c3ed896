# lapse/services/summary_service.py
"""
Service for dashboard summary statistics over a filtered item set.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..config import AppConfig
from ..domain.flat_item import FlatItem
from ..logging_config import get_logger
from .section_service import SectionAggregator

logger = get_logger('summary_service')


def most_common_casefold(values: Iterable[str], top_n: int) -> List[Tuple[str, int]]:
    """
    Count *values* case-insensitively, reporting each under its first-seen casing.

    Ties keep first-seen order, as with ``Counter.most_common``.
    """
    counts = Counter()
    display: Dict[str, str] = {}
    for value in values:
        key = value.casefold()
        display.setdefault(key, value)
        counts[key] += 1
    return [(display[key], count) for key, count in counts.most_common(top_n)]


@dataclass(frozen=True)
class ClauseDomainShare:
    """Sections of one clause type within one management domain."""
    clause_type: str
    management_domain: str
    section_count: int
    percent: float

    def to_dict(self) -> dict:
        return {
            'clause_type': self.clause_type,
            'management_domain': self.management_domain,
            'section_count': self.section_count,
            'percent': round(self.percent, 1),
        }


@dataclass
class CorpusSummary:
    """
    Summary statistics for the dashboard.

    Attributes:
        item_count: Number of FlatItems summarized
        statute_count: Distinct legislation names
        keyword_frequency: (keyword, count) pairs, most frequent first
        threat_counts: (threat category, count) pairs, most frequent first
        clause_type_counts: (clause type, count) pairs, most frequent first
        clause_domain_breakdown: Section share of each clause type per domain
    """
    item_count: int = 0
    statute_count: int = 0
    keyword_frequency: List[Tuple[str, int]] = field(default_factory=list)
    threat_counts: List[Tuple[str, int]] = field(default_factory=list)
    clause_type_counts: List[Tuple[str, int]] = field(default_factory=list)
    clause_domain_breakdown: List[ClauseDomainShare] = field(default_factory=list)

    def to_dict(self) -> dict:
        def pairs(values):
            return [{'name': name, 'count': count} for name, count in values]

        return {
            'item_count': self.item_count,
            'statute_count': self.statute_count,
            'keyword_frequency': pairs(self.keyword_frequency),
            'threat_counts': pairs(self.threat_counts),
            'clause_type_counts': pairs(self.clause_type_counts),
            'clause_domain_breakdown': [share.to_dict() for share in self.clause_domain_breakdown],
        }


class SummaryService:
    """
    Computes summary statistics for the charts panel.
    """

    def __init__(self, config: AppConfig, aggregator: Optional[SectionAggregator] = None):
        """
        Initialize the summary service.

        Args:
            config: Application configuration
            aggregator: Section aggregator used to identify sections
        """
        self.config = config
        self.aggregator = aggregator or SectionAggregator(config)

    def summarize(self, items: Sequence[FlatItem], domain: Optional[str] = None) -> CorpusSummary:
        """
        Summarize *items*.

        Args:
            items: Usually the output of FilterEngine.apply_filters
            domain: When set (and not "All"), keyword, threat and clause
                counts only consider rows of this management domain

        Returns:
            CorpusSummary
        """
        scoped = self._scope(items, domain)
        summary = CorpusSummary(
            item_count=len(items),
            statute_count=self.statute_count(items),
            keyword_frequency=self.keyword_frequency(scoped),
            threat_counts=self.threat_counts(scoped),
            clause_type_counts=self.clause_type_counts(scoped),
            clause_domain_breakdown=self.clause_domain_breakdown(items),
        )
        logger.debug(
            f"Summary: {summary.item_count} items, {summary.statute_count} statutes, "
            f"{len(summary.keyword_frequency)} keywords"
        )
        return summary

    def _scope(self, items: Sequence[FlatItem], domain: Optional[str]) -> Sequence[FlatItem]:
        domain = (domain or "").strip()
        if not domain or domain == self.config.filters.all_value:
            return items
        return [item for item in items if item.management_domain.casefold() == domain.casefold()]

    @staticmethod
    def statute_count(items: Sequence[FlatItem]) -> int:
        return len({item.legislation_name for item in items if item.legislation_name})

    def keyword_frequency(self, items: Sequence[FlatItem]) -> List[Tuple[str, int]]:
        """Most frequent domain keywords, ignoring very short ones."""
        min_length = self.config.summary.min_keyword_length
        keywords = (
            keyword
            for item in items
            for keyword in item.domain_keywords
            if len(keyword) >= min_length
        )
        return most_common_casefold(keywords, self.config.summary.top_n)

    def threat_counts(self, items: Sequence[FlatItem]) -> List[Tuple[str, int]]:
        """Rows per IUCN threat category; rows without a threat count as "Unspecified"."""
        unspecified = self.config.summary.unspecified_threat_label
        threats = (
            threat
            for item in items
            for threat in (item.iucn_threats or (unspecified,))
        )
        return most_common_casefold(threats, self.config.summary.top_n)

    def clause_type_counts(self, items: Sequence[FlatItem]) -> List[Tuple[str, int]]:
        clause_types = (clause_type for item in items for clause_type in item.clause_types)
        return most_common_casefold(clause_types, self.config.summary.top_n)

    def clause_domain_breakdown(self, items: Sequence[FlatItem]) -> List[ClauseDomainShare]:
        """
        Distinct sections per (clause type, management domain) pair.

        Percentages are relative to the domain's total; domains are ordered
        by total section count, largest first, and clause types by count
        within each domain.
        """
        sections: Dict[Tuple[str, str], Set] = {}
        for item in items:
            if not item.management_domain or not item.clause_types:
                continue
            section = self.aggregator.group_key(item)
            for clause_type in item.clause_types:
                sections.setdefault((item.management_domain, clause_type), set()).add(section)

        totals: Counter = Counter()
        for (domain, _), members in sections.items():
            totals[domain] += len(members)

        domain_rank = {domain: rank for rank, (domain, _) in enumerate(totals.most_common())}
        shares = [
            ClauseDomainShare(
                clause_type=clause_type,
                management_domain=domain,
                section_count=len(members),
                percent=100.0 * len(members) / totals[domain],
            )
            for (domain, clause_type), members in sections.items()
        ]
        shares.sort(key=lambda s: (domain_rank[s.management_domain], -s.section_count, s.clause_type.casefold()))
        return shares
