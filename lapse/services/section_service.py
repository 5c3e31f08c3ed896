# lapse/services/section_service.py
"""
Service for grouping FlatItems into legislative sections.
"""
from typing import Dict, Iterable, List, Sequence, Tuple

from ..config import AppConfig
from ..domain.flat_item import FlatItem
from ..domain.section import SectionGroup, SectionKey
from ..logging_config import get_logger
from ..utils.text_normalization import natural_sort_key, unique_casefold

logger = get_logger('section_service')


def paragraph_sort_key(paragraph_id: str) -> Tuple:
    """Numeric ids sort numerically and before non-numeric ids."""
    text = (paragraph_id or "").strip()
    if text.isdigit():
        return (0, int(text), "")
    return (1, 0, text)


class SectionAggregator:
    """
    Groups FlatItems by ``(legislation_id, section_key)`` and merges each
    group into a :class:`SectionGroup`.

    The section key is the trimmed section label, else the trimmed heading,
    else a synthetic per-paragraph key, so paragraphs without any location
    never merge with each other.
    """

    def __init__(self, config: AppConfig):
        """
        Initialize the aggregator.

        Args:
            config: Application configuration
        """
        self.config = config

    def section_key(self, item: FlatItem) -> str:
        """Grouping key of *item* within its legislation."""
        section = (item.section or "").strip()
        if section:
            return section
        heading = (item.heading or "").strip()
        if heading:
            return heading
        return f"{self.config.sections.synthetic_key_prefix}{item.paragraph_id}"

    def group_key(self, item: FlatItem) -> SectionKey:
        return (item.legislation_id, self.section_key(item))

    def group(self, items: Iterable[FlatItem]) -> Dict[SectionKey, List[FlatItem]]:
        """
        Partition *items* by section without merging.

        Returns an insertion-ordered dict; members keep input order.
        """
        groups: Dict[SectionKey, List[FlatItem]] = {}
        for item in items:
            groups.setdefault(self.group_key(item), []).append(item)
        return groups

    def aggregate(self, items: Sequence[FlatItem]) -> List[SectionGroup]:
        """
        Merge *items* into one SectionGroup per section.

        Groups are returned in natural order of legislation id and section
        key ("2" before "10").

        Args:
            items: FlatItems, optionally already filtered

        Returns:
            List of SectionGroup
        """
        grouped = self.group(items)
        sections = [self._merge(key, members) for key, members in grouped.items()]
        sections.sort(key=lambda s: (natural_sort_key(s.legislation_id), natural_sort_key(s.section_key)))
        logger.debug(f"Aggregated {len(items)} items into {len(sections)} sections")
        return sections

    def _merge(self, key: SectionKey, members: List[FlatItem]) -> SectionGroup:
        # sorted() is stable: equal paragraph ids keep load order
        ordered = sorted(members, key=lambda item: paragraph_sort_key(item.paragraph_id))

        paragraphs: List[FlatItem] = []
        seen_ids = set()
        for item in ordered:
            if item.paragraph_id not in seen_ids:
                seen_ids.add(item.paragraph_id)
                paragraphs.append(item)

        headings: List[str] = []
        for item in paragraphs:
            heading = (item.heading or "").strip()
            if heading and heading not in headings:
                headings.append(heading)

        def union(attr: str) -> Tuple[str, ...]:
            values: List[str] = []
            for item in ordered:
                value = getattr(item, attr)
                values.extend(value if isinstance(value, tuple) else (value,))
            return unique_casefold(values)

        first = ordered[0]
        section_cfg = self.config.sections
        return SectionGroup(
            legislation_id=key[0],
            section_key=key[1],
            section=(first.section or "").strip(),
            heading=section_cfg.heading_separator.join(headings),
            headings=tuple(headings),
            jurisdiction=first.jurisdiction,
            legislation_type=first.legislation_type,
            act_name=first.act_name,
            legislation_name=first.legislation_name,
            url=first.url,
            text=section_cfg.paragraph_separator.join(
                p.paragraph.strip() for p in paragraphs if p.paragraph and p.paragraph.strip()
            ),
            management_domains=union('management_domain'),
            keywords=unique_casefold(union('domain_keywords') + union('clause_keywords')),
            iucn_threats=union('iucn_threats'),
            clause_types=union('clause_types'),
            actionable_types=union('actionable_types'),
            responsible_officials=union('responsible_officials'),
            discretion_types=union('discretion_types'),
            items=tuple(ordered),
            paragraphs=tuple(paragraphs),
        )
