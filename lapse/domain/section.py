# lapse/domain/section.py
"""
Domain model for a legislative section assembled from FlatItems.
"""
from dataclasses import dataclass, field
from typing import Tuple

from .flat_item import FlatItem

SectionKey = Tuple[str, str]  # (legislation_id, section_key)


@dataclass(frozen=True)
class SectionGroup:
    """
    All FlatItems sharing ``(legislation_id, section_key)``, merged.

    Attributes:
        legislation_id: Legislation the section belongs to
        section_key: Trimmed section label, else trimmed heading, else a
            synthetic per-paragraph key
        section: Section label of the first fragment (may be empty)
        heading: Distinct non-empty headings joined by " | "
        headings: The same headings as a tuple
        jurisdiction, legislation_type, act_name, legislation_name, url:
            Metadata of the owning legislation
        text: Non-empty paragraph bodies in reading order, blank-line separated
        management_domains, keywords, iucn_threats, clause_types,
        actionable_types, responsible_officials, discretion_types:
            Case-insensitive unions, first-seen casing kept
        items: Every FlatItem of the group, in reading order
        paragraphs: One FlatItem per distinct paragraph, in reading order
    """
    legislation_id: str
    section_key: str
    section: str = ""
    heading: str = ""
    headings: Tuple[str, ...] = ()
    jurisdiction: str = ""
    legislation_type: str = ""
    act_name: str = ""
    legislation_name: str = ""
    url: str = ""
    text: str = ""
    management_domains: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    iucn_threats: Tuple[str, ...] = ()
    clause_types: Tuple[str, ...] = ()
    actionable_types: Tuple[str, ...] = ()
    responsible_officials: Tuple[str, ...] = ()
    discretion_types: Tuple[str, ...] = ()
    items: Tuple[FlatItem, ...] = field(default=(), repr=False)
    paragraphs: Tuple[FlatItem, ...] = field(default=(), repr=False)

    @property
    def key(self) -> SectionKey:
        return (self.legislation_id, self.section_key)

    @property
    def paragraph_ids(self) -> Tuple[str, ...]:
        return tuple(p.paragraph_id for p in self.paragraphs)

    @property
    def label(self) -> str:
        """Display label, e.g. "Section 35"."""
        return f"Section {self.section}" if self.section else self.heading or self.section_key
