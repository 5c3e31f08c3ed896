# lapse/domain/flat_item.py
"""
Domain model for one denormalized (paragraph x management domain) row.
"""
from dataclasses import dataclass
from typing import Tuple

from ..utils.text_normalization import unique_casefold


@dataclass(frozen=True)
class FlatItem:
    """
    The engine's primary filtering unit.

    A paragraph with k management domains fans out into k FlatItems that
    share ``paragraph_id`` and ``paragraph`` but differ in
    ``management_domain``. A paragraph without domains yields a single item
    whose ``management_domain`` is empty.

    Attributes:
        item_id: Sequential id (1-based, join order)
        paragraph_id: Source paragraph id
        legislation_id: Source legislation id
        jurisdiction, legislation_type, act_name, legislation_name, url,
        agencies: Legislation metadata copied onto the row
        section, heading, paragraph: Paragraph location and body
        management_domain: The single domain of this row (may be empty)
        domain_keywords: Source keywords merged with extracted governance keywords
        clause_types, clause_keywords, actionable_types,
        responsible_officials, discretion_types: Clause attributes
        iucn_threats: Threat categories found in the body
    """
    item_id: str
    paragraph_id: str
    legislation_id: str
    jurisdiction: str = ""
    legislation_type: str = ""
    act_name: str = ""
    legislation_name: str = ""
    url: str = ""
    agencies: str = ""
    section: str = ""
    heading: str = ""
    paragraph: str = ""
    management_domain: str = ""
    domain_keywords: Tuple[str, ...] = ()
    clause_types: Tuple[str, ...] = ()
    clause_keywords: Tuple[str, ...] = ()
    actionable_types: Tuple[str, ...] = ()
    responsible_officials: Tuple[str, ...] = ()
    discretion_types: Tuple[str, ...] = ()
    iucn_threats: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.paragraph_id:
            raise ValueError("FlatItem paragraph_id cannot be empty")

    @property
    def aggregate_keywords(self) -> Tuple[str, ...]:
        """Domain keywords followed by clause keywords, deduplicated."""
        return unique_casefold(self.domain_keywords + self.clause_keywords)

    @property
    def search_blob(self) -> str:
        """Lowercased text searched by the free-text filter."""
        return f"{self.act_name} {self.legislation_name} {self.heading} {self.paragraph}".lower()
