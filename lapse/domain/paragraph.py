# lapse/domain/paragraph.py
"""
Domain model for a single paragraph of statutory text.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Paragraph:
    """
    An immutable fragment of legislative text with its policy labels.

    Multi-value labels arrive semicolon-encoded in the source tables and are
    stored here as ordered tuples.

    Attributes:
        paragraph_id: Unique identifier of the paragraph
        legislation_id: Foreign key to the Legislation record
        section: Section label (may be empty)
        heading: Section heading (may be empty)
        text: Body text of the paragraph
        management_domains: Assigned management domains (zero or more)
        domain_keywords: Keywords that triggered the domain labels
        clause_types: Legal character of the clause (e.g. Regulatory, Enabling)
        clause_keywords: Keywords that triggered the clause-type labels
        actionable_types: Type of actionable duty
        responsible_officials: Official(s) the duty is assigned to
        discretion_types: "Mandatory" and/or "Discretionary"
    """
    paragraph_id: str
    legislation_id: str
    section: str = ""
    heading: str = ""
    text: str = ""
    management_domains: Tuple[str, ...] = ()
    domain_keywords: Tuple[str, ...] = ()
    clause_types: Tuple[str, ...] = ()
    clause_keywords: Tuple[str, ...] = ()
    actionable_types: Tuple[str, ...] = ()
    responsible_officials: Tuple[str, ...] = ()
    discretion_types: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate paragraph data after initialization."""
        if not self.paragraph_id:
            raise ValueError("Paragraph id cannot be empty")

    @property
    def has_text(self) -> bool:
        """Check if the paragraph carries any body text."""
        return bool(self.text and self.text.strip())
