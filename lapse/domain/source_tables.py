# lapse/domain/source_tables.py
"""
Container for the four fully-loaded source tables.
"""
import hashlib
from dataclasses import astuple, dataclass, field
from typing import List

from .paragraph import Paragraph
from .legislation import Legislation
from .keywords import IucnKeyword, GovernanceKeyword


@dataclass(frozen=True)
class SourceTables:
    """
    Typed source records, ready to be joined.

    Attributes:
        paragraphs: Paragraph records in load order
        legislation: Legislation metadata records
        iucn_keywords: IUCN keyword dictionary rows
        governance_keywords: Governance keyword dictionary rows
    """
    paragraphs: List[Paragraph] = field(default_factory=list)
    legislation: List[Legislation] = field(default_factory=list)
    iucn_keywords: List[IucnKeyword] = field(default_factory=list)
    governance_keywords: List[GovernanceKeyword] = field(default_factory=list)

    def content_hash(self) -> str:
        """
        SHA-256 over every record of every table.

        Two loads of the same files give the same hash, so the hash can key
        a cache of derived views.
        """
        digest = hashlib.sha256()
        for name, records in (
            ('paragraphs', self.paragraphs),
            ('legislation', self.legislation),
            ('iucn', self.iucn_keywords),
            ('governance', self.governance_keywords),
        ):
            digest.update(f"[{name}:{len(records)}]".encode('utf-8'))
            for record in records:
                digest.update(repr(astuple(record)).encode('utf-8'))
                digest.update(b'\x1e')
        return digest.hexdigest()

    @property
    def row_counts(self) -> dict:
        return {
            'paragraphs': len(self.paragraphs),
            'legislation': len(self.legislation),
            'iucn_keywords': len(self.iucn_keywords),
            'governance_keywords': len(self.governance_keywords),
        }
