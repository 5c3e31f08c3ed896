# lapse/domain/legislation.py
"""
Domain model for statute/regulation metadata.
"""
from dataclasses import dataclass
from enum import Enum


class LegislationType(Enum):
    """Kind of legislative instrument."""
    ACT = "Act"
    REGULATION = "Regulation"
    CODE = "Code"
    ORDER = "Order"


@dataclass(frozen=True)
class Legislation:
    """
    Metadata for one statute, regulation, code or order.

    Attributes:
        legislation_id: Unique identifier
        jurisdiction: "Federal" or "Provincial"
        legislation_type: "Act", "Regulation", "Code" or "Order"
        act_name: Name of the parent Act
        legislation_name: Name of this instrument (equals act_name for Acts)
        url: Link to the official source
        agencies: Responsible agencies
        current_to_date: "Current to" stamp from the government website
    """
    legislation_id: str
    jurisdiction: str = ""
    legislation_type: str = ""
    act_name: str = ""
    legislation_name: str = ""
    url: str = ""
    agencies: str = ""
    current_to_date: str = ""

    def __post_init__(self):
        """Validate legislation data after initialization."""
        if not self.legislation_id:
            raise ValueError("Legislation id cannot be empty")

    @property
    def is_act(self) -> bool:
        """Check if this record is the Act itself rather than a subordinate instrument."""
        return self.legislation_type.strip().lower() == LegislationType.ACT.value.lower()
