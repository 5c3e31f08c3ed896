# lapse/services/join_service.py
"""
Service that joins the four source tables into FlatItems.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import AppConfig
from ..domain.flat_item import FlatItem
from ..domain.keywords import GovernanceDictionary, IucnDictionary
from ..domain.legislation import Legislation
from ..domain.paragraph import Paragraph
from ..domain.source_tables import SourceTables
from ..logging_config import get_logger
from ..utils.text_normalization import unique_casefold
from ..utils.timing import Timer

logger = get_logger('join_service')


@dataclass(frozen=True)
class JoinDiagnostic:
    """A paragraph that could not be joined, and why."""
    paragraph_id: str
    legislation_id: str
    message: str


@dataclass
class JoinResult:
    """
    Output of :meth:`JoinService.join`.

    Attributes:
        items: FlatItems in paragraph load order
        diagnostics: One entry per skipped paragraph
        legislation: legislation_id -> Legislation lookup used for the join
        governance: Compiled governance dictionary (reused for keyword scoping)
    """
    items: List[FlatItem] = field(default_factory=list)
    diagnostics: List[JoinDiagnostic] = field(default_factory=list)
    legislation: Dict[str, Legislation] = field(default_factory=dict)
    governance: Optional[GovernanceDictionary] = None

    @property
    def paragraph_count(self) -> int:
        return len({item.paragraph_id for item in self.items})


class JoinService:
    """
    Builds the denormalized FlatItem view from the source tables.

    Responsibilities:
    - Index legislation metadata by id
    - Classify paragraph bodies against the IUCN dictionary
    - Extract governance keywords for each paragraph's own domains
    - Fan each paragraph out into one FlatItem per management domain
    """

    def __init__(self, config: AppConfig):
        """
        Initialize the join service.

        Args:
            config: Application configuration
        """
        self.config = config

    def join(self, tables: SourceTables) -> JoinResult:
        """
        Join paragraphs with legislation metadata and keyword dictionaries.

        Paragraphs whose legislation id does not resolve are skipped and
        reported in ``JoinResult.diagnostics``; the rest of the batch is
        unaffected.

        Args:
            tables: Fully loaded source tables

        Returns:
            JoinResult with the FlatItems and diagnostics
        """
        with Timer("Join source tables", log_level="INFO"):
            legislation_map: Dict[str, Legislation] = {}
            for record in tables.legislation:
                if record.legislation_id in legislation_map:
                    logger.warning(f"Duplicate legislation id {record.legislation_id!r}; keeping the last record")
                legislation_map[record.legislation_id] = record

            iucn = IucnDictionary(tables.iucn_keywords)
            governance = GovernanceDictionary(tables.governance_keywords)
            logger.debug(
                f"Dictionaries: {len(legislation_map)} legislation, "
                f"{len(iucn)} IUCN keywords, {len(governance)} governance domains"
            )

            result = JoinResult(legislation=legislation_map, governance=governance)
            for paragraph in tables.paragraphs:
                legislation = legislation_map.get(paragraph.legislation_id)
                if legislation is None:
                    message = (
                        f"No legislation found for paragraph {paragraph.paragraph_id}, "
                        f"legislation_id: {paragraph.legislation_id}"
                    )
                    logger.warning(message)
                    result.diagnostics.append(
                        JoinDiagnostic(paragraph.paragraph_id, paragraph.legislation_id, message)
                    )
                    continue

                result.items.extend(
                    self._fan_out(paragraph, legislation, iucn, governance, first_id=len(result.items) + 1)
                )

        logger.info(
            f"JOINED {len(result.items)} items from {len(tables.paragraphs)} paragraphs "
            f"({len(result.diagnostics)} skipped)"
        )
        return result

    def _fan_out(
        self,
        paragraph: Paragraph,
        legislation: Legislation,
        iucn: IucnDictionary,
        governance: GovernanceDictionary,
        first_id: int
    ) -> List[FlatItem]:
        """Create one FlatItem per assigned domain (or one with an empty domain)."""
        threats = iucn.classify(paragraph.text)
        extracted = governance.match(paragraph.text, paragraph.management_domains)
        keywords = unique_casefold(paragraph.domain_keywords + extracted)

        domains = unique_casefold(paragraph.management_domains) or ("",)
        return [
            FlatItem(
                item_id=str(first_id + offset),
                paragraph_id=paragraph.paragraph_id,
                legislation_id=paragraph.legislation_id,
                jurisdiction=legislation.jurisdiction or self.config.join.default_jurisdiction,
                legislation_type=legislation.legislation_type,
                act_name=legislation.act_name,
                legislation_name=legislation.legislation_name,
                url=legislation.url,
                agencies=legislation.agencies,
                section=paragraph.section,
                heading=paragraph.heading,
                paragraph=paragraph.text,
                management_domain=domain,
                domain_keywords=keywords,
                clause_types=paragraph.clause_types,
                clause_keywords=paragraph.clause_keywords,
                actionable_types=paragraph.actionable_types,
                responsible_officials=paragraph.responsible_officials,
                discretion_types=paragraph.discretion_types,
                iucn_threats=threats,
            )
            for offset, domain in enumerate(domains)
        ]
