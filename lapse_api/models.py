# lapse_api/models.py
"""
Pydantic models for request validation and response serialization.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from lapse.domain.filters import ALL, FilterOption, FilterState
from lapse.domain.flat_item import FlatItem
from lapse.domain.legislation import Legislation
from lapse.domain.section import SectionGroup
from lapse.services.join_service import JoinDiagnostic


class FilterStateModel(BaseModel):
    """Filter selection sent by the client; "All" disables a filter."""

    jurisdiction: str = ALL
    management_domain: str = ALL
    act_name: str = ALL
    legislation_name: str = ALL
    search_term: str = Field(default="", max_length=500)
    clause_type: str = ALL
    actionable_type: str = ALL
    responsible_official: str = ALL
    discretion_type: str = ALL

    def to_state(self) -> FilterState:
        return FilterState(**self.model_dump())


class ItemModel(BaseModel):
    """One FlatItem."""
    id: str
    paragraph_id: str
    legislation_id: str
    jurisdiction: str
    legislation_type: str
    act_name: str
    legislation_name: str
    url: str
    agencies: str
    section: str
    heading: str
    paragraph: str
    management_domain: str
    domain_keywords: List[str]
    clause_types: List[str]
    clause_keywords: List[str]
    actionable_types: List[str]
    responsible_officials: List[str]
    discretion_types: List[str]
    iucn_threats: List[str]

    @classmethod
    def from_item(cls, item: FlatItem) -> "ItemModel":
        return cls(
            id=item.item_id,
            paragraph_id=item.paragraph_id,
            legislation_id=item.legislation_id,
            jurisdiction=item.jurisdiction,
            legislation_type=item.legislation_type,
            act_name=item.act_name,
            legislation_name=item.legislation_name,
            url=item.url,
            agencies=item.agencies,
            section=item.section,
            heading=item.heading,
            paragraph=item.paragraph,
            management_domain=item.management_domain,
            domain_keywords=list(item.domain_keywords),
            clause_types=list(item.clause_types),
            clause_keywords=list(item.clause_keywords),
            actionable_types=list(item.actionable_types),
            responsible_officials=list(item.responsible_officials),
            discretion_types=list(item.discretion_types),
            iucn_threats=list(item.iucn_threats),
        )


class ItemsResponse(BaseModel):
    total: int
    items: List[ItemModel]


class SectionParagraphModel(BaseModel):
    """A sub-fragment of a section, rendered inline under its own heading."""
    paragraph_id: str
    heading: str
    text: str
    matched: bool = False


class SectionModel(BaseModel):
    """One merged section."""
    legislation_id: str
    section_key: str
    section: str
    label: str
    heading: str
    jurisdiction: str
    legislation_type: str
    act_name: str
    legislation_name: str
    url: str
    text: str
    management_domains: List[str]
    keywords: List[str]
    iucn_threats: List[str]
    clause_types: List[str]
    actionable_types: List[str]
    responsible_officials: List[str]
    discretion_types: List[str]
    paragraphs: List[SectionParagraphModel]

    @classmethod
    def from_group(cls, group: SectionGroup, matched_ids: Optional[set] = None) -> "SectionModel":
        matched_ids = matched_ids or set()
        matched_paragraphs = {item.paragraph_id for item in group.items if item.item_id in matched_ids}
        return cls(
            legislation_id=group.legislation_id,
            section_key=group.section_key,
            section=group.section,
            label=group.label,
            heading=group.heading,
            jurisdiction=group.jurisdiction,
            legislation_type=group.legislation_type,
            act_name=group.act_name,
            legislation_name=group.legislation_name,
            url=group.url,
            text=group.text,
            management_domains=list(group.management_domains),
            keywords=list(group.keywords),
            iucn_threats=list(group.iucn_threats),
            clause_types=list(group.clause_types),
            actionable_types=list(group.actionable_types),
            responsible_officials=list(group.responsible_officials),
            discretion_types=list(group.discretion_types),
            paragraphs=[
                SectionParagraphModel(
                    paragraph_id=p.paragraph_id,
                    heading=p.heading,
                    text=p.paragraph,
                    matched=p.paragraph_id in matched_paragraphs,
                )
                for p in group.paragraphs
            ],
        )


class LegislationModel(BaseModel):
    legislation_id: str
    jurisdiction: str
    legislation_type: str
    act_name: str
    legislation_name: str
    url: str
    agencies: str
    current_to_date: str

    @classmethod
    def from_legislation(cls, record: Legislation) -> "LegislationModel":
        return cls(
            legislation_id=record.legislation_id,
            jurisdiction=record.jurisdiction,
            legislation_type=record.legislation_type,
            act_name=record.act_name,
            legislation_name=record.legislation_name,
            url=record.url,
            agencies=record.agencies,
            current_to_date=record.current_to_date,
        )


class SectionsResponse(BaseModel):
    total: int
    sections: List[SectionModel]
    current_legislation: Optional[LegislationModel] = None


class OptionModel(BaseModel):
    name: str
    count: int

    @classmethod
    def from_option(cls, option: FilterOption) -> "OptionModel":
        return cls(name=option.name, count=option.count)


class OptionsResponse(BaseModel):
    dimension: str
    options: List[OptionModel]


class AllOptionsResponse(BaseModel):
    options: Dict[str, List[OptionModel]]


class KeywordResolveRequest(BaseModel):
    """Keyword string of a row, the text it belongs to and the active domain."""
    keywords: str = ""
    text: str = ""
    domain: Optional[str] = None
    search_term: str = ""


class HighlightSegment(BaseModel):
    text: str
    match: bool


class KeywordResolveResponse(BaseModel):
    keywords: List[str]
    highlights: List[HighlightSegment]


class CountModel(BaseModel):
    name: str
    count: int


class ClauseDomainShareModel(BaseModel):
    clause_type: str
    management_domain: str
    section_count: int
    percent: float


class SummaryResponse(BaseModel):
    item_count: int
    statute_count: int
    keyword_frequency: List[CountModel]
    threat_counts: List[CountModel]
    clause_type_counts: List[CountModel]
    clause_domain_breakdown: List[ClauseDomainShareModel]


class CorpusReloadRequest(BaseModel):
    """Directory to load, inside LAPSE_DATA_DIR; LAPSE_DATA_DIR itself when omitted."""
    data_dir: Optional[str] = None


class DiagnosticModel(BaseModel):
    paragraph_id: str
    legislation_id: str
    message: str

    @classmethod
    def from_diagnostic(cls, diagnostic: JoinDiagnostic) -> "DiagnosticModel":
        return cls(
            paragraph_id=diagnostic.paragraph_id,
            legislation_id=diagnostic.legislation_id,
            message=diagnostic.message,
        )


class CorpusStatusResponse(BaseModel):
    status: str
    items: int
    paragraphs: int
    legislation: int
    diagnostics: List[DiagnosticModel]
