# lapse/config.py
"""
Central configuration for the LAPSE legislation explorer.
Uses dataclasses for type-safe configuration management.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class IngestionConfig:
    """Configuration for loading the four source tables."""
    paragraphs_file: str = "paragraph_output.csv"
    legislation_file: str = "legislation_output.csv"
    iucn_keywords_file: str = "iucn_l2_keywords.csv"
    governance_keywords_file: str = "governance_keywords.csv"

    # Canonical field -> accepted column names (matched case-insensitively)
    paragraph_columns: Dict[str, List[str]] = field(default_factory=lambda: {
        'paragraph_id': ['paragraph_id', 'para_id'],
        'legislation_id': ['legislation_id'],
        'section': ['section'],
        'heading': ['heading'],
        'text': ['paragraph', 'aggregate_paragraph', 'text'],
        'management_domains': ['management_domain'],
        'domain_keywords': ['mgmt_d_keyword', 'management_domain_keywords'],
        'clause_types': ['clause_type'],
        'clause_keywords': ['clause_type_keyword', 'clause_type_keywords'],
        'actionable_types': ['actionable_type'],
        'responsible_officials': ['responsible_official'],
        'discretion_types': ['discretion_type'],
    })

    legislation_columns: Dict[str, List[str]] = field(default_factory=lambda: {
        'legislation_id': ['legislation_id'],
        'jurisdiction': ['jurisdiction'],
        'legislation_type': ['legislation_type'],
        'act_name': ['act_name'],
        'legislation_name': ['legislation_name'],
        'url': ['url'],
        'agencies': ['agencies', 'agency'],
        'current_to_date': ['current_to_date', 'current_to'],
    })

    iucn_columns: Dict[str, List[str]] = field(default_factory=lambda: {
        'keyword': ['keyword'],
        'threat': ['iucn_l2', 'iucn_threat', 'threat'],
    })

    governance_columns: Dict[str, List[str]] = field(default_factory=lambda: {
        'domain': ['management_domain', 'domain'],
        'keyword': ['keyword'],
        'scope': ['scope'],
    })

    csv_delimiters: List[str] = field(default_factory=lambda: [',', ';', '\t'])
    fallback_encoding: str = 'latin1'


@dataclass
class JoinConfig:
    """Configuration for the paragraph/legislation join."""
    multi_value_separator: str = ";"
    export_separator: str = "; "
    # Used when a legislation record carries no jurisdiction
    default_jurisdiction: str = "Federal"


@dataclass
class SectionConfig:
    """Configuration for section-level aggregation."""
    heading_separator: str = " | "
    paragraph_separator: str = "\n\n"
    synthetic_key_prefix: str = "¶"  # pilcrow + paragraph id


@dataclass
class FilterConfig:
    """Configuration for filtering and dropdown options."""
    all_value: str = "All"
    act_legislation_type: str = "Act"
    # Dimensions whose options are ordered by prevalence instead of name
    count_sorted_dimensions: List[str] = field(default_factory=lambda: ['management_domain'])


@dataclass
class SummaryConfig:
    """Configuration for dashboard summary statistics."""
    top_n: int = 10
    min_keyword_length: int = 3
    unspecified_threat_label: str = "Unspecified"


@dataclass
class ExportConfig:
    """Configuration for the flattened export."""
    output_columns: List[str] = field(default_factory=lambda: [
        'id', 'paragraph_id', 'legislation_id',
        'jurisdiction', 'legislation_type', 'act_name', 'legislation_name',
        'url', 'agencies',
        'section', 'heading', 'paragraph',
        'management_domain', 'mgmt_d_keyword',
        'clause_type', 'clause_type_keyword',
        'actionable_type', 'responsible_official', 'discretion_type',
        'iucn_threat', 'aggregate_keywords',
    ])

    excel_sheet_name: str = "LAPSE Compendium"
    sections_sheet_name: str = "Sections"
    default_filename: str = "LAPSE_compendium.xlsx"
    csv_delimiter: str = ";"


@dataclass
class AppConfig:
    """Main application configuration combining all sub-configs."""
    ingestion: IngestionConfig = field(default_factory=IngestionConfig)
    join: JoinConfig = field(default_factory=JoinConfig)
    sections: SectionConfig = field(default_factory=SectionConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Optional path to JSON config file (currently unused)

    Returns:
        AppConfig instance with default values
    """
    return AppConfig()
