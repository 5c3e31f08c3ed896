# lapse/services/export_service.py
"""
Service for exporting FlatItems and sections to Excel and CSV.

The flattened export has one row per FlatItem, every field scalar, and
multi-value fields semicolon-encoded. :meth:`ExportService.read_export`
reads such a file back into FlatItems.
"""
from io import BytesIO
from typing import Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.escape import unescape

from ..config import AppConfig
from ..domain.flat_item import FlatItem
from ..domain.section import SectionGroup
from ..logging_config import get_logger
from ..utils.text_normalization import clean_cell, join_multi_value, split_multi_value

logger = get_logger('export_service')

# Export column -> FlatItem attribute, for tuple-valued fields
MULTI_VALUE_COLUMNS: Dict[str, str] = {
    'mgmt_d_keyword': 'domain_keywords',
    'clause_type': 'clause_types',
    'clause_type_keyword': 'clause_keywords',
    'actionable_type': 'actionable_types',
    'responsible_official': 'responsible_officials',
    'discretion_type': 'discretion_types',
    'iucn_threat': 'iucn_threats',
}

# Export column -> FlatItem attribute, for scalar fields
SCALAR_COLUMNS: Dict[str, str] = {
    'id': 'item_id',
    'paragraph_id': 'paragraph_id',
    'legislation_id': 'legislation_id',
    'jurisdiction': 'jurisdiction',
    'legislation_type': 'legislation_type',
    'act_name': 'act_name',
    'legislation_name': 'legislation_name',
    'url': 'url',
    'agencies': 'agencies',
    'section': 'section',
    'heading': 'heading',
    'paragraph': 'paragraph',
    'management_domain': 'management_domain',
}

# Longest string a worksheet cell holds; Excel truncates anything longer
EXCEL_CELL_LIMIT = 32767


def escape_excel_text(value):
    """Replace characters worksheets reject with their OOXML _xHHHH_ escape."""
    if isinstance(value, str) and ILLEGAL_CHARACTERS_RE.search(value):
        return ILLEGAL_CHARACTERS_RE.sub(lambda match: "_x{:04X}_".format(ord(match.group(0))), value)
    return value


class ExportService:
    """
    Handles export of the joined corpus to Excel and CSV.
    """

    def __init__(self, config: AppConfig):
        """
        Initialize the export service.

        Args:
            config: Application configuration
        """
        self.config = config

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def item_to_record(self, item: FlatItem) -> Dict[str, str]:
        """Flatten one FlatItem into an export row."""
        separator = self.config.join.export_separator
        record = {column: getattr(item, attr) for column, attr in SCALAR_COLUMNS.items()}
        for column, attr in MULTI_VALUE_COLUMNS.items():
            record[column] = join_multi_value(getattr(item, attr), separator)
        record['aggregate_keywords'] = join_multi_value(item.aggregate_keywords, separator)
        return record

    def record_to_item(self, record: Dict) -> FlatItem:
        """
        Rebuild a FlatItem from an export row.

        ``aggregate_keywords`` is derived and therefore ignored.
        """
        separator = self.config.join.multi_value_separator
        values = {attr: clean_cell(record.get(column)) for column, attr in SCALAR_COLUMNS.items()}
        for column, attr in MULTI_VALUE_COLUMNS.items():
            values[attr] = split_multi_value(clean_cell(record.get(column)), separator)
        return FlatItem(**values)

    # ------------------------------------------------------------------
    # DataFrames
    # ------------------------------------------------------------------

    def build_dataframe(self, items: Sequence[FlatItem]) -> pd.DataFrame:
        """
        Build the flattened export DataFrame.

        Args:
            items: FlatItems to export, in display order

        Returns:
            DataFrame with the configured export columns
        """
        rows = [self.item_to_record(item) for item in items]
        df = pd.DataFrame(rows, columns=self.config.export.output_columns)
        logger.info(f"Created export DataFrame with {len(df)} rows, {len(df.columns)} columns")
        return df

    def build_sections_dataframe(self, sections: Sequence[SectionGroup]) -> pd.DataFrame:
        """One row per section with merged text and unioned labels."""
        separator = self.config.join.export_separator
        rows = []
        for group in sections:
            rows.append({
                'legislation_id': group.legislation_id,
                'jurisdiction': group.jurisdiction,
                'legislation_type': group.legislation_type,
                'act_name': group.act_name,
                'legislation_name': group.legislation_name,
                'url': group.url,
                'section': group.section_key,
                'heading': group.heading,
                'paragraph_ids': join_multi_value(group.paragraph_ids, separator),
                'text': group.text,
                'management_domain': join_multi_value(group.management_domains, separator),
                'keywords': join_multi_value(group.keywords, separator),
                'iucn_threat': join_multi_value(group.iucn_threats, separator),
                'clause_type': join_multi_value(group.clause_types, separator),
                'actionable_type': join_multi_value(group.actionable_types, separator),
                'responsible_official': join_multi_value(group.responsible_officials, separator),
                'discretion_type': join_multi_value(group.discretion_types, separator),
            })
        return pd.DataFrame(rows)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def prepare_excel_sheet(self, df: pd.DataFrame, sheet_name: str) -> pd.DataFrame:
        """
        Escape control characters and check cell lengths before writing a sheet.

        Raises:
            ValueError: If a cell exceeds EXCEL_CELL_LIMIT characters
        """
        safe = df.copy()
        for column in safe.columns:
            safe[column] = safe[column].map(escape_excel_text)
            for position, value in enumerate(safe[column]):
                if isinstance(value, str) and len(value) > EXCEL_CELL_LIMIT:
                    raise ValueError(
                        f"Sheet '{sheet_name}' row {position + 2}, column '{column}' holds {len(value)} characters; "
                        f"Excel cells are limited to {EXCEL_CELL_LIMIT}. Export as CSV instead."
                    )
        return safe

    def to_excel_bytes(self, df: pd.DataFrame, sections_df: Optional[pd.DataFrame] = None) -> bytes:
        """
        Export DataFrame to Excel bytes.

        Args:
            df: Flattened export DataFrame
            sections_df: Optional section summary written to a second sheet

        Returns:
            Excel file as bytes

        Raises:
            ValueError: If a cell is longer than Excel can store
        """
        output = BytesIO()

        df = self.prepare_excel_sheet(df, self.config.export.excel_sheet_name)
        if sections_df is not None:
            sections_df = self.prepare_excel_sheet(sections_df, self.config.export.sections_sheet_name)

        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name=self.config.export.excel_sheet_name, index=False)
            logger.info(f"{self.config.export.excel_sheet_name} sheet: {len(df)} rows")

            if sections_df is not None and not sections_df.empty:
                sections_df.to_excel(writer, sheet_name=self.config.export.sections_sheet_name, index=False)
                logger.info(f"{self.config.export.sections_sheet_name} sheet: {len(sections_df)} rows")

            # Freeze header row
            writer.sheets[self.config.export.excel_sheet_name].freeze_panes = 'A2'

        logger.info("Generated Excel file")
        return output.getvalue()

    def to_csv_bytes(self, df: pd.DataFrame, delimiter: Optional[str] = None) -> bytes:
        """
        Export DataFrame to CSV bytes.

        Args:
            df: DataFrame to export
            delimiter: CSV delimiter (default from config: ';')

        Returns:
            CSV file as bytes (utf-8 with BOM so Excel detects the encoding)
        """
        output = BytesIO()
        df.to_csv(output, sep=delimiter or self.config.export.csv_delimiter, index=False, encoding='utf-8-sig')
        return output.getvalue()

    def read_export(self, file_bytes: bytes, filename: str) -> List[FlatItem]:
        """
        Read a flattened export back into FlatItems.

        Args:
            file_bytes: Raw bytes of an export produced by this service
            filename: Original filename (used for format detection)

        Returns:
            FlatItems equal to the exported ones

        Raises:
            ValueError: If file format is not supported
        """
        file_obj = BytesIO(file_bytes)
        filename_lower = filename.lower()
        if filename_lower.endswith('.csv'):
            df = pd.read_csv(
                file_obj,
                sep=self.config.export.csv_delimiter,
                encoding='utf-8-sig',
                dtype=str,
                keep_default_na=False
            )
        elif filename_lower.endswith(('.xlsx', '.xls')):
            df = pd.read_excel(file_obj, sheet_name=self.config.export.excel_sheet_name, dtype=str).fillna("")
            for column in df.columns:
                df[column] = df[column].map(unescape)
        else:
            raise ValueError(f"Unsupported file format: {filename}")

        items = [self.record_to_item(record) for record in df.to_dict('records')]
        logger.info(f"Read {len(items)} items from export {filename}")
        return items
