# lapse/services/ingestion_service.py
"""
Service for ingesting the LAPSE source tables (CSV/Excel).
"""
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from ..config import AppConfig
from ..domain.keywords import GovernanceKeyword, IucnKeyword
from ..domain.legislation import Legislation
from ..domain.paragraph import Paragraph
from ..domain.source_tables import SourceTables
from ..logging_config import get_logger
from ..utils.csv_utils import clean_csv_headers, detect_delimiter, detect_encoding, resolve_columns
from ..utils.text_normalization import clean_cell, split_multi_value
from ..utils.timing import PhaseTimer

logger = get_logger('ingestion_service')

MULTI_VALUE_PARAGRAPH_FIELDS = (
    'management_domains', 'domain_keywords', 'clause_types', 'clause_keywords',
    'actionable_types', 'responsible_officials', 'discretion_types',
)


class IngestionService:
    """
    Handles loading the four source tables and converting them to records.

    Responsibilities:
    - Load CSV and Excel files as all-string DataFrames
    - Detect encoding and delimiters
    - Resolve column aliases
    - Convert rows into Paragraph, Legislation and keyword records
    """

    def __init__(self, config: AppConfig):
        """
        Initialize the ingestion service.

        Args:
            config: Application configuration
        """
        self.config = config

    # ------------------------------------------------------------------
    # Raw table loading
    # ------------------------------------------------------------------

    def load_table(self, file_bytes: bytes, filename: str) -> pd.DataFrame:
        """
        Load a source table (CSV or Excel) into a DataFrame of strings.

        Args:
            file_bytes: Raw bytes of the file
            filename: Original filename (used for format detection)

        Returns:
            DataFrame with cleaned headers and "" for blank cells

        Raises:
            ValueError: If file format is not supported
        """
        logger.info(f"Loading source table: {filename}")

        file_obj = BytesIO(file_bytes)
        filename_lower = filename.lower()

        if filename_lower.endswith('.csv'):
            df = self._load_csv(file_obj, file_bytes)
        elif filename_lower.endswith(('.xlsx', '.xls')):
            df = self._load_excel(file_obj)
        else:
            raise ValueError(f"Unsupported file format: {filename}")

        df.columns = clean_csv_headers(df.columns)
        return df

    def _load_csv(self, file_obj: BytesIO, file_bytes: bytes) -> pd.DataFrame:
        encoding = detect_encoding(file_bytes, fallback=self.config.ingestion.fallback_encoding)
        logger.debug(f"Detected encoding: {encoding}")

        # Detect delimiter from first 4KB
        sample = file_bytes[:4096].decode(encoding, errors='ignore')
        delimiter = detect_delimiter(sample, self.config.ingestion.csv_delimiters)
        logger.debug(f"Detected delimiter: {repr(delimiter)}")

        try:
            file_obj.seek(0)
            df = pd.read_csv(
                file_obj,
                delimiter=delimiter,
                encoding=encoding,
                dtype=str,
                keep_default_na=False,
                on_bad_lines='skip'
            )
        except UnicodeDecodeError as e:
            logger.warning(f"Failed with detected encoding, trying fallback: {e}")
            file_obj.seek(0)
            df = pd.read_csv(
                file_obj,
                delimiter=delimiter,
                encoding=self.config.ingestion.fallback_encoding,
                dtype=str,
                keep_default_na=False,
                on_bad_lines='skip'
            )
        logger.info(f"Loaded CSV with {len(df)} rows, {len(df.columns)} columns")
        return df

    def _load_excel(self, file_obj: BytesIO) -> pd.DataFrame:
        df = pd.read_excel(file_obj, dtype=str).fillna("")
        logger.info(f"Loaded Excel with {len(df)} rows, {len(df.columns)} columns")
        return df

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    def _columns(self, df: pd.DataFrame, aliases: Dict[str, List[str]], table: str, required: List[str]) -> Dict[str, Optional[str]]:
        columns = resolve_columns(df.columns, aliases)
        missing = [name for name in required if columns.get(name) is None]
        if missing:
            raise ValueError(
                f"{table} table is missing required column(s): {', '.join(missing)} "
                f"(found: {', '.join(map(str, df.columns))})"
            )
        absent = [name for name, col in columns.items() if col is None]
        if absent:
            logger.debug(f"{table} table has no column for: {', '.join(absent)}")
        return columns

    @staticmethod
    def _cell(row: dict, column: Optional[str]) -> str:
        return clean_cell(row.get(column)) if column else ""

    def dataframe_to_paragraphs(self, df: pd.DataFrame) -> List[Paragraph]:
        """
        Convert the paragraph table into Paragraph records.

        Rows with a blank paragraph id are skipped with a warning.

        Raises:
            ValueError: if the id columns are missing
        """
        columns = self._columns(
            df, self.config.ingestion.paragraph_columns, 'Paragraph',
            required=['paragraph_id', 'legislation_id']
        )
        separator = self.config.join.multi_value_separator

        paragraphs: List[Paragraph] = []
        skipped = 0
        for row_number, row in enumerate(df.to_dict('records'), start=2):
            paragraph_id = self._cell(row, columns['paragraph_id'])
            if not paragraph_id:
                skipped += 1
                logger.warning(f"Paragraph row {row_number} has no paragraph id; skipped")
                continue
            multi = {
                name: split_multi_value(self._cell(row, columns[name]), separator)
                for name in MULTI_VALUE_PARAGRAPH_FIELDS
            }
            paragraphs.append(Paragraph(
                paragraph_id=paragraph_id,
                legislation_id=self._cell(row, columns['legislation_id']),
                section=self._cell(row, columns['section']),
                heading=self._cell(row, columns['heading']),
                text=self._cell(row, columns['text']),
                **multi
            ))

        logger.info(f"Converted {len(paragraphs)} paragraphs ({skipped} skipped)")
        return paragraphs

    def dataframe_to_legislation(self, df: pd.DataFrame) -> List[Legislation]:
        """Convert the legislation table into Legislation records."""
        columns = self._columns(
            df, self.config.ingestion.legislation_columns, 'Legislation',
            required=['legislation_id']
        )
        records: List[Legislation] = []
        for row_number, row in enumerate(df.to_dict('records'), start=2):
            legislation_id = self._cell(row, columns['legislation_id'])
            if not legislation_id:
                logger.warning(f"Legislation row {row_number} has no legislation id; skipped")
                continue
            records.append(Legislation(
                legislation_id=legislation_id,
                **{
                    name: self._cell(row, column)
                    for name, column in columns.items()
                    if name != 'legislation_id'
                }
            ))
        logger.info(f"Converted {len(records)} legislation records")
        return records

    def dataframe_to_iucn(self, df: pd.DataFrame) -> List[IucnKeyword]:
        """Convert the IUCN keyword table; rows without keyword or threat are dropped."""
        columns = self._columns(df, self.config.ingestion.iucn_columns, 'IUCN keyword', required=['keyword', 'threat'])
        rows = [
            IucnKeyword(keyword=self._cell(row, columns['keyword']), threat=self._cell(row, columns['threat']))
            for row in df.to_dict('records')
        ]
        return [row for row in rows if row.keyword and row.threat]

    def dataframe_to_governance(self, df: pd.DataFrame) -> List[GovernanceKeyword]:
        """Convert the governance keyword table; rows without domain or keyword are dropped."""
        columns = self._columns(
            df, self.config.ingestion.governance_columns, 'Governance keyword',
            required=['domain', 'keyword']
        )
        rows = [
            GovernanceKeyword(
                domain=self._cell(row, columns['domain']),
                keyword=self._cell(row, columns['keyword']),
                scope=self._cell(row, columns['scope']),
            )
            for row in df.to_dict('records')
        ]
        return [row for row in rows if row.domain and row.keyword]

    # ------------------------------------------------------------------
    # Directory loading
    # ------------------------------------------------------------------

    def load_tables(
        self,
        paragraphs: pd.DataFrame,
        legislation: pd.DataFrame,
        iucn_keywords: pd.DataFrame,
        governance_keywords: pd.DataFrame
    ) -> SourceTables:
        """Convert four already-loaded DataFrames into SourceTables."""
        return SourceTables(
            paragraphs=self.dataframe_to_paragraphs(paragraphs),
            legislation=self.dataframe_to_legislation(legislation),
            iucn_keywords=self.dataframe_to_iucn(iucn_keywords),
            governance_keywords=self.dataframe_to_governance(governance_keywords),
        )

    def load_directory(self, path: Union[str, Path]) -> SourceTables:
        """
        Load the four configured source files from a directory.

        Args:
            path: Directory containing the source tables

        Returns:
            SourceTables ready to be joined

        Raises:
            FileNotFoundError: if a source file is missing
            ValueError: if a table is malformed
        """
        directory = Path(path)
        cfg = self.config.ingestion
        timer = PhaseTimer(f"Load source tables from {directory}")

        frames = {}
        for key, filename in (
            ('paragraphs', cfg.paragraphs_file),
            ('legislation', cfg.legislation_file),
            ('iucn_keywords', cfg.iucn_keywords_file),
            ('governance_keywords', cfg.governance_keywords_file),
        ):
            file_path = directory / filename
            if not file_path.is_file():
                raise FileNotFoundError(f"Source table not found: {file_path}")
            frames[key] = self.load_table(file_path.read_bytes(), filename)
            timer.checkpoint(f"Read {filename}")

        tables = self.load_tables(**frames)
        timer.checkpoint("Convert rows")
        timer.finish()
        logger.info(f"Loaded source tables: {tables.row_counts}")
        return tables
