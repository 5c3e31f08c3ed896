"""
Unit tests for ExportService.
"""

from dataclasses import replace
from io import BytesIO

import pandas as pd
import pytest

from lapse.services.export_service import EXCEL_CELL_LIMIT, ExportService
from lapse.services.section_service import SectionAggregator


@pytest.fixture
def exporter(config):
    return ExportService(config)


class TestRecords:
    """Tests for flattening a FlatItem into an export row."""

    def test_multi_value_fields_are_semicolon_joined(self, exporter, flat_items):
        record = exporter.item_to_record(flat_items[3])

        assert record['id'] == "4"
        assert record['management_domain'] == "Pollution"
        assert record['mgmt_d_keyword'] == "effluent; deleterious substance; stream"
        assert record['iucn_threat'] == "Pollution"

    def test_aggregate_keywords(self, exporter, flat_items):
        assert exporter.item_to_record(flat_items[0])['aggregate_keywords'] == "fish habitat; spawning; shall"

    def test_record_round_trip(self, exporter, flat_items):
        for item in flat_items:
            assert exporter.record_to_item(exporter.item_to_record(item)) == item


class TestDataFrames:
    """Tests for the export DataFrames."""

    def test_columns_follow_config(self, exporter, config, flat_items):
        df = exporter.build_dataframe(flat_items)

        assert list(df.columns) == config.export.output_columns
        assert len(df) == 7

    def test_empty_export_keeps_header(self, exporter, config):
        df = exporter.build_dataframe([])

        assert df.empty
        assert list(df.columns) == config.export.output_columns

    def test_sections_dataframe(self, exporter, config, flat_items):
        sections = SectionAggregator(config).aggregate(flat_items)
        df = exporter.build_sections_dataframe(sections)

        assert len(df) == 4
        assert df.iloc[0]['paragraph_ids'] == "1; 2; 3"
        assert df.iloc[1]['management_domain'] == "Pollution; Water"


class TestSerialization:
    """Tests for writing and reading export files."""

    def test_csv_round_trip(self, exporter, flat_items):
        content = exporter.to_csv_bytes(exporter.build_dataframe(flat_items))

        assert content.startswith('\ufeff'.encode('utf-8'))
        assert exporter.read_export(content, "compendium.csv") == flat_items

    def test_csv_uses_semicolon(self, exporter, config, flat_items):
        content = exporter.to_csv_bytes(exporter.build_dataframe(flat_items[:1]))
        header = content.decode('utf-8-sig').splitlines()[0]

        assert header.split(";") == config.export.output_columns

    def test_excel_round_trip(self, exporter, flat_items):
        content = exporter.to_excel_bytes(exporter.build_dataframe(flat_items))
        assert exporter.read_export(content, "compendium.xlsx") == flat_items

    def test_excel_round_trip_keeps_control_characters(self, exporter, flat_items):
        """Statute text scraped from PDFs carries form feeds and vertical tabs."""
        items = [replace(flat_items[0], paragraph="Page one\x0cPage two\x0bcontinued\x1bend")]
        content = exporter.to_excel_bytes(exporter.build_dataframe(items))

        assert exporter.read_export(content, "compendium.xlsx") == items

    def test_excel_rejects_cells_longer_than_excel_allows(self, exporter, flat_items):
        items = [flat_items[0], replace(flat_items[1], paragraph="x" * (EXCEL_CELL_LIMIT + 1))]

        with pytest.raises(ValueError, match=r"row 3, column 'paragraph'.*Export as CSV"):
            exporter.to_excel_bytes(exporter.build_dataframe(items))

    def test_long_cells_still_export_to_csv(self, exporter, flat_items):
        items = [replace(flat_items[0], paragraph="x" * 40000)]
        content = exporter.to_csv_bytes(exporter.build_dataframe(items))

        assert exporter.read_export(content, "compendium.csv") == items

    def test_excel_checks_the_sections_sheet(self, exporter, config, flat_items):
        sections_df = pd.DataFrame([{'section': "35", 'text': "y" * 40000}])

        with pytest.raises(ValueError, match=config.export.sections_sheet_name):
            exporter.to_excel_bytes(exporter.build_dataframe(flat_items), sections_df)

    def test_excel_sheets(self, exporter, config, flat_items):
        sections_df = exporter.build_sections_dataframe(SectionAggregator(config).aggregate(flat_items))
        content = exporter.to_excel_bytes(exporter.build_dataframe(flat_items), sections_df)

        sheets = pd.read_excel(BytesIO(content), sheet_name=None)

        assert list(sheets) == [config.export.excel_sheet_name, config.export.sections_sheet_name]
        assert len(sheets[config.export.sections_sheet_name]) == 4

    def test_unsupported_format(self, exporter):
        with pytest.raises(ValueError, match="Unsupported file format"):
            exporter.read_export(b"data", "compendium.pdf")
