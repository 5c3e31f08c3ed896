"""
Unit tests for JoinService.

Tests the paragraph/legislation join, domain fan-out, IUCN classification
and governance keyword extraction.
"""

import pytest

from lapse.domain.keywords import GovernanceKeyword, IucnKeyword
from lapse.domain.legislation import Legislation
from lapse.domain.paragraph import Paragraph
from lapse.domain.source_tables import SourceTables
from lapse.services.join_service import JoinService


@pytest.fixture
def join_service(config):
    return JoinService(config)


def items_for(result, paragraph_id):
    return [item for item in result.items if item.paragraph_id == paragraph_id]


class TestJoin:
    """Tests for the join of the sample corpus."""

    def test_item_count_and_sequential_ids(self, join_result):
        """Six resolvable paragraphs fan out into seven items with ids 1..7."""
        assert [item.item_id for item in join_result.items] == ["1", "2", "3", "4", "5", "6", "7"]

    def test_unresolved_legislation_is_skipped_with_diagnostic(self, join_result):
        """A paragraph with an unknown legislation id is reported, not joined."""
        assert items_for(join_result, "7") == []
        assert len(join_result.diagnostics) == 1

        diagnostic = join_result.diagnostics[0]
        assert diagnostic.paragraph_id == "7"
        assert diagnostic.legislation_id == "L9"
        assert "L9" in diagnostic.message

    def test_fan_out_one_item_per_domain(self, join_result):
        """Domains {Pollution, Water} yield two items sharing id and body."""
        items = items_for(join_result, "4")

        assert [item.management_domain for item in items] == ["Pollution", "Water"]
        assert len({item.paragraph for item in items}) == 1
        assert len({item.legislation_id for item in items}) == 1

    def test_no_domain_yields_single_item_with_empty_domain(self, join_result):
        items = items_for(join_result, "6")

        assert len(items) == 1
        assert items[0].management_domain == ""

    def test_legislation_metadata_copied(self, join_result):
        item = items_for(join_result, "5")[0]

        assert item.jurisdiction == "Federal"
        assert item.legislation_type == "Regulation"
        assert item.act_name == "Fisheries Act"
        assert item.legislation_name == "Fishery (General) Regulations"
        assert item.url == "https://laws.example.gc.ca/SOR-93-53"

    def test_iucn_threats_classified(self, join_result):
        assert items_for(join_result, "1")[0].iucn_threats == ("Natural system modifications",)
        assert items_for(join_result, "2")[0].iucn_threats == ()
        assert items_for(join_result, "5")[0].iucn_threats == ("Biological resource use",)

    def test_governance_keywords_merged_after_existing(self, join_result):
        """Extracted keywords follow the row's own keywords, without duplicates."""
        assert items_for(join_result, "1")[0].domain_keywords == ("fish habitat", "spawning")

    def test_governance_keywords_same_on_every_fan_out_row(self, join_result):
        expected = ("effluent", "deleterious substance", "stream")
        assert [item.domain_keywords for item in items_for(join_result, "4")] == [expected, expected]

    def test_only_own_domains_are_extracted(self, join_result):
        """Paragraph 3 mentions fish but is not a Fisheries paragraph."""
        assert items_for(join_result, "3")[0].domain_keywords == ("deleterious substance",)

    def test_result_exposes_legislation_and_governance(self, join_result):
        assert set(join_result.legislation) == {"L1", "L2", "L3"}
        assert "fisheries" in join_result.governance
        assert join_result.paragraph_count == 6


class TestJoinEdgeCases:
    """Edge cases of the join."""

    def test_empty_tables(self, join_service):
        result = join_service.join(SourceTables())

        assert result.items == []
        assert result.diagnostics == []

    def test_missing_jurisdiction_defaults_to_federal(self, join_service):
        tables = SourceTables(
            paragraphs=[Paragraph(paragraph_id="1", legislation_id="X", text="text")],
            legislation=[Legislation(legislation_id="X", legislation_type="Act", act_name="A", legislation_name="A")],
        )

        assert join_service.join(tables).items[0].jurisdiction == "Federal"

    def test_duplicate_legislation_keeps_last(self, join_service):
        tables = SourceTables(
            paragraphs=[Paragraph(paragraph_id="1", legislation_id="X", text="text")],
            legislation=[
                Legislation(legislation_id="X", legislation_name="Old name"),
                Legislation(legislation_id="X", legislation_name="New name"),
            ],
        )

        assert join_service.join(tables).items[0].legislation_name == "New name"

    def test_keyword_with_pattern_characters_is_literal(self, join_service):
        """Keywords are escaped: "s.35" must not match "s135"."""
        tables = SourceTables(
            paragraphs=[
                Paragraph(paragraph_id="1", legislation_id="X", text="Refer to s135.", management_domains=("Fisheries",)),
                Paragraph(paragraph_id="2", legislation_id="X", text="Refer to s.35 here.", management_domains=("Fisheries",)),
                Paragraph(paragraph_id="3", legislation_id="X", text="Open ((bracket", management_domains=("Fisheries",)),
            ],
            legislation=[Legislation(legislation_id="X")],
            governance_keywords=[
                GovernanceKeyword(domain="Fisheries", keyword="s.35"),
                GovernanceKeyword(domain="Fisheries", keyword="(("),
            ],
        )

        items = join_service.join(tables).items

        assert items[0].domain_keywords == ()
        assert items[1].domain_keywords == ("s.35",)
        assert len(items) == 3

    def test_governance_match_is_whole_word(self, join_service):
        tables = SourceTables(
            paragraphs=[
                Paragraph(paragraph_id="1", legislation_id="X", text="Spawning salmon", management_domains=("Fisheries",)),
            ],
            legislation=[Legislation(legislation_id="X")],
            governance_keywords=[
                GovernanceKeyword(domain="Fisheries", keyword="spawn"),
                GovernanceKeyword(domain="Fisheries", keyword="SPAWNING"),
            ],
        )

        assert join_service.join(tables).items[0].domain_keywords == ("SPAWNING",)

    def test_iucn_categories_unique_in_first_match_order(self, join_service):
        tables = SourceTables(
            paragraphs=[Paragraph(paragraph_id="1", legislation_id="X", text="Dam and DAMS and effluent")],
            legislation=[Legislation(legislation_id="X")],
            iucn_keywords=[
                IucnKeyword(keyword="effluent", threat="Pollution"),
                IucnKeyword(keyword="dam", threat="Natural system modifications"),
                IucnKeyword(keyword="dams", threat="Natural system modifications"),
            ],
        )

        assert join_service.join(tables).items[0].iucn_threats == ("Pollution", "Natural system modifications")
