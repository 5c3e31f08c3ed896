"""
Unit tests for SummaryService.
"""

import pytest

from lapse.domain.flat_item import FlatItem
from lapse.services.summary_service import SummaryService


@pytest.fixture
def summaries(config):
    return SummaryService(config)


class TestSummarize:
    """Tests for the dashboard summary of the sample corpus."""

    def test_counts(self, summaries, flat_items):
        summary = summaries.summarize(flat_items)

        assert summary.item_count == 7
        assert summary.statute_count == 3

    def test_keyword_frequency(self, summaries, flat_items):
        assert summaries.summarize(flat_items).keyword_frequency == [
            ("deleterious substance", 3),
            ("effluent", 2),
            ("stream", 2),
            ("fish habitat", 1),
            ("spawning", 1),
        ]

    def test_threat_counts_include_unspecified(self, summaries, flat_items):
        assert summaries.summarize(flat_items).threat_counts == [
            ("Pollution", 3),
            ("Unspecified", 2),
            ("Natural system modifications", 1),
            ("Biological resource use", 1),
        ]

    def test_clause_type_counts(self, summaries, flat_items):
        assert summaries.summarize(flat_items).clause_type_counts == [("Regulatory", 5), ("Enabling", 1)]

    def test_clause_domain_breakdown(self, summaries, flat_items):
        breakdown = summaries.summarize(flat_items).clause_domain_breakdown

        assert [(s.management_domain, s.clause_type, s.section_count, s.percent) for s in breakdown] == [
            ("Fisheries", "Enabling", 1, 50.0),
            ("Fisheries", "Regulatory", 1, 50.0),
            ("Pollution", "Regulatory", 2, 100.0),
            ("Water", "Regulatory", 1, 100.0),
        ]

    def test_domain_scopes_keyword_and_threat_counts(self, summaries, flat_items):
        summary = summaries.summarize(flat_items, domain="pollution")

        assert summary.item_count == 7
        assert summary.keyword_frequency == [("deleterious substance", 2), ("effluent", 1), ("stream", 1)]
        assert summary.threat_counts == [("Pollution", 2)]

    def test_all_domain_is_unscoped(self, summaries, flat_items):
        assert summaries.summarize(flat_items, domain="All") == summaries.summarize(flat_items)

    def test_empty(self, summaries):
        summary = summaries.summarize([])

        assert summary.statute_count == 0
        assert summary.keyword_frequency == []
        assert summary.clause_domain_breakdown == []


class TestSummaryDetails:
    """Edge cases of individual statistics."""

    def test_short_keywords_are_ignored(self, summaries):
        items = [FlatItem(item_id="1", paragraph_id="1", legislation_id="L", domain_keywords=("ox", "salmon"))]
        assert summaries.keyword_frequency(items) == [("salmon", 1)]

    def test_counts_merge_case_variants_under_first_casing(self, summaries):
        items = [
            FlatItem(item_id="1", paragraph_id="1", legislation_id="L",
                     domain_keywords=("Fish Habitat",), clause_types=("Regulatory",)),
            FlatItem(item_id="2", paragraph_id="2", legislation_id="L",
                     domain_keywords=("fish habitat",), clause_types=("regulatory",)),
            FlatItem(item_id="3", paragraph_id="3", legislation_id="L",
                     domain_keywords=("FISH HABITAT", "effluent"), clause_types=("Enabling",)),
        ]

        assert summaries.keyword_frequency(items) == [("Fish Habitat", 3), ("effluent", 1)]
        assert summaries.clause_type_counts(items) == [("Regulatory", 2), ("Enabling", 1)]

    def test_top_n(self, summaries, config):
        items = [
            FlatItem(item_id=str(i), paragraph_id=str(i), legislation_id="L", domain_keywords=(f"keyword{i}",))
            for i in range(config.summary.top_n + 5)
        ]
        assert len(summaries.keyword_frequency(items)) == config.summary.top_n

    def test_to_dict(self, summaries, flat_items):
        data = summaries.summarize(flat_items).to_dict()

        assert data['threat_counts'][0] == {'name': 'Pollution', 'count': 3}
        assert data['clause_domain_breakdown'][0]['percent'] == 50.0
