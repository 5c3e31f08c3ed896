"""
Unit tests for KeywordScopeResolver.
"""

import pytest

from lapse.domain.keywords import GovernanceDictionary
from lapse.services.keyword_scope_service import KeywordScopeResolver

HABITAT_TEXT = "No person shall carry on any work that results in the harmful alteration of fish habitat or spawning grounds."


@pytest.fixture
def resolver(config, governance_records):
    return KeywordScopeResolver(config, GovernanceDictionary(governance_records))


class TestResolveDomainKeywords:
    """Tests for narrowing keywords to the active domain."""

    def test_governance_domain_keeps_present_keywords_in_dictionary_order(self, resolver):
        resolved = resolver.resolve_domain_keywords("effluent; fish habitat; spawning", HABITAT_TEXT, "Fisheries")
        assert resolved == ["spawning", "fish habitat"]

    def test_domain_name_is_case_insensitive(self, resolver):
        assert resolver.resolve_domain_keywords("spawning", HABITAT_TEXT, "fisheries") == ["spawning", "fish habitat"]

    def test_other_governance_domain_with_no_hits(self, resolver):
        assert resolver.resolve_domain_keywords("effluent; spawning", HABITAT_TEXT, "Pollution") == []

    @pytest.mark.parametrize("domain", [None, "", "All", "Salmon Habitat"])
    def test_unscoped_domains_return_split_keywords(self, resolver, domain):
        resolved = resolver.resolve_domain_keywords("effluent;  spawning ;", HABITAT_TEXT, domain)
        assert resolved == ["effluent", "spawning"]

    def test_whole_word_matching(self, resolver):
        assert resolver.resolve_domain_keywords("", "Streams and streambeds", "Water") == []
        assert resolver.resolve_domain_keywords("", "A Stream bank", "Water") == ["stream"]

    def test_without_dictionary_everything_is_unscoped(self, config):
        resolver = KeywordScopeResolver(config)
        assert resolver.resolve_domain_keywords("a; b", "text", "Fisheries") == ["a", "b"]


class TestSplitHighlights:
    """Tests for splitting text into highlighted segments."""

    def test_segments_concatenate_to_text(self):
        text = "Deposit of a deleterious substance near a stream."
        segments = KeywordScopeResolver.split_highlights(text, ["stream", "deleterious substance"])

        assert "".join(segment for segment, _ in segments) == text
        assert [segment for segment, match in segments if match] == ["deleterious substance", "stream"]

    def test_case_insensitive_keeps_original_casing(self):
        segments = KeywordScopeResolver.split_highlights("Fish habitat", ["FISH"])
        assert segments == [("Fish", True), (" habitat", False)]

    def test_longer_term_wins(self):
        segments = KeywordScopeResolver.split_highlights("fish habitat", ["fish", "fish habitat"])
        assert segments == [("fish habitat", True)]

    def test_terms_are_literal(self):
        segments = KeywordScopeResolver.split_highlights("s135 and s.35", ["s.35"])
        assert segments == [("s135 and ", False), ("s.35", True)]

    def test_no_terms(self):
        assert KeywordScopeResolver.split_highlights("text", ["", "  "]) == [("text", False)]

    def test_empty_text(self):
        assert KeywordScopeResolver.split_highlights("", ["fish"]) == []
