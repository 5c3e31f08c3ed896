"""
Unit tests for CorpusCache.
"""

from lapse.domain.legislation import Legislation
from lapse.domain.source_tables import SourceTables
from lapse.services.corpus_cache import CorpusCache


class CountingBuilder:
    """Builder that records how often it was called."""

    def __init__(self, value="joined"):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


class TestCorpusCache:
    """Tests for caching derived views by content hash."""

    def test_miss_then_hit(self, sample_tables):
        cache = CorpusCache()
        builder = CountingBuilder()

        assert cache.get_or_build(sample_tables, builder) == "joined"
        assert cache.get_or_build(sample_tables, builder) == "joined"

        assert builder.calls == 1
        assert (cache.hits, cache.misses) == (1, 1)

    def test_equal_contents_share_an_entry(self, sample_tables):
        cache = CorpusCache()
        builder = CountingBuilder()
        copy = SourceTables(
            paragraphs=list(sample_tables.paragraphs),
            legislation=list(sample_tables.legislation),
            iucn_keywords=list(sample_tables.iucn_keywords),
            governance_keywords=list(sample_tables.governance_keywords),
        )

        cache.get_or_build(sample_tables, builder)
        cache.get_or_build(copy, builder)

        assert builder.calls == 1

    def test_different_tables_replace_entry(self, sample_tables):
        cache = CorpusCache()
        other = SourceTables(legislation=[Legislation(legislation_id="X")])

        cache.get_or_build(sample_tables, CountingBuilder("first"))
        assert cache.get_or_build(other, CountingBuilder("second")) == "second"

        assert len(cache) == 1
        assert cache.get_or_build(sample_tables, CountingBuilder("rebuilt")) == "rebuilt"

    def test_force_rebuild(self, sample_tables):
        cache = CorpusCache()
        builder = CountingBuilder()

        cache.get_or_build(sample_tables, builder)
        cache.get_or_build(sample_tables, builder, force_rebuild=True)

        assert builder.calls == 2
        assert len(cache) == 1

    def test_invalidate_by_key(self, sample_tables):
        cache = CorpusCache()
        cache.get_or_build(sample_tables, CountingBuilder())

        assert cache.invalidate("not-a-key") == 0
        assert cache.invalidate(sample_tables.content_hash()) == 1
        assert len(cache) == 0

    def test_clear_resets_counters(self, sample_tables):
        cache = CorpusCache()
        cache.get_or_build(sample_tables, CountingBuilder())
        cache.get_or_build(sample_tables, CountingBuilder())

        assert cache.clear() == 1
        assert cache.get_stats() == {'total_entries': 0, 'hits': 0, 'misses': 0, 'entries': {}}

    def test_stats_describe_entries(self, sample_tables):
        cache = CorpusCache(max_entries=2)
        cache.get_or_build(sample_tables, CountingBuilder())
        cache.get_or_build(sample_tables, CountingBuilder())

        stats = cache.get_stats()
        entry = stats['entries'][sample_tables.content_hash()]

        assert stats['total_entries'] == 1
        assert entry['access_count'] == 2
        assert entry['age_seconds'] >= 0
