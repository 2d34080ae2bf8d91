"""
Unit tests for the multi-field BM25 index builder.
"""

import pytest
from lenny_search.bm25.fields import Field
from lenny_search.bm25.index_builder import Document, build_bm25_index


@pytest.fixture
def corpus():
    return [
        Document("doc1", title="Growth at Airbnb", guest="Brian Chesky",
                 keywords=("growth", "leadership"), description="Growth growth growth",
                 transcript="Growth came from design."),
        Document("doc2", title="Hiring Playbook", guest="Shreyas Doshi",
                 transcript="hiring hiring interviews"),
        Document("doc3"),
    ]


class TestBuildIndex:
    """Test index construction"""

    def test_postings_per_field(self, corpus):
        """Test that each field has its own posting lists"""
        index = build_bm25_index(corpus)

        assert index.posting(Field.TITLE, "growth").term_frequencies == {"doc1": 1}
        assert index.posting(Field.KEYWORDS, "growth").term_frequencies == {"doc1": 1}
        assert index.posting(Field.DESCRIPTION, "growth").term_frequencies == {"doc1": 3}
        assert index.posting(Field.GUEST, "growth") is None

    def test_document_frequency_counted_once_per_document(self, corpus):
        """Test df counts documents, not occurrences"""
        index = build_bm25_index(corpus)

        posting = index.posting(Field.TRANSCRIPT, "hiring")
        assert posting.document_frequency == 1
        assert posting.term_frequencies["doc2"] == 2

    def test_document_frequency_across_documents(self):
        """Test df grows with each document containing the term"""
        index = build_bm25_index([
            Document("a", title="growth loops"),
            Document("b", title="growth teams growth"),
            Document("c", title="pricing"),
        ])

        posting = index.posting(Field.TITLE, "growth")
        assert posting.document_frequency == 2
        assert dict(posting.term_frequencies) == {"a": 1, "b": 2}

    def test_field_lengths_recorded_for_every_field(self, corpus):
        """Test every document has a length for every field, including zero"""
        index = build_bm25_index(corpus)

        for doc_id in ("doc1", "doc2", "doc3"):
            assert set(index.field_lengths[doc_id]) == set(Field)
        assert index.field_lengths["doc3"][Field.TITLE] == 0
        assert index.field_lengths["doc1"][Field.TITLE] == 2  # "at" is a stopword
        assert index.field_lengths["doc1"][Field.DESCRIPTION] == 3

    def test_average_lengths(self, corpus):
        """Test average field length is total tokens / document count"""
        index = build_bm25_index(corpus)

        # Titles: growth airbnb (2) + hiring playbook (2) + empty (0)
        assert index.average_lengths[Field.TITLE] == pytest.approx(4 / 3)
        # Transcripts: growth came design (3) + hiring hiring interviews (3) + 0
        assert index.average_lengths[Field.TRANSCRIPT] == pytest.approx(2.0)

    def test_keywords_joined(self):
        """Test keyword list entries are indexed as one text"""
        index = build_bm25_index([Document("a", keywords=("founder mode", "design"))])

        assert index.field_lengths["a"][Field.KEYWORDS] == 3
        assert index.posting(Field.KEYWORDS, "founder") is not None

    def test_doc_ids_keep_corpus_order(self, corpus):
        """Test corpus order is preserved for deterministic tie-breaking"""
        index = build_bm25_index(corpus)

        assert index.doc_ids == ("doc1", "doc2", "doc3")
        assert index.total_docs == 3
        assert index.document_order == {"doc1": 0, "doc2": 1, "doc3": 2}

    def test_document_order_built_once(self, corpus):
        """Test the tie-break map is computed at build time and read-only"""
        index = build_bm25_index(corpus)

        assert index.document_order is index.document_order
        with pytest.raises(TypeError):
            index.document_order["doc4"] = 3

    def test_accepts_generator(self, corpus):
        """Test any iterable corpus works"""
        index = build_bm25_index(doc for doc in corpus)
        assert index.total_docs == 3

    def test_duplicate_doc_id_rejected(self):
        """Test duplicate ids are a corpus error"""
        with pytest.raises(ValueError, match="Duplicate document id"):
            build_bm25_index([Document("a", title="x1"), Document("a", title="x2")])


class TestEmptyCorpus:
    """Test degenerate corpora"""

    def test_empty_corpus_is_well_formed(self):
        """Test zero documents still produce a complete index"""
        index = build_bm25_index([])

        assert index.total_docs == 0
        assert index.doc_ids == ()
        assert set(index.postings) == set(Field)
        assert all(len(terms) == 0 for terms in index.postings.values())

    def test_empty_corpus_average_lengths_default(self):
        """Test average lengths default to 1.0 instead of NaN"""
        index = build_bm25_index([])

        assert all(index.average_lengths[field] == 1.0 for field in Field)

    def test_stopword_only_document(self):
        """Test a document with no indexable text has zero lengths"""
        index = build_bm25_index([Document("a", title="the and of", transcript="yeah um")])

        assert index.total_docs == 1
        assert all(length == 0 for length in index.field_lengths["a"].values())
        assert index.vocabulary_size() == 0


class TestImmutability:
    """Test the index cannot be modified after build"""

    def test_postings_read_only(self, corpus):
        index = build_bm25_index(corpus)

        with pytest.raises(TypeError):
            index.postings[Field.TITLE]["new"] = None
        with pytest.raises(TypeError):
            index.posting(Field.TITLE, "growth").term_frequencies["doc2"] = 5

    def test_field_lengths_read_only(self, corpus):
        index = build_bm25_index(corpus)

        with pytest.raises(TypeError):
            index.field_lengths["doc1"][Field.TITLE] = 10

    def test_rebuild_is_identical(self, corpus):
        """Test building twice from the same corpus yields equal statistics"""
        first = build_bm25_index(corpus)
        second = build_bm25_index(corpus)

        assert first.doc_ids == second.doc_ids
        assert dict(first.average_lengths) == dict(second.average_lengths)
        for field in Field:
            assert set(first.postings[field]) == set(second.postings[field])
