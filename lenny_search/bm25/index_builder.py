"""
BM25 index builder - per-field inverted index over the episode corpus.

Creates an immutable in-memory index that is rebuilt from scratch on every
process start (the corpus is fixed for the lifetime of the process).

Structure:
    postings[field][term] -> Posting(document_frequency, {doc_id: tf})
    field_lengths[doc_id][field] -> token count
    average_lengths[field] -> mean token count across the corpus
"""

import logging
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .fields import Field
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

# Average length used when there is nothing to average over
EMPTY_CORPUS_AVERAGE_LENGTH = 1.0


@dataclass(frozen=True)
class Document:
    """Searchable view of one episode: stable id plus the indexed text fields"""
    doc_id: str
    title: str = ""
    guest: str = ""
    keywords: Tuple[str, ...] = ()
    description: str = ""
    transcript: str = ""

    def field_text(self, field: Field) -> str:
        """Text indexed for a field (keywords are joined with spaces)"""
        if field is Field.KEYWORDS:
            return " ".join(self.keywords)
        return getattr(self, field.value)


@dataclass(frozen=True)
class Posting:
    """Documents containing a term within one field"""
    document_frequency: int
    term_frequencies: Mapping[str, int]


@dataclass(frozen=True)
class BM25Index:
    """
    Read-only multi-field BM25 index.

    Safe to share between concurrent queries: every mapping is wrapped in a
    MappingProxyType and nothing is mutated after build_bm25_index() returns.
    """
    postings: Mapping[Field, Mapping[str, Posting]]
    field_lengths: Mapping[str, Mapping[Field, int]]
    average_lengths: Mapping[Field, float]
    doc_ids: Tuple[str, ...]
    # doc_id -> position in corpus order (tie-breaking)
    document_order: Mapping[str, int]

    @property
    def total_docs(self) -> int:
        return len(self.doc_ids)

    def posting(self, field: Field, term: str) -> Optional[Posting]:
        return self.postings[field].get(term)

    def vocabulary_size(self) -> int:
        """Number of distinct (field, term) pairs"""
        return sum(len(terms) for terms in self.postings.values())


def build_bm25_index(documents: Iterable[Document]) -> BM25Index:
    """
    Build the multi-field BM25 index from a complete corpus snapshot.

    For every document and every field:
    - tokenize the field text
    - count term frequencies within that field
    - bump the (field, term) document frequency once per document
    - record the field length (also when it is zero)

    Args:
        documents: Deduplicated corpus (unique doc_id per document)

    Returns:
        Immutable BM25Index. An empty corpus yields a well-formed empty index
        whose average lengths are 1.0.

    Raises:
        ValueError: Two documents share the same doc_id

    Example:
        >>> index = build_bm25_index([
        ...     Document("brian-chesky", title="Growth at Airbnb", guest="Brian Chesky"),
        ... ])
        >>> index.posting(Field.TITLE, "airbnb").term_frequencies
        mappingproxy({'brian-chesky': 1})
    """
    term_frequencies: Dict[Field, Dict[str, Dict[str, int]]] = {field: {} for field in Field}
    field_lengths: Dict[str, Mapping[Field, int]] = {}
    total_lengths = {field: 0 for field in Field}
    doc_ids = []

    for document in documents:
        if document.doc_id in field_lengths:
            raise ValueError(f"Duplicate document id in corpus: {document.doc_id!r}")

        lengths = {}
        for field in Field:
            tokens = tokenize(document.field_text(field))
            lengths[field] = len(tokens)
            total_lengths[field] += len(tokens)

            field_terms = term_frequencies[field]
            for term, tf in Counter(tokens).items():
                field_terms.setdefault(term, {})[document.doc_id] = tf

        field_lengths[document.doc_id] = MappingProxyType(lengths)
        doc_ids.append(document.doc_id)

    doc_count = len(doc_ids)
    if doc_count:
        average_lengths = {field: total_lengths[field] / doc_count for field in Field}
    else:
        average_lengths = {field: EMPTY_CORPUS_AVERAGE_LENGTH for field in Field}

    # Freeze: one posting per (field, term), df = number of documents holding the term
    postings = {
        field: MappingProxyType({
            term: Posting(
                document_frequency=len(docs),
                term_frequencies=MappingProxyType(docs),
            )
            for term, docs in field_terms.items()
        })
        for field, field_terms in term_frequencies.items()
    }

    index = BM25Index(
        postings=MappingProxyType(postings),
        field_lengths=MappingProxyType(field_lengths),
        average_lengths=MappingProxyType(average_lengths),
        doc_ids=tuple(doc_ids),
        document_order=MappingProxyType({doc_id: position for position, doc_id in enumerate(doc_ids)}),
    )

    logger.debug(
        f"Built BM25 index: {doc_count} documents, "
        f"{index.vocabulary_size()} distinct field terms"
    )

    return index
