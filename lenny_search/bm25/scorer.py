"""
Multi-field BM25 scorer (BM25 with per-field weights and coverage boosting).

Per query term t, field f and document d:

    idf(t, f)   = ln(1 + (N - df + 0.5) / (df + 0.5))
    tf_norm     = (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × len_f(d) / avglen_f))
    contrib     = idf × tf_norm × weight(f)

Where:
    N        = number of documents in the index
    df       = documents containing t in field f
    tf       = occurrences of t in field f of d
    k1       = term frequency saturation parameter (default: 1.2)
    b        = length normalization parameter (default: 0.75)
    weight   = field weight (title 8.0 ... transcript 1.0)

Contributions are summed across all (term, field) pairs. Afterwards:
    - AND mode (≥ 2 query terms): drop documents missing any query term
    - Coverage boost: score × (1 + matched_terms / query_terms × coverage_boost)
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Set, Union

from .fields import Field, validate_field_weights
from .index_builder import BM25Index
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10


class SearchMode(str, Enum):
    """How multi-term queries filter candidates"""
    AND = "AND"  # every query term must match somewhere in the document
    OR = "OR"    # any single matching term keeps the document

    @classmethod
    def parse(cls, value: Union["SearchMode", str]) -> "SearchMode":
        """Accept enum members or case-insensitive names ('and', 'OR', ...)"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Invalid mode: {value!r}. Valid options: AND, OR")


@dataclass(frozen=True)
class SearchHit:
    """Single ranked document"""
    doc_id: str
    score: float
    matched_terms: FrozenSet[str] = frozenset()


def calculate_idf(document_frequency: int, total_docs: int) -> float:
    """
    Smoothed BM25 inverse document frequency.

    Never negative for df <= N, never divides by zero thanks to +0.5 smoothing.

    Examples:
        >>> round(calculate_idf(1, 3), 4)
        0.9808
        >>> calculate_idf(3, 3) > 0
        True
    """
    return math.log(1 + (total_docs - document_frequency + 0.5) / (document_frequency + 0.5))


class FieldedBM25:
    """
    BM25 scoring across independently weighted fields.

    Stateless apart from its parameters: one instance can serve any number of
    concurrent searches against any number of indexes.
    """

    def __init__(
        self,
        k1: float = 1.2,
        b: float = 0.75,
        coverage_boost: float = 0.5,
        field_weights: Optional[Mapping] = None
    ):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = more weight to repeated occurrences
                Default: 1.2 (standard)

            b: Length normalization parameter
                0.0 = no length normalization, 1.0 = full normalization
                Default: 0.75 (standard)

            coverage_boost: Bonus for matching more distinct query terms
                Score multiplier is 1 + coverage_fraction × coverage_boost
                Default: 0.5 (a document matching every term gets 1.5x)

            field_weights: Overrides for DEFAULT_FIELD_WEIGHTS (partial allowed)

        Raises:
            ValueError: Parameter outside its valid range
        """
        if k1 < 0:
            raise ValueError(f"k1 must be >= 0, got {k1}")
        if not 0 <= b <= 1:
            raise ValueError(f"b must be between 0 and 1, got {b}")
        if coverage_boost < 0:
            raise ValueError(f"coverage_boost must be >= 0, got {coverage_boost}")

        self.k1 = k1
        self.b = b
        self.coverage_boost = coverage_boost
        self.field_weights: Dict[Field, float] = validate_field_weights(field_weights)

    def term_saturation(self, tf: int, field_length: int, average_length: float) -> float:
        """
        Length-normalized term frequency component.

        Grows with tf but saturates towards k1 + 1; fields longer than the
        corpus average are penalized, shorter ones rewarded.
        """
        if tf <= 0:
            return 0.0
        average_length = average_length or 1.0
        denominator = tf + self.k1 * (1 - self.b + self.b * (field_length / average_length))
        return (tf * (self.k1 + 1)) / denominator

    def search(
        self,
        index: BM25Index,
        query: str,
        max_results: int = DEFAULT_MAX_RESULTS,
        mode: Union[SearchMode, str] = SearchMode.OR
    ) -> List[SearchHit]:
        """
        Rank documents of the index against a free-text query.

        Args:
            index: Index produced by build_bm25_index()
            query: Raw query text (tokenized with the index tokenizer)
            max_results: Maximum number of hits to return (positive integer)
            mode: SearchMode.OR (default) or SearchMode.AND, strings accepted

        Returns:
            Hits sorted by descending score, ties broken by corpus order.
            Empty list when the query has no indexable terms or nothing matches.

        Raises:
            ValueError: Invalid max_results or mode

        Example:
            >>> scorer = FieldedBM25()
            >>> hits = scorer.search(index, "growth hiring", max_results=5, mode="AND")
            >>> [hit.doc_id for hit in hits]
            ['hiring-playbook']
        """
        if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results <= 0:
            raise ValueError(f"max_results must be a positive integer, got {max_results!r}")
        mode = SearchMode.parse(mode)

        # Repeated query words count once
        query_terms = list(dict.fromkeys(tokenize(query)))
        if not query_terms:
            logger.debug(f"Query {query!r} has no indexable terms")
            return []

        scores: Dict[str, float] = {}
        term_hits: Dict[str, Set[str]] = {}

        for term in query_terms:
            for field in Field:
                posting = index.posting(field, term)
                if posting is None:
                    continue

                idf = calculate_idf(posting.document_frequency, index.total_docs)
                weight = self.field_weights[field]
                average_length = index.average_lengths[field]

                for doc_id, tf in posting.term_frequencies.items():
                    tf_norm = self.term_saturation(tf, index.field_lengths[doc_id][field], average_length)
                    scores[doc_id] = scores.get(doc_id, 0.0) + idf * tf_norm * weight
                    term_hits.setdefault(doc_id, set()).add(term)

        if mode is SearchMode.AND and len(query_terms) > 1:
            candidates = [doc_id for doc_id in scores if len(term_hits[doc_id]) >= len(query_terms)]
        else:
            candidates = list(scores)

        # Coverage boost applied once, after additive scoring
        hits = []
        for doc_id in candidates:
            coverage = len(term_hits[doc_id]) / len(query_terms)
            hits.append(SearchHit(
                doc_id=doc_id,
                score=scores[doc_id] * (1 + coverage * self.coverage_boost),
                matched_terms=frozenset(term_hits[doc_id]),
            ))

        order = index.document_order
        hits.sort(key=lambda hit: (-hit.score, order[hit.doc_id]))

        logger.debug(
            f"BM25 search {query!r} ({mode.value}): {len(query_terms)} terms, "
            f"{len(scores)} candidates, {len(hits)} after filtering"
        )

        return hits[:max_results]


_default_scorer = FieldedBM25()


def search_bm25(
    index: BM25Index,
    query: str,
    max_results: int = DEFAULT_MAX_RESULTS,
    mode: Union[SearchMode, str] = SearchMode.OR
) -> List[SearchHit]:
    """Search with default parameters (k1=1.2, b=0.75, coverage boost 0.5)"""
    return _default_scorer.search(index, query, max_results=max_results, mode=mode)
