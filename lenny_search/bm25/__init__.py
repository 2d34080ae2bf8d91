"""
Multi-field BM25 (Best Match 25) ranking for podcast transcripts.

Components:
- tokenizer: Text normalization and stopword removal
- fields: Searchable fields and their relevance weights
- index_builder: Immutable per-field inverted index
- scorer: BM25 scoring with AND/OR matching and coverage boosting

The index is built once per process from the full corpus and never mutated,
so any number of searches may run against it concurrently.
"""

from .tokenizer import tokenize, STOPWORDS
from .fields import Field, DEFAULT_FIELD_WEIGHTS
from .index_builder import BM25Index, Document, Posting, build_bm25_index
from .scorer import FieldedBM25, SearchHit, SearchMode, calculate_idf, search_bm25

__all__ = [
    "tokenize",
    "STOPWORDS",
    "Field",
    "DEFAULT_FIELD_WEIGHTS",
    "BM25Index",
    "Document",
    "Posting",
    "build_bm25_index",
    "FieldedBM25",
    "SearchHit",
    "SearchMode",
    "calculate_idf",
    "search_bm25",
]
