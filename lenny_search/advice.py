"""
Situational advice - BM25 candidate episodes + the excerpts that match.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .bm25 import BM25Index, FieldedBM25, SearchMode, tokenize
from .data import DataStore
from .transcripts import extract_match_segments

logger = logging.getLogger(__name__)


@dataclass
class AdviceSource:
    guest: str
    episode_title: str
    slug: str
    segments: List[str] = field(default_factory=list)
    insight: Optional[str] = None  # precomputed key insights from the knowledge layer


@dataclass
class AdviceResult:
    sources: List[AdviceSource]
    has_knowledge: bool


def get_advice(
    store: DataStore,
    index: BM25Index,
    situation: str,
    max_sources: int = 5,
    scorer: Optional[FieldedBM25] = None
) -> AdviceResult:
    """
    Find guests who talked about a situation and what they said.

    Twice as many candidates as needed are ranked, since some top-ranked
    episodes match only through metadata and have no quotable excerpt.
    """
    if max_sources <= 0:
        raise ValueError(f"max_sources must be a positive integer, got {max_sources!r}")

    scorer = scorer or FieldedBM25()
    hits = scorer.search(index, situation, max_results=max_sources * 2, mode=SearchMode.OR)
    query_terms = list(dict.fromkeys(tokenize(situation)))

    sources = []
    for hit in hits:
        if len(sources) >= max_sources:
            break

        meta = store.get_episode(hit.doc_id)
        if meta is None:
            continue

        matches = extract_match_segments(store, hit.doc_id, query_terms, max_matches=3, context_segments=1)
        if not matches:
            continue

        source = AdviceSource(
            guest=meta.guest,
            episode_title=meta.title,
            slug=hit.doc_id,
            segments=[m.text for m in matches],
        )

        knowledge = store.get_episode_knowledge(hit.doc_id)
        if knowledge and knowledge.key_insights:
            source.insight = " | ".join(knowledge.key_insights)

        sources.append(source)

    logger.debug(f"Advice for {situation!r}: {len(sources)} sources from {len(hits)} candidates")
    return AdviceResult(sources=sources, has_knowledge=store.has_knowledge())
