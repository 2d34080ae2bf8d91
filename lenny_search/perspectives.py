"""
Perspective comparison - how different guests talk about the same topic.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .bm25 import BM25Index, FieldedBM25, SearchMode, tokenize
from .data import DataStore
from .transcripts import extract_match_segments

logger = logging.getLogger(__name__)

CANDIDATE_EPISODES = 20


@dataclass
class GuestPerspective:
    guest: str
    slug: str
    episode_title: str
    viewpoints: List[str] = field(default_factory=list)


@dataclass
class PerspectivesResult:
    topic: str
    perspectives: List[GuestPerspective]

    @property
    def guest_count(self) -> int:
        return len(self.perspectives)


def compare_perspectives(
    store: DataStore,
    index: BM25Index,
    topic: str,
    max_guests: int = 6,
    scorer: Optional[FieldedBM25] = None
) -> PerspectivesResult:
    """
    Collect viewpoints on a topic from distinct guests.

    Only the best-ranked episode of each guest is used; viewpoints are the
    matching transcript segments without surrounding context.
    """
    if max_guests <= 0:
        raise ValueError(f"max_guests must be a positive integer, got {max_guests!r}")

    scorer = scorer or FieldedBM25()
    hits = scorer.search(index, topic, max_results=CANDIDATE_EPISODES, mode=SearchMode.OR)
    query_terms = list(dict.fromkeys(tokenize(topic)))

    by_guest: Dict[str, GuestPerspective] = {}
    for hit in hits:
        meta = store.get_episode(hit.doc_id)
        if meta is None:
            continue

        guest_key = meta.guest.lower()
        if guest_key in by_guest:
            continue
        if len(by_guest) >= max_guests:
            break

        matches = extract_match_segments(store, hit.doc_id, query_terms, max_matches=3, context_segments=0)
        if not matches:
            continue

        by_guest[guest_key] = GuestPerspective(
            guest=meta.guest,
            slug=hit.doc_id,
            episode_title=meta.title,
            viewpoints=[m.text for m in matches],
        )

    return PerspectivesResult(topic=topic, perspectives=list(by_guest.values()))
