"""
Transcript segment parsing, phrase search and excerpt extraction.

Transcripts are a sequence of speaker turns:

    Brian Chesky (00:12:45):
    I think the founder has to be in the details.

    Lenny (00:13:02):
    ...

Each header line starts a segment; following non-blank lines are its text.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .bm25.tokenizer import tokenize
from .data import DataStore, EpisodeMeta

logger = logging.getLogger(__name__)

MAX_MATCHES_PER_EPISODE = 5
DEFAULT_MAX_CHARS = 8000

_SPEAKER_LINE = re.compile(r"^(.+?)\s*\((\d{1,2}:\d{2}(?::\d{2})?)\)\s*:?\s*$")


@dataclass
class TranscriptSegment:
    speaker: str
    timestamp: str
    text: str
    line_number: int  # 1-based line of the speaker header


@dataclass
class TranscriptMatch:
    text: str  # matched segment with surrounding context
    speaker: str
    timestamp: str
    line_number: int


@dataclass
class TranscriptSearchResult:
    episode: EpisodeMeta
    matches: List[TranscriptMatch]
    score: int


def parse_transcript_segments(transcript: str) -> List[TranscriptSegment]:
    """Split a transcript into speaker turns (text before the first header is ignored)"""
    segments = []
    current = None

    for i, line in enumerate(transcript.split("\n")):
        header = _SPEAKER_LINE.match(line)
        if header:
            if current:
                segments.append(current)
            current = TranscriptSegment(
                speaker=header.group(1).strip(),
                timestamp=header.group(2),
                text="",
                line_number=i + 1,
            )
        elif current and line.strip():
            current.text = f"{current.text} {line.strip()}" if current.text else line.strip()

    if current:
        segments.append(current)
    return segments


def time_to_seconds(value: str) -> int:
    """
    Convert 'HH:MM:SS' or 'MM:SS' to seconds (anything else is 0).

    Examples:
        >>> time_to_seconds("01:02:03")
        3723
        >>> time_to_seconds("12:30")
        750
    """
    try:
        parts = [int(p) for p in value.split(":")]
    except ValueError:
        return 0
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    return 0


def _with_context(segments: Sequence[TranscriptSegment], i: int, context_segments: int) -> str:
    start = max(0, i - context_segments)
    end = min(len(segments) - 1, i + context_segments)
    lines = []
    for j in range(start, end + 1):
        s = segments[j]
        prefix = ">>> " if j == i else "    "
        lines.append(f"{prefix}{s.speaker} ({s.timestamp}): {s.text}")
    return "\n".join(lines)


def _to_match(segments: Sequence[TranscriptSegment], i: int, context_segments: int) -> TranscriptMatch:
    seg = segments[i]
    return TranscriptMatch(
        text=_with_context(segments, i, context_segments),
        speaker=seg.speaker,
        timestamp=seg.timestamp,
        line_number=seg.line_number,
    )


def score_phrase_match(meta: EpisodeMeta, match_count: int, query: str) -> int:
    """Phrase-search relevance: match count plus metadata bonuses"""
    score = match_count
    q = query.lower()

    if q in meta.title.lower():
        score += 10
    if q in meta.guest.lower():
        score += 5
    if q in meta.description.lower():
        score += 3
    for keyword in meta.keywords:
        kw = keyword.lower()
        if kw in q or q in kw:
            score += 2

    return score


def search_transcripts(
    store: DataStore,
    query: str,
    max_results: int = 10,
    context_segments: int = 1
) -> List[TranscriptSearchResult]:
    """
    Case-insensitive literal phrase search over transcript segments.

    Args:
        store: Loaded corpus
        query: Phrase to look for (regex characters are matched literally)
        max_results: Maximum number of episodes to return
        context_segments: Neighbouring segments shown around each match

    Returns:
        Episodes with at least one matching segment (first 5 matches each),
        sorted by score descending
    """
    if max_results <= 0:
        raise ValueError(f"max_results must be a positive integer, got {max_results!r}")
    if not query.strip():
        return []

    pattern = re.compile(re.escape(query), re.IGNORECASE)
    results = []

    for slug, transcript in store.get_transcript_entries():
        meta = store.get_episode(slug)
        if meta is None:
            continue

        segments = parse_transcript_segments(transcript)
        matches = [
            _to_match(segments, i, context_segments)
            for i, seg in enumerate(segments)
            if pattern.search(seg.text)
        ][:MAX_MATCHES_PER_EPISODE]

        if matches:
            results.append(TranscriptSearchResult(
                episode=meta,
                matches=matches,
                score=score_phrase_match(meta, len(matches), query),
            ))

    results.sort(key=lambda r: r.score, reverse=True)
    logger.debug(f"Phrase search {query!r}: {len(results)} episodes matched")
    return results[:max_results]


def get_transcript_segment(
    store: DataStore,
    slug: str,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    max_chars: int = DEFAULT_MAX_CHARS
) -> Optional[str]:
    """
    Transcript text of an episode, optionally restricted to a time range.

    Returns:
        Raw transcript prefix when no range is given, otherwise the segments
        whose timestamp falls inside [start_time, end_time]; truncated to
        max_chars. None when the slug is unknown.
    """
    transcript = store.get_transcript(slug)
    if transcript is None:
        return None

    if not start_time and not end_time:
        return transcript[:max_chars]

    start_seconds = time_to_seconds(start_time) if start_time else 0
    end_seconds = time_to_seconds(end_time) if end_time else float("inf")

    selected = [
        s for s in parse_transcript_segments(transcript)
        if start_seconds <= time_to_seconds(s.timestamp) <= end_seconds
    ]
    text = "\n\n".join(f"{s.speaker} ({s.timestamp}):\n{s.text}" for s in selected)
    return text[:max_chars]


def extract_match_segments(
    store: DataStore,
    slug: str,
    query_terms: Sequence[str],
    max_matches: int = 3,
    context_segments: int = 1
) -> List[TranscriptMatch]:
    """
    Most relevant transcript excerpts for already-tokenized query terms.

    Segments are ranked by how many distinct query terms they contain
    (earlier segments win ties); the selected ones are returned in
    transcript order.
    """
    transcript = store.get_transcript(slug)
    if not transcript or not query_terms:
        return []

    wanted = set(query_terms)
    segments = parse_transcript_segments(transcript)

    ranked = []
    for i, seg in enumerate(segments):
        hits = len(wanted.intersection(tokenize(seg.text)))
        if hits:
            ranked.append((hits, i))

    ranked.sort(key=lambda item: (-item[0], item[1]))
    chosen = sorted(i for _, i in ranked[:max_matches])
    return [_to_match(segments, i, context_segments) for i in chosen]


def extract_overview_segments(
    store: DataStore,
    slug: str,
    intro_count: int = 4,
    closing_count: int = 3
) -> dict:
    """
    Opening and closing turns of an episode.

    Returns:
        {"intro": str, "closing": str} (empty strings when unavailable)
    """
    transcript = store.get_transcript(slug)
    if not transcript:
        return {"intro": "", "closing": ""}

    segments = parse_transcript_segments(transcript)

    def render(selected):
        return "\n\n".join(f"{s.speaker} ({s.timestamp}): {s.text}" for s in selected)

    intro = segments[:intro_count]
    closing = segments[max(intro_count, len(segments) - closing_count):] if closing_count > 0 else []
    return {"intro": render(intro), "closing": render(closing)}
