"""
Lenny's Podcast MCP server - transcript search tools for AI agents.

Tools (all read-only, text results in markdown):
- search_transcripts: literal phrase search with dialogue context
- search_episodes: multi-field BM25 ranking (AND/OR)
- get_episode: metadata + transcript (optionally a time range)
- list_topics / get_topic_episodes: curated topic index
- find_episodes: filter by guest, date range, keyword
- get_podcast_stats: corpus overview
- get_advice / compare_perspectives: excerpts from the best matching guests
- get_guest_expertise / get_episode_insights: guest and episode profiles

The corpus and BM25 index are built once in main() and handed to
create_server(); tools only read them.
"""

import logging
from typing import Annotated, List, Optional

from fastmcp import FastMCP

from . import config
from .advice import get_advice
from .bm25 import BM25Index, FieldedBM25, build_bm25_index
from .data import DataStore, EpisodeMeta
from .insights import get_episode_insights, get_guest_expertise
from .logging_config import setup_logging
from .perspectives import compare_perspectives
from .transcripts import get_transcript_segment, search_transcripts

logger = logging.getLogger(__name__)

SERVER_NAME = "lennys-podcast"


def format_episode_meta(ep: EpisodeMeta) -> str:
    return "\n".join([
        f"**{ep.guest}**: {ep.title}",
        f"Published: {ep.publish_date} | Duration: {ep.duration} | Views: {ep.view_count:,}",
        f"Topics: {', '.join(ep.keywords) if ep.keywords else 'untagged'}",
        f"YouTube: {ep.youtube_url}",
        f"File: episodes/{ep.slug}/transcript.md",
    ])


def _by_date_desc(episodes: List[EpisodeMeta]) -> List[EpisodeMeta]:
    return sorted(episodes, key=lambda e: e.publish_date or "", reverse=True)


# --- Tool renderers ---

def render_search_transcripts(store: DataStore, query: str, max_results: int = 5) -> str:
    results = search_transcripts(store, query, max_results=max_results)
    if not results:
        return f'No content found for "{query}". Try broader keywords.'

    blocks = []
    for i, r in enumerate(results, start=1):
        matches = "\n\n".join(f"**[{m.timestamp}] {m.speaker}:**\n{m.text}" for m in r.matches)
        blocks.append(
            f"### {i}. {r.episode.guest}: {r.episode.title}\n"
            f"Published: {r.episode.publish_date} | Matches: {len(r.matches)} | Relevance: {r.score}\n\n"
            f"{matches}"
        )

    return f'## Search results: "{query}"\n\nFound {len(results)} episodes\n\n' + "\n\n---\n\n".join(blocks)


def render_search_episodes(
    store: DataStore,
    index: BM25Index,
    scorer: FieldedBM25,
    query: str,
    max_results: int = 10,
    mode: str = "OR"
) -> str:
    hits = scorer.search(index, query, max_results=max_results, mode=mode)
    if not hits:
        return f'No episodes match "{query}" ({mode.upper()} mode).'

    lines = []
    for i, hit in enumerate(hits, start=1):
        meta = store.get_episode(hit.doc_id)
        if meta is None:
            continue
        lines.append(
            f"{i}. **{meta.guest}**: {meta.title}\n"
            f"   slug: {meta.slug} | score: {hit.score:.2f} | matched: {', '.join(sorted(hit.matched_terms))}"
        )

    return f'## Ranked episodes: "{query}" ({mode.upper()})\n\n' + "\n".join(lines)


def render_get_episode(
    store: DataStore,
    slug: str,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    max_chars: int = 8000
) -> str:
    meta = store.get_episode(slug)
    if meta is None:
        needle = slug.lower()
        suggestions = [
            f"  - {e.slug} ({e.guest})"
            for e in store.get_all_episodes()
            if needle in e.slug or needle in e.guest.lower()
        ][:5]
        text = f'Episode "{slug}" not found.'
        if suggestions:
            text += "\n\nDid you mean:\n" + "\n".join(suggestions)
        return text

    transcript = get_transcript_segment(store, slug, start_time, end_time, max_chars)
    time_range = f" ({start_time or 'start'} - {end_time or 'end'})" if start_time or end_time else ""
    return (
        f"## Episode\n\n{format_episode_meta(meta)}\n\n"
        f"## Transcript{time_range}\n\n{transcript or 'Transcript unavailable'}"
    )


def render_list_topics(store: DataStore) -> str:
    topics = sorted(store.get_all_topics(), key=lambda t: len(t.episode_slugs), reverse=True)
    lines = [f"- **{t.topic}** ({len(t.episode_slugs)} episodes)" for t in topics]
    return (
        f"## Lenny's Podcast topics\n\n"
        f"{len(topics)} topics, {store.get_episode_count()} episodes\n\n" + "\n".join(lines)
    )


def render_get_topic_episodes(store: DataStore, topic: str) -> str:
    episodes = store.get_topic_episodes(topic)
    if not episodes:
        similar = [t.topic for t in store.get_all_topics() if t.topic in topic or topic in t.topic][:5]
        hint = f"Similar topics: {', '.join(similar)}" if similar else "Use list_topics to see all available topics."
        return f'Topic "{topic}" not found.\n\n{hint}'

    lines = [
        f"- **{ep.guest}**: {ep.title}\n  {ep.publish_date} | {ep.duration} | slug: {ep.slug}"
        for ep in _by_date_desc(episodes)
    ]
    return f"## Topic: {topic}\n\n{len(episodes)} episodes\n\n" + "\n".join(lines)


def render_find_episodes(
    store: DataStore,
    guest: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    keyword: Optional[str] = None,
    max_results: int = 20
) -> str:
    if max_results <= 0:
        raise ValueError(f"max_results must be a positive integer, got {max_results!r}")

    episodes = store.get_all_episodes()
    if guest:
        q = guest.lower()
        episodes = [e for e in episodes if q in e.guest.lower()]
    if date_from:
        episodes = [e for e in episodes if e.publish_date >= date_from]
    if date_to:
        episodes = [e for e in episodes if e.publish_date <= date_to]
    if keyword:
        kw = keyword.lower()
        episodes = [e for e in episodes if any(kw in k.lower() or k.lower() in kw for k in e.keywords)]

    if not episodes:
        return "No episodes match these filters. Try relaxing them."

    episodes = _by_date_desc(episodes)
    shown = episodes[:max_results]
    suffix = f" (showing first {max_results})" if len(episodes) > max_results else ""
    return (
        f"## Episodes\n\nFound {len(episodes)} episodes{suffix}\n\n"
        + "\n\n---\n\n".join(format_episode_meta(ep) for ep in shown)
    )


def render_podcast_stats(store: DataStore) -> str:
    episodes = _by_date_desc(store.get_all_episodes())
    topics = sorted(store.get_all_topics(), key=lambda t: len(t.episode_slugs), reverse=True)
    total_views = sum(e.view_count for e in episodes)
    latest = episodes[0] if episodes else None
    earliest = episodes[-1] if episodes else None

    return "\n".join([
        "## Lenny's Podcast library",
        "",
        f"- **Episodes**: {len(episodes)}",
        f"- **Topics**: {len(topics)}",
        f"- **Total views**: {total_views:,}",
        f"- **Date range**: {earliest.publish_date if earliest else 'N/A'} ~ {latest.publish_date if latest else 'N/A'}",
        "",
        "### Top topics",
        *[f"- {t.topic} ({len(t.episode_slugs)} episodes)" for t in topics[:10]],
        "",
        "### Latest episode",
        format_episode_meta(latest) if latest else "N/A",
    ])


def render_advice(store: DataStore, index: BM25Index, scorer: FieldedBM25, situation: str, max_sources: int = 5) -> str:
    result = get_advice(store, index, situation, max_sources=max_sources, scorer=scorer)
    if not result.sources:
        return f'No relevant advice found for "{situation}". Try describing the situation differently.'

    blocks = []
    for i, source in enumerate(result.sources, start=1):
        block = f"### {i}. {source.guest}: {source.episode_title}\nslug: {source.slug}\n\n"
        if source.insight:
            block += f"**Key insights:** {source.insight}\n\n"
        block += "\n\n".join(source.segments)
        blocks.append(block)

    return f'## Advice: "{situation}"\n\n' + "\n\n---\n\n".join(blocks)


def render_perspectives(store: DataStore, index: BM25Index, scorer: FieldedBM25, topic: str, max_guests: int = 6) -> str:
    result = compare_perspectives(store, index, topic, max_guests=max_guests, scorer=scorer)
    if not result.perspectives:
        return f'No guest perspectives found on "{topic}".'

    blocks = [
        f"### {p.guest}: {p.episode_title}\nslug: {p.slug}\n\n" + "\n\n".join(p.viewpoints)
        for p in result.perspectives
    ]
    return f'## Perspectives on "{topic}" ({result.guest_count} guests)\n\n' + "\n\n---\n\n".join(blocks)


def render_guest_expertise(store: DataStore, guest: str) -> str:
    expertise = get_guest_expertise(store, guest)
    if expertise is None:
        return f'No guest matching "{guest}".'

    lines = [f"## {expertise.name}", ""]
    if expertise.bio:
        lines += [expertise.bio, ""]
    lines.append(f"**Episodes ({len(expertise.episodes)}):**")
    lines += [f"- {ep.title} ({ep.date}): slug: {ep.slug}" for ep in expertise.episodes]
    if expertise.expertise_areas:
        lines += ["", f"**Expertise:** {', '.join(expertise.expertise_areas)}"]
    if expertise.top_keywords:
        lines += ["", f"**Top keywords:** {', '.join(expertise.top_keywords)}"]
    if expertise.key_themes:
        lines += ["", "**Key themes:**", *[f"- {theme}" for theme in expertise.key_themes]]
    return "\n".join(lines)


def render_episode_insights(store: DataStore, slug: str) -> str:
    insights = get_episode_insights(store, slug)
    if insights is None:
        return f'Episode "{slug}" not found.'

    lines = [
        f"## {insights.guest}: {insights.title}",
        f"Published: {insights.date} | Keywords: {', '.join(insights.keywords) or 'none'}",
        "",
    ]
    if insights.overview is not None:
        lines += [
            "_No knowledge entry for this episode; showing an overview._",
            "",
            "### Description", insights.overview.description, "",
            "### Opening", insights.overview.intro, "",
            "### Closing", insights.overview.closing,
        ]
        return "\n".join(lines)

    lines += ["### Summary", insights.summary or "", ""]
    if insights.key_insights:
        lines += ["### Key insights", *[f"- {i}" for i in insights.key_insights], ""]
    if insights.frameworks:
        lines += ["### Frameworks", *[f"- **{f['name']}**: {f['description']}" for f in insights.frameworks], ""]
    if insights.quotes:
        lines += ["### Quotes", *[f'> "{q["text"]}" ({q["speaker"]})' for q in insights.quotes]]
    return "\n".join(lines).rstrip()


# --- Server ---

def create_server(store: DataStore, index: BM25Index, scorer: Optional[FieldedBM25] = None) -> FastMCP:
    """Create the MCP server exposing podcast tools over a loaded corpus and index"""
    scorer = scorer or FieldedBM25()

    mcp = FastMCP(
        name=SERVER_NAME,
        instructions=(
            f"Search {store.get_episode_count()} Lenny's Podcast transcripts. "
            "Use search_episodes to rank episodes, search_transcripts for exact phrases, "
            "then get_episode or get_episode_insights for details."
        ),
    )
    read_only = {"readOnlyHint": True}

    @mcp.tool(name="search_transcripts", annotations=read_only)
    def search_transcripts_tool(
        query: Annotated[str, "Keyword or phrase, e.g. 'product market fit', 'hiring'"],
        max_results: Annotated[int, "Maximum episodes to return"] = 5,
    ) -> str:
        """Search all transcripts for a phrase and return matching dialogue with context."""
        return render_search_transcripts(store, query, max_results)

    @mcp.tool(name="search_episodes", annotations=read_only)
    def search_episodes_tool(
        query: Annotated[str, "Free-text query, e.g. 'growth loops marketplace'"],
        max_results: Annotated[int, "Maximum episodes to return"] = 10,
        mode: Annotated[str, "OR (any term) or AND (every term must match)"] = "OR",
    ) -> str:
        """Rank episodes with multi-field BM25 over title, guest, keywords, description and transcript."""
        return render_search_episodes(store, index, scorer, query, max_results, mode)

    @mcp.tool(name="get_episode", annotations=read_only)
    def get_episode_tool(
        slug: Annotated[str, "Episode slug, e.g. 'brian-chesky'"],
        start_time: Annotated[Optional[str], "Start timestamp 'HH:MM:SS' or 'MM:SS'"] = None,
        end_time: Annotated[Optional[str], "End timestamp"] = None,
        max_chars: Annotated[int, "Maximum transcript characters"] = 8000,
    ) -> str:
        """Get episode metadata and transcript, optionally limited to a time range."""
        return render_get_episode(store, slug, start_time, end_time, max_chars)

    @mcp.tool(name="list_topics", annotations=read_only)
    def list_topics_tool() -> str:
        """List all topic categories with their episode counts."""
        return render_list_topics(store)

    @mcp.tool(name="get_topic_episodes", annotations=read_only)
    def get_topic_episodes_tool(
        topic: Annotated[str, "Hyphenated topic name, e.g. 'product-management'"],
    ) -> str:
        """List all episodes filed under a topic, newest first."""
        return render_get_topic_episodes(store, topic)

    @mcp.tool(name="find_episodes", annotations=read_only)
    def find_episodes_tool(
        guest: Annotated[Optional[str], "Guest name (partial match)"] = None,
        date_from: Annotated[Optional[str], "Start date YYYY-MM-DD"] = None,
        date_to: Annotated[Optional[str], "End date YYYY-MM-DD"] = None,
        keyword: Annotated[Optional[str], "Front matter keyword, e.g. 'leadership'"] = None,
        max_results: Annotated[int, "Maximum episodes to return"] = 20,
    ) -> str:
        """Find episodes by guest, publish date range or keyword tag."""
        return render_find_episodes(store, guest, date_from, date_to, keyword, max_results)

    @mcp.tool(name="get_podcast_stats", annotations=read_only)
    def get_podcast_stats_tool() -> str:
        """Overview of the library: episode and topic counts, views, date range, top topics."""
        return render_podcast_stats(store)

    @mcp.tool(name="get_advice", annotations=read_only)
    def get_advice_tool(
        situation: Annotated[str, "Situation or challenge, e.g. 'hiring my first PM'"],
        max_sources: Annotated[int, "Maximum guests to quote"] = 5,
    ) -> str:
        """Find what guests said about a situation, with quoted excerpts."""
        return render_advice(store, index, scorer, situation, max_sources)

    @mcp.tool(name="compare_perspectives", annotations=read_only)
    def compare_perspectives_tool(
        topic: Annotated[str, "Topic to compare, e.g. 'pricing strategy'"],
        max_guests: Annotated[int, "Maximum guests to compare"] = 6,
    ) -> str:
        """Compare how different guests talk about the same topic."""
        return render_perspectives(store, index, scorer, topic, max_guests)

    @mcp.tool(name="get_guest_expertise", annotations=read_only)
    def get_guest_expertise_tool(
        guest: Annotated[str, "Guest name (partial match)"],
    ) -> str:
        """Profile of a guest: episodes, expertise areas and recurring keywords."""
        return render_guest_expertise(store, guest)

    @mcp.tool(name="get_episode_insights", annotations=read_only)
    def get_episode_insights_tool(
        slug: Annotated[str, "Episode slug"],
    ) -> str:
        """Summary, key insights, frameworks and quotes of an episode."""
        return render_episode_insights(store, slug)

    return mcp


def main() -> None:
    config.load_environment()
    log_file, console_level = config.get_log_settings()
    setup_logging(log_file=log_file, console_level=console_level)

    store = DataStore(config.get_repo_root(), knowledge_path=config.get_knowledge_path())
    store.load()

    index = build_bm25_index(store.to_documents())
    logger.info(f"BM25 index ready: {index.total_docs} documents, {index.vocabulary_size()} field terms")

    mcp = create_server(store, index, scorer=config.create_scorer_from_env())
    mcp.run()


if __name__ == "__main__":
    main()
