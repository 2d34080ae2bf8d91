"""
Guest expertise and episode insights.

Both work from metadata alone and get richer when the knowledge layer is
present (guest bios and themes, episode summaries, frameworks, quotes).
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .data import DataStore
from .transcripts import extract_overview_segments

TOP_KEYWORDS = 15
TOP_EXPERTISE_AREAS = 8

# Boilerplate phrases that show up in every episode description
STOP_PHRASES = frozenset([
    "lenny's podcast", "this episode", "in this", "we discuss",
    "join us", "subscribe", "listen to", "check out",
])

_QUOTED = re.compile(r'"([^"]+)"')
_ABOUT = re.compile(r"\b(?:about|on|discusses?|explores?)\s+([^,.!?]+)", re.IGNORECASE)


@dataclass
class GuestEpisode:
    slug: str
    title: str
    date: str


@dataclass
class GuestExpertise:
    name: str
    episodes: List[GuestEpisode]
    expertise_areas: List[str]
    top_keywords: List[str]
    bio: Optional[str] = None
    key_themes: Optional[List[str]] = None


@dataclass
class EpisodeOverview:
    description: str
    intro: str
    closing: str


@dataclass
class EpisodeInsights:
    slug: str
    guest: str
    title: str
    date: str
    keywords: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    key_insights: Optional[List[str]] = None
    frameworks: Optional[List[Dict[str, str]]] = None
    quotes: Optional[List[Dict[str, str]]] = None
    overview: Optional[EpisodeOverview] = None  # set when there is no knowledge entry


def extract_expertise_from_descriptions(descriptions: List[str]) -> List[str]:
    """
    Mine recurring topic phrases from episode descriptions.

    Picks up quoted phrases and whatever follows "about", "on",
    "discusses" or "explores", up to the next punctuation mark.
    """
    phrases: Counter = Counter()

    for description in descriptions:
        for quoted in _QUOTED.findall(description):
            phrase = quoted.lower().strip()
            if len(phrase) > 3 and phrase not in STOP_PHRASES:
                phrases[phrase] += 1

        for topic in _ABOUT.findall(description):
            phrase = topic.strip().lower()
            if 3 < len(phrase) < 60 and phrase not in STOP_PHRASES:
                phrases[phrase] += 1

    return [phrase for phrase, _ in phrases.most_common(TOP_EXPERTISE_AREAS)]


def get_guest_expertise(store: DataStore, guest_query: str) -> Optional[GuestExpertise]:
    """
    Everything known about a guest, matched by partial name.

    The first matching guest wins; only that guest's episodes are included
    even when the query also matches other guests.

    Returns:
        GuestExpertise, or None when no episode has a matching guest
    """
    matches = store.find_by_guest(guest_query)
    if not matches:
        return None

    name = matches[0].guest
    episodes = [store.get_episode(slug) for slug in store.get_guest_slugs(name)]

    keyword_counts = Counter(kw for ep in episodes for kw in ep.keywords)

    result = GuestExpertise(
        name=name,
        episodes=[GuestEpisode(slug=ep.slug, title=ep.title, date=ep.publish_date) for ep in episodes],
        expertise_areas=extract_expertise_from_descriptions([ep.description for ep in episodes]),
        top_keywords=[kw for kw, _ in keyword_counts.most_common(TOP_KEYWORDS)],
    )

    profile = store.get_guest_profile(name)
    if profile:
        result.bio = profile.bio
        result.key_themes = list(profile.key_themes)
        if profile.expertise_areas:
            result.expertise_areas = list(profile.expertise_areas)

    return result


def get_episode_insights(store: DataStore, slug: str) -> Optional[EpisodeInsights]:
    """Knowledge-backed insights for an episode, or a metadata/transcript overview"""
    meta = store.get_episode(slug)
    if meta is None:
        return None

    result = EpisodeInsights(
        slug=slug,
        guest=meta.guest,
        title=meta.title,
        date=meta.publish_date,
        keywords=list(meta.keywords),
    )

    knowledge = store.get_episode_knowledge(slug)
    if knowledge:
        result.summary = knowledge.summary
        result.key_insights = list(knowledge.key_insights)
        result.frameworks = [{"name": f.name, "description": f.description} for f in knowledge.frameworks]
        result.quotes = [{"text": q.text, "speaker": q.speaker} for q in knowledge.quotes]
        return result

    overview = extract_overview_segments(store, slug, intro_count=4, closing_count=3)
    result.overview = EpisodeOverview(
        description=meta.description,
        intro=overview["intro"],
        closing=overview["closing"],
    )
    return result
