"""
Corpus loading - episodes, transcripts, topic index and knowledge layer.

Repository layout:
    <root>/episodes/<slug>/transcript.md   YAML front matter + transcript body
    <root>/index/<topic>.md                 markdown list linking ../episodes/<slug>/
    <root>/data/knowledge.json              optional AI knowledge layer

Everything is loaded once at startup and is read-only afterwards.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .bm25.index_builder import Document
from .front_matter import parse_front_matter
from .knowledge import EpisodeKnowledge, GuestProfile, KnowledgeBase, load_knowledge_base

logger = logging.getLogger(__name__)

TRANSCRIPT_FILENAME = "transcript.md"

# Topic files that are listings rather than topics
EXCLUDED_TOPIC_FILES = {"README.md", "episodes.md"}

_TOPIC_LINK = re.compile(r"\[.*?\]\(\.\./episodes/([^/]+)/")


@dataclass
class EpisodeMeta:
    """Front matter of one episode transcript"""
    slug: str
    guest: str
    title: str = ""
    youtube_url: str = ""
    video_id: str = ""
    publish_date: str = ""
    description: str = ""
    duration_seconds: int = 0
    duration: str = ""
    view_count: int = 0
    channel: str = ""
    keywords: List[str] = field(default_factory=list)
    file_path: str = ""


@dataclass
class TopicIndex:
    topic: str
    episode_slugs: List[str] = field(default_factory=list)


def _as_text(value) -> str:
    return "" if value is None else str(value)


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_date(value) -> str:
    # YAML parses unquoted 2024-05-01 into a date object
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return _as_text(value)


def _as_keywords(value) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        return []
    return [str(k) for k in value if k is not None]


def episode_meta_from_front_matter(slug: str, data: dict, file_path: str = "") -> EpisodeMeta:
    """Build EpisodeMeta from parsed front matter, filling gaps with defaults"""
    return EpisodeMeta(
        slug=slug,
        guest=_as_text(data.get("guest")) or slug,
        title=_as_text(data.get("title")),
        youtube_url=_as_text(data.get("youtube_url")),
        video_id=_as_text(data.get("video_id")),
        publish_date=_as_date(data.get("publish_date")),
        description=_as_text(data.get("description")),
        duration_seconds=_as_int(data.get("duration_seconds")),
        duration=_as_text(data.get("duration")),
        view_count=_as_int(data.get("view_count")),
        channel=_as_text(data.get("channel")),
        keywords=_as_keywords(data.get("keywords")),
        file_path=file_path,
    )


class DataStore:
    """
    In-memory corpus of episodes.

    Usage:
        store = DataStore("/path/to/lennys-podcast-transcripts")
        store.load()
        index = build_bm25_index(store.to_documents())
    """

    def __init__(self, repo_root: Union[str, Path], knowledge_path: Optional[Union[str, Path]] = None):
        """
        Args:
            repo_root: Root of the transcripts repository
            knowledge_path: Knowledge JSON (default: <root>/data/knowledge.json)
        """
        self.repo_root = Path(repo_root)
        self.knowledge_path = Path(knowledge_path) if knowledge_path else self.repo_root / "data" / "knowledge.json"

        self._episodes: Dict[str, EpisodeMeta] = {}
        self._transcripts: Dict[str, str] = {}
        self._topics: Dict[str, TopicIndex] = {}
        self._guest_index: Dict[str, List[str]] = {}
        self._knowledge: Optional[KnowledgeBase] = None
        self.ready = False

    def load(self) -> None:
        """Load episodes, topics and knowledge from disk"""
        self._load_episodes()
        self._load_topics()
        self._build_guest_index()
        self._knowledge = load_knowledge_base(self.knowledge_path)
        self.ready = True
        logger.info(f"Loaded {len(self._episodes)} episodes and {len(self._topics)} topics from {self.repo_root}")

    def _load_episodes(self) -> None:
        episodes_dir = self.repo_root / "episodes"
        if not episodes_dir.is_dir():
            logger.warning(f"Episodes directory not found: {episodes_dir}")
            return

        for episode_dir in sorted(episodes_dir.iterdir()):
            if not episode_dir.is_dir() or episode_dir.name.startswith("."):
                continue

            file_path = episode_dir / TRANSCRIPT_FILENAME
            if not file_path.exists():
                logger.debug(f"Skipping {episode_dir.name}: no {TRANSCRIPT_FILENAME}")
                continue

            slug = episode_dir.name
            try:
                raw = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping {slug}: unreadable {TRANSCRIPT_FILENAME}: {e}")
                continue
            data, content = parse_front_matter(raw)

            self._episodes[slug] = episode_meta_from_front_matter(slug, data, str(file_path))
            self._transcripts[slug] = content

    def _load_topics(self) -> None:
        index_dir = self.repo_root / "index"
        if not index_dir.is_dir():
            return

        for topic_file in sorted(index_dir.glob("*.md")):
            if topic_file.name in EXCLUDED_TOPIC_FILES:
                continue

            slugs = []
            for line in topic_file.read_text(encoding="utf-8").splitlines():
                match = _TOPIC_LINK.search(line)
                if match:
                    slugs.append(match.group(1))
            self._topics[topic_file.stem] = TopicIndex(topic=topic_file.stem, episode_slugs=slugs)

    def _build_guest_index(self) -> None:
        for slug, meta in self._episodes.items():
            self._guest_index.setdefault(meta.guest.lower(), []).append(slug)

    # --- Episodes ---

    def get_episode(self, slug: str) -> Optional[EpisodeMeta]:
        return self._episodes.get(slug)

    def get_transcript(self, slug: str) -> Optional[str]:
        return self._transcripts.get(slug)

    def get_all_episodes(self) -> List[EpisodeMeta]:
        return list(self._episodes.values())

    def get_episode_count(self) -> int:
        return len(self._episodes)

    def get_transcript_entries(self) -> Iterator[Tuple[str, str]]:
        return iter(self._transcripts.items())

    def find_by_guest(self, query: str) -> List[EpisodeMeta]:
        """Episodes whose guest name contains the query (case-insensitive)"""
        q = query.lower()
        return [meta for meta in self._episodes.values() if q in meta.guest.lower()]

    def get_guest_slugs(self, guest: str) -> List[str]:
        """Slugs of episodes with exactly this guest name (case-insensitive)"""
        return list(self._guest_index.get(guest.lower(), []))

    # --- Topics ---

    def get_all_topics(self) -> List[TopicIndex]:
        return list(self._topics.values())

    def get_topic_count(self) -> int:
        return len(self._topics)

    def get_topic_episodes(self, topic: str) -> List[EpisodeMeta]:
        """Episodes listed under a topic (unknown slugs are skipped)"""
        topic_index = self._topics.get(topic)
        if topic_index is None:
            return []
        return [self._episodes[s] for s in topic_index.episode_slugs if s in self._episodes]

    # --- Search corpus ---

    def to_documents(self) -> List[Document]:
        """Corpus snapshot for the BM25 index, in slug order"""
        return [
            Document(
                doc_id=slug,
                title=meta.title,
                guest=meta.guest,
                keywords=tuple(meta.keywords),
                description=meta.description,
                transcript=self._transcripts.get(slug, ""),
            )
            for slug, meta in sorted(self._episodes.items())
        ]

    # --- Knowledge layer ---

    def has_knowledge(self) -> bool:
        return self._knowledge is not None and bool(self._knowledge.episodes)

    def get_episode_knowledge(self, slug: str) -> Optional[EpisodeKnowledge]:
        if self._knowledge is None:
            return None
        return self._knowledge.episodes.get(slug)

    def get_guest_profile(self, guest: str) -> Optional[GuestProfile]:
        """Knowledge profile by exact (case-insensitive) name, then by partial match"""
        if self._knowledge is None:
            return None

        key = guest.lower()
        profile = self._knowledge.guests.get(key)
        if profile is not None:
            return profile

        for name, candidate in self._knowledge.guests.items():
            if key in name:
                return candidate
        return None
