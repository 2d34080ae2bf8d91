"""
Knowledge layer - optional AI-generated side-table keyed by episode slug.

Produced offline by `lenny-build-knowledge` (see knowledge_build.py) and stored
as JSON. Presentation code consults it opportunistically; BM25 ranking never
depends on it.

File layout:
{
  "episodes": {"<slug>": {"slug": ..., "summary": ..., "key_insights": [...], ...}},
  "guests": {"<lowercased guest name>": {"name": ..., "episodes": [...], ...}},
  "version": "1.0.0",
  "generated_at": "2026-01-01T00:00:00Z"
}

camelCase keys (keyInsights, adviceTopics, expertiseAreas, generatedAt, ...)
are accepted on load.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

KNOWLEDGE_VERSION = "1.0.0"


class _KnowledgeModel(BaseModel):
    # Reads snake_case or camelCase keys (keyInsights, generatedAt); writes snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Framework(_KnowledgeModel):
    name: str
    description: str = ""
    source: str = ""


class Quote(_KnowledgeModel):
    text: str
    speaker: str = ""
    context: str = ""


class EpisodeKnowledge(_KnowledgeModel):
    """Structured takeaways extracted from one episode"""
    slug: str
    summary: str = ""
    key_insights: List[str] = Field(default_factory=list)
    frameworks: List[Framework] = Field(default_factory=list)
    quotes: List[Quote] = Field(default_factory=list)
    advice_topics: List[str] = Field(default_factory=list)


class GuestProfile(_KnowledgeModel):
    """Aggregated view of a guest across all their appearances"""
    name: str
    episodes: List[str] = Field(default_factory=list)
    expertise_areas: List[str] = Field(default_factory=list)
    key_themes: List[str] = Field(default_factory=list)
    bio: str = ""


class KnowledgeBase(_KnowledgeModel):
    episodes: Dict[str, EpisodeKnowledge] = Field(default_factory=dict)
    guests: Dict[str, GuestProfile] = Field(default_factory=dict)
    version: str = KNOWLEDGE_VERSION
    generated_at: str = ""


def load_knowledge_base(path: Union[str, Path]) -> Optional[KnowledgeBase]:
    """
    Load the knowledge file.

    Returns:
        KnowledgeBase, or None when the file is missing or unreadable
        (the server then runs without the knowledge layer)
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No knowledge file at {path}, knowledge layer disabled")
        return None

    try:
        kb = KnowledgeBase.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable knowledge file {path}: {e}")
        return None

    logger.info(f"Loaded knowledge: {len(kb.episodes)} episodes, {len(kb.guests)} guests")
    return kb


def save_knowledge_base(kb: KnowledgeBase, path: Union[str, Path]) -> None:
    """Write the knowledge file, stamping generated_at"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    kb.generated_at = datetime.now(timezone.utc).isoformat()
    path.write_text(json.dumps(kb.model_dump(), indent=2, ensure_ascii=False), encoding="utf-8")
