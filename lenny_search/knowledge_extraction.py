"""
LLM-based knowledge extraction for the optional knowledge layer.

For each episode Gemini returns, as JSON:
- Summary: 200-300 words on what the episode covers
- Key insights: 3-5 one or two sentence takeaways
- Frameworks: methodologies the guest explicitly presents
- Quotes: 2-3 most insightful verbatim lines
- Advice topics: lowercase hyphenated tags (product-market-fit, hiring, ...)

The model is set via LLM_EXTRACTION_MODEL (e.g. gemini-2.5-flash).
"""

import asyncio
import json
import logging
import os
from collections import Counter
from typing import Dict, List, Optional

from .data import EpisodeMeta
from .knowledge import EpisodeKnowledge, GuestProfile, KnowledgeBase

logger = logging.getLogger(__name__)

# Retry configuration
MAX_RETRY_ATTEMPTS = 5
RETRY_INITIAL_DELAY = 1.0  # seconds
RETRY_EXP_BASE = 2.0  # exponential backoff multiplier
RETRY_STATUS_CODES = {429, 500, 503, 504}  # Rate limit, server errors

# Transcript excerpt sent to the model
HEAD_WORDS = 2000
TAIL_WORDS = 500


def get_extraction_model(model_name: Optional[str] = None) -> str:
    model_name = model_name or os.getenv("LLM_EXTRACTION_MODEL")
    if not model_name:
        raise ValueError("LLM_EXTRACTION_MODEL environment variable is required")
    return model_name


def truncate_transcript(content: str, head_words: int = HEAD_WORDS, tail_words: int = TAIL_WORDS) -> str:
    """
    Keep the opening and closing of a long transcript.

    Transcripts up to head_words + tail_words words keep their first
    head_words words only; longer ones get the last tail_words words
    appended after an omission marker.
    """
    words = content.split()
    head = " ".join(words[:head_words])
    if len(words) <= head_words + tail_words:
        return head
    tail = " ".join(words[-tail_words:])
    return f"{head}\n\n[... middle omitted ...]\n\n{tail}"


def build_extraction_prompt(meta: EpisodeMeta, content: str) -> str:
    return f"""You are a podcast knowledge extraction expert. Analyze this Lenny's Podcast transcript and extract structured knowledge.

Episode:
- Guest: {meta.guest}
- Title: {meta.title}
- Keywords: {", ".join(meta.keywords)}

Transcript:
{content}

Output format (valid JSON):
{{
  "summary": "200-300 word summary of the episode's core content",
  "key_insights": ["3-5 core insights, 1-2 sentences each"],
  "frameworks": [{{"name": "framework name", "description": "short description", "source": "{meta.guest}"}}],
  "quotes": [{{"text": "verbatim quote", "speaker": "speaker", "context": "what it was about"}}],
  "advice_topics": ["advice topic tags such as product-market-fit, hiring, growth"]
}}

Requirements:
- frameworks: only methodologies the guest explicitly presents, otherwise an empty array
- quotes: the 2-3 most insightful lines
- advice_topics: lowercase, hyphen-separated English tags
- Return valid JSON only, no additional text"""


def parse_extraction_response(slug: str, text: str) -> EpisodeKnowledge:
    """
    Parse the model's JSON answer (markdown code fences tolerated).

    Raises:
        json.JSONDecodeError: Not JSON
        ValueError: JSON is not an object
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]

    result = json.loads(cleaned)
    if not isinstance(result, dict):
        raise ValueError("LLM response is not a dict")

    def strings(key):
        value = result.get(key)
        return [v for v in value if isinstance(v, str)] if isinstance(value, list) else []

    def objects(key):
        value = result.get(key)
        return [v for v in value if isinstance(v, dict)] if isinstance(value, list) else []

    summary = result.get("summary")
    return EpisodeKnowledge.model_validate({
        "slug": slug,
        "summary": summary if isinstance(summary, str) else "",
        "key_insights": strings("key_insights"),
        "frameworks": [f for f in objects("frameworks") if isinstance(f.get("name"), str)],
        "quotes": [q for q in objects("quotes") if isinstance(q.get("text"), str)],
        "advice_topics": strings("advice_topics"),
    })


async def extract_episode_knowledge(
    meta: EpisodeMeta,
    transcript: str,
    genai_client,
    model_name: Optional[str] = None
) -> Optional[EpisodeKnowledge]:
    """
    Extract structured knowledge for one episode using Gemini.

    Args:
        meta: Episode front matter
        transcript: Full transcript body (truncated before sending)
        genai_client: Google GenAI client instance
        model_name: Gemini model (default: LLM_EXTRACTION_MODEL env var)

    Returns:
        EpisodeKnowledge, or None when every attempt failed
    """
    model_name = get_extraction_model(model_name)
    prompt = build_extraction_prompt(meta, truncate_transcript(transcript))
    logger.debug(f"Extracting knowledge for {meta.slug} using model: {model_name}")

    last_error = None
    for attempt in range(MAX_RETRY_ATTEMPTS):
        response = None
        try:
            response = await asyncio.to_thread(
                genai_client.models.generate_content,
                model=model_name,
                contents=prompt,
                config={
                    "temperature": 0.2,
                    "max_output_tokens": 2048,
                    "response_mime_type": "application/json"  # Force JSON output
                }
            )

            knowledge = parse_extraction_response(meta.slug, response.text or "")
            logger.info(
                f"Extracted knowledge for {meta.slug}: {len(knowledge.key_insights)} insights, "
                f"{len(knowledge.frameworks)} frameworks, {len(knowledge.quotes)} quotes"
            )
            return knowledge

        except (json.JSONDecodeError, ValueError) as e:
            last_error = e
            logger.warning(f"Attempt {attempt + 1}/{MAX_RETRY_ATTEMPTS}: invalid LLM response for {meta.slug}: {e}")
            logger.debug(f"Raw response: {response.text if response is not None else 'N/A'}")

        except Exception as e:
            last_error = e
            logger.warning(f"Attempt {attempt + 1}/{MAX_RETRY_ATTEMPTS}: LLM extraction failed for {meta.slug}: {e}")

            error_code = getattr(e, 'code', None) or getattr(e, 'status_code', None)
            if error_code not in RETRY_STATUS_CODES:
                logger.error(f"Non-retriable error (code {error_code}), stopping retries")
                break

        if attempt < MAX_RETRY_ATTEMPTS - 1:
            delay = RETRY_INITIAL_DELAY * (RETRY_EXP_BASE ** attempt)
            logger.info(f"Retrying in {delay:.1f}s...")
            await asyncio.sleep(delay)

    logger.error(f"Knowledge extraction failed for {meta.slug}: {last_error}")
    return None


def build_guest_profiles(kb: KnowledgeBase, episodes: List[EpisodeMeta]) -> Dict[str, GuestProfile]:
    """
    Aggregate per-guest profiles from episode metadata and extracted knowledge.

    Profiles are keyed by lowercased guest name and stored in kb.guests.
    """
    grouped: Dict[str, List[EpisodeMeta]] = {}
    for meta in episodes:
        grouped.setdefault(meta.guest.lower(), []).append(meta)

    for key, guest_episodes in grouped.items():
        name = guest_episodes[0].guest
        slugs = [ep.slug for ep in guest_episodes]

        expertise: List[str] = []
        themes: List[str] = []
        for slug in slugs:
            knowledge = kb.episodes.get(slug)
            if knowledge is None:
                continue
            for topic in knowledge.advice_topics:
                if topic not in expertise:
                    expertise.append(topic)
            for insight in knowledge.key_insights[:2]:
                theme = insight[:80]
                if theme not in themes:
                    themes.append(theme)

        keyword_counts = Counter(kw for ep in guest_episodes for kw in ep.keywords)
        top_keywords = [kw for kw, _ in keyword_counts.most_common(3)]
        appearances = "once" if len(slugs) == 1 else f"{len(slugs)} times"
        bio = f"{name} appeared on Lenny's Podcast {appearances}"
        bio += f", mainly discussing {', '.join(top_keywords)}." if top_keywords else "."

        kb.guests[key] = GuestProfile(
            name=name,
            episodes=slugs,
            expertise_areas=expertise[:8],
            key_themes=themes[:5],
            bio=bio,
        )

    return kb.guests
