"""
Knowledge layer build - runs LLM extraction over every episode.

Idempotent: episodes already present in the knowledge file are skipped, and
the file is saved after every batch so an interrupted run loses little work.

Usage:
    LLM_EXTRACTION_MODEL=gemini-2.5-flash lenny-build-knowledge

Environment:
    LENNYS_REPO_ROOT        Transcripts repository root
    LENNYS_KNOWLEDGE_PATH   Output file (default: <root>/data/knowledge.json)
    LLM_EXTRACTION_MODEL    Gemini model (required)
    GCP_PROJECT_ID          Use Vertex AI in this project (else API key from GOOGLE_API_KEY)
    GCP_LOCATION            Vertex AI region (default: us-central1)
    BATCH_SIZE              Concurrent extractions per batch (default: 3)
    MAX_EPISODES            Process at most this many pending episodes (debugging)
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional

from google import genai

from . import config
from .data import DataStore
from .knowledge import KnowledgeBase, load_knowledge_base, save_knowledge_base
from .knowledge_extraction import build_guest_profiles, extract_episode_knowledge, get_extraction_model
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

# Pause between batches (rate limiting)
BATCH_DELAY_SECONDS = 1.0


def create_genai_client():
    project_id = os.getenv("GCP_PROJECT_ID")
    if project_id:
        location = os.getenv("GCP_LOCATION", "us-central1")
        logger.info(f"Initializing Google Gen AI on Vertex AI (project={project_id}, location={location})")
        return genai.Client(vertexai=True, project=project_id, location=location)
    logger.info("Initializing Google Gen AI with API key")
    return genai.Client()


async def process_pending(
    store: DataStore,
    kb: KnowledgeBase,
    slugs: List[str],
    genai_client,
    output_path: Path,
    batch_size: int = 3,
    model_name: Optional[str] = None
) -> int:
    """
    Extract knowledge for the given slugs in concurrent batches.

    Returns:
        Number of episodes successfully processed
    """
    processed = 0
    for start in range(0, len(slugs), batch_size):
        batch = slugs[start:start + batch_size]
        tasks = []
        for slug in batch:
            logger.info(f"Processing: {slug}")
            tasks.append(extract_episode_knowledge(
                store.get_episode(slug),
                store.get_transcript(slug) or "",
                genai_client,
                model_name=model_name,
            ))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for slug, result in zip(batch, results):
            if isinstance(result, Exception):
                logger.error(f"Batch error for {slug}: {result}")
            elif result is not None:
                kb.episodes[slug] = result
                processed += 1

        save_knowledge_base(kb, output_path)
        logger.info(f"Progress: {min(start + batch_size, len(slugs))}/{len(slugs)}")

        if start + batch_size < len(slugs):
            await asyncio.sleep(BATCH_DELAY_SECONDS)

    return processed


async def build_knowledge(
    store: DataStore,
    output_path: Path,
    genai_client,
    batch_size: int = 3,
    max_episodes: Optional[int] = None,
    model_name: Optional[str] = None
) -> KnowledgeBase:
    """Extract knowledge for pending episodes and rebuild guest profiles"""
    kb = load_knowledge_base(output_path) or KnowledgeBase()
    logger.info(f"Existing knowledge: {len(kb.episodes)} episodes")

    all_slugs = sorted(meta.slug for meta in store.get_all_episodes())
    pending = [slug for slug in all_slugs if slug not in kb.episodes]
    if max_episodes is not None:
        pending = pending[:max_episodes]

    if pending:
        logger.info(f"Pending: {len(pending)} episodes (batch size: {batch_size})")
        processed = await process_pending(
            store, kb, pending, genai_client, output_path,
            batch_size=batch_size, model_name=model_name,
        )
        logger.info(f"Newly processed: {processed} episodes")
    else:
        logger.info("All episodes already processed")

    build_guest_profiles(kb, store.get_all_episodes())
    save_knowledge_base(kb, output_path)
    logger.info(f"Knowledge base: {len(kb.episodes)} episodes, {len(kb.guests)} guests -> {output_path}")
    return kb


def main() -> None:
    config.load_environment()
    log_file, console_level = config.get_log_settings()
    setup_logging(log_file=log_file, console_level=console_level)

    model_name = get_extraction_model()
    repo_root = config.get_repo_root()
    store = DataStore(repo_root, knowledge_path=config.get_knowledge_path())
    store.load()

    asyncio.run(build_knowledge(
        store,
        output_path=store.knowledge_path,
        genai_client=create_genai_client(),
        batch_size=config.get_batch_size(),
        max_episodes=config.get_max_episodes(),
        model_name=model_name,
    ))


if __name__ == "__main__":
    main()
