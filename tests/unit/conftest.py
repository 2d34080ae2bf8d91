"""Unit test fixtures - a small on-disk transcripts repository"""

import json
import textwrap

import pytest

from lenny_search.bm25 import build_bm25_index
from lenny_search.data import DataStore


EPISODES = {
    "brian-chesky": """\
        ---
        guest: Brian Chesky
        title: Growth at Airbnb
        publish_date: 2024-05-01
        description: Brian discusses founder mode and "design-led leadership".
        duration: "1:20:00"
        duration_seconds: 4800
        view_count: 1000
        youtube_url: https://www.youtube.com/watch?v=abc
        keywords:
          - leadership
          - founder mode
        ---
        Lenny (00:00:00):
        Welcome Brian. Today we cover design.

        Brian Chesky (00:01:15):
        Growth at Airbnb came from obsessing over the guest experience.

        Lenny (00:05:30):
        How did you approach hiring during that period?

        Brian Chesky (00:06:10):
        Hiring slowly was deliberate. Founder mode means being in the details.

        Lenny (01:10:00):
        Thanks for coming on the podcast.
        """,
    "shreyas-doshi": """\
        ---
        guest: Shreyas Doshi
        title: Product management craft
        publish_date: 2023-02-10
        description: Shreyas explores pre-mortems, "high agency" and product sense.
        view_count: 500
        keywords: [product-management, leadership]
        ---
        Lenny (00:00:00):
        Shreyas, let's talk about product sense.

        Shreyas Doshi (00:02:00):
        Pre-mortems help teams surface risks before launch.

        Shreyas Doshi (00:03:30):
        Hiring for high agency matters more than hiring for experience.
        """,
    "shreyas-doshi-2": """\
        ---
        guest: Shreyas Doshi
        title: The art of product management
        publish_date: 2024-08-01
        description: A second conversation on product management.
        view_count: 300
        keywords: [product-management]
        ---
        Shreyas Doshi (00:00:10):
        Product management is about leverage and focus.
        """,
    "elena-verna": """\
        ---
        guest: Elena Verna
        title: Growth loops explained
        publish_date: 2022-11-03
        description: Elena talks about growth loops, retention and monetization.
        view_count: 2000
        keywords:
          - growth
        ---
        Elena Verna (00:00:05):
        Growth loops beat funnels. Retention is the foundation of growth.

        Lenny (00:04:00):
        What about hiring a growth team?

        Elena Verna (00:04:20):
        Start with one generalist who understands retention.
        """,
}

TOPICS = {
    "product-management.md": """\
        # Product management

        - [Shreyas Doshi](../episodes/shreyas-doshi/transcript.md)
        - [Shreyas Doshi 2](../episodes/shreyas-doshi-2/transcript.md)
        """,
    "growth.md": """\
        # Growth

        - [Elena Verna](../episodes/elena-verna/transcript.md)
        - [Brian Chesky](../episodes/brian-chesky/transcript.md)
        - [Gone](../episodes/missing-episode/transcript.md)
        """,
    "README.md": """\
        - [Not a topic](../episodes/brian-chesky/transcript.md)
        """,
}

KNOWLEDGE = {
    "episodes": {
        "brian-chesky": {
            "slug": "brian-chesky",
            "summary": "Brian explains how Airbnb changed after returning to founder mode.",
            "key_insights": ["Be in the details", "Hire slowly"],
            "frameworks": [{"name": "Founder mode", "description": "Leaders stay close to the work", "source": "Brian Chesky"}],
            "quotes": [{"text": "Design is how it works.", "speaker": "Brian Chesky", "context": "design"}],
            "advice_topics": ["leadership", "hiring"],
        }
    },
    "guests": {
        "brian chesky": {
            "name": "Brian Chesky",
            "episodes": ["brian-chesky"],
            "expertise_areas": ["leadership", "hiring"],
            "key_themes": ["Be in the details"],
            "bio": "Brian Chesky appeared on Lenny's Podcast once.",
        }
    },
    "version": "1.0.0",
    "generated_at": "2026-01-01T00:00:00+00:00",
}


def write_repo(root, with_knowledge=False):
    episodes_dir = root / "episodes"
    for slug, content in EPISODES.items():
        episode_dir = episodes_dir / slug
        episode_dir.mkdir(parents=True)
        (episode_dir / "transcript.md").write_text(textwrap.dedent(content), encoding="utf-8")

    # Episode directory without a transcript is skipped
    (episodes_dir / "no-transcript").mkdir()

    index_dir = root / "index"
    index_dir.mkdir()
    for name, content in TOPICS.items():
        (index_dir / name).write_text(textwrap.dedent(content), encoding="utf-8")

    if with_knowledge:
        data_dir = root / "data"
        data_dir.mkdir()
        (data_dir / "knowledge.json").write_text(json.dumps(KNOWLEDGE), encoding="utf-8")

    return root


@pytest.fixture
def repo_root(tmp_path):
    return write_repo(tmp_path)


@pytest.fixture
def store(repo_root):
    data_store = DataStore(repo_root)
    data_store.load()
    return data_store


@pytest.fixture
def knowledge_store(tmp_path):
    data_store = DataStore(write_repo(tmp_path, with_knowledge=True))
    data_store.load()
    return data_store


@pytest.fixture
def index(store):
    return build_bm25_index(store.to_documents())


@pytest.fixture
def knowledge_index(knowledge_store):
    return build_bm25_index(knowledge_store.to_documents())
