#!/usr/bin/env python3
"""
Build the knowledge layer (data/knowledge.json) for every episode.

Same as the `lenny-build-knowledge` console script; runnable from a checkout
without installing the package.

Usage:
    LLM_EXTRACTION_MODEL=gemini-2.5-flash LENNYS_REPO_ROOT=/path/to/transcripts \
        python scripts/build_knowledge.py
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lenny_search.knowledge_build import main  # noqa: E402

if __name__ == "__main__":
    main()
