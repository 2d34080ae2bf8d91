"""YAML front matter parsing for episode transcripts.

Transcript files start with a '---' delimited YAML block:

    ---
    guest: Brian Chesky
    title: Brian Chesky's new playbook
    keywords:
      - leadership
      - founder mode
    ---
    Lenny (00:00:00):
    ...
"""

import logging
import re
from typing import Any, Dict, Tuple

import yaml

logger = logging.getLogger(__name__)

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def parse_front_matter(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Split YAML front matter from markdown content.

    Args:
        content: Full markdown text

    Returns:
        Tuple of (metadata_dict, body). Without front matter, or when the YAML
        is invalid or not a mapping, returns ({}, original content). A leading
        UTF-8 byte order mark is ignored and an empty block yields ({}, body).

    Example:
        >>> meta, body = parse_front_matter("---\\nguest: Ada\\n---\\nHello")
        >>> meta["guest"], body
        ('Ada', 'Hello')
    """
    text = content[1:] if content.startswith("\ufeff") else content
    match = _FRONT_MATTER.match(text)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1) or "") or {}
    except yaml.YAMLError as e:
        logger.warning(f"Invalid YAML front matter: {e}")
        return {}, content

    if not isinstance(metadata, dict):
        return {}, content

    return metadata, text[match.end():]
