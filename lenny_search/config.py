"""
Configuration from environment variables.

Loaded from .env.local (local dev, highest priority), then .env, then the
process environment.

Variables:
    LENNYS_REPO_ROOT        Transcripts repository root (default: current directory)
    LENNYS_KNOWLEDGE_PATH   Knowledge JSON (default: <root>/data/knowledge.json)
    LOG_LEVEL               Console log level (default: INFO)
    LOG_FILE                Base log file path (default: logs/lenny-search.log)
    BM25_K1                 Term frequency saturation (default: 1.2)
    BM25_B                  Length normalization (default: 0.75)
    BM25_COVERAGE_BOOST     Multi-term coverage bonus (default: 0.5)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .bm25 import FieldedBM25

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "logs/lenny-search.log"


def load_environment(base_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Load .env.local or .env from base_dir (default: current directory).

    Returns:
        The file that was loaded, or None when only the process environment is used
    """
    base_dir = Path(base_dir) if base_dir else Path.cwd()
    for candidate in (base_dir / ".env.local", base_dir / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=True)
            return candidate
    return None


def get_repo_root() -> Path:
    return Path(os.getenv("LENNYS_REPO_ROOT") or Path.cwd())


def get_knowledge_path() -> Optional[Path]:
    value = os.getenv("LENNYS_KNOWLEDGE_PATH")
    return Path(value) if value else None


def get_log_settings():
    """Return (log_file, console_level)"""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    console_level = getattr(logging, level_name, logging.INFO)
    return os.getenv("LOG_FILE", DEFAULT_LOG_FILE), console_level


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


def create_scorer_from_env() -> FieldedBM25:
    """
    Create the BM25 scorer from BM25_* environment variables.

    Raises:
        ValueError: Malformed or out-of-range value (names the variable)
    """
    k1 = _float_env("BM25_K1", 1.2)
    b = _float_env("BM25_B", 0.75)
    coverage_boost = _float_env("BM25_COVERAGE_BOOST", 0.5)
    logger.info(f"BM25 parameters: k1={k1}, b={b}, coverage_boost={coverage_boost}")
    return FieldedBM25(k1=k1, b=b, coverage_boost=coverage_boost)


def get_batch_size() -> int:
    return _int_env("BATCH_SIZE", 3)


def get_max_episodes() -> Optional[int]:
    return _int_env("MAX_EPISODES", None)
