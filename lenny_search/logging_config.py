"""Logging configuration with console (stderr) and rotating file handlers"""
import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Session log files kept on disk (including the new one)
MAX_SESSION_LOGS = 5


def cleanup_old_logs(log_path: Path, keep: int = MAX_SESSION_LOGS - 1) -> None:
    """Delete the oldest session logs so at most `keep` remain"""
    existing_logs = sorted(log_path.parent.glob(f"{log_path.stem}_*.log"), reverse=True)  # Newest first
    for old_log in existing_logs[keep:]:
        try:
            old_log.unlink()
        except OSError:
            pass  # Another process may still hold the file


def setup_logging(log_file: str = "logs/lenny-search.log", console_level: int = logging.INFO, file_level: int = logging.DEBUG) -> Path:
    """
    Configure logging with two destinations:
    - Console: Brief logs (INFO by default) on stderr
    - File: Detailed logs (DEBUG by default) with rotation

    stdout is reserved for the MCP stdio transport, so nothing may log there.

    Rotation policy:
    - New log file on each server start (timestamp-based naming)
    - Keep last 5 session log files (auto-cleanup on startup)
    - Auto-rotate when file reaches 10MB

    Args:
        log_file: Base path to log file (relative to working directory)
        console_level: Console logging level (INFO = brief)
        file_level: File logging level (DEBUG = verbose)

    Returns:
        Path of this session's log file
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    cleanup_old_logs(log_path)

    # Timestamped log filename for this session
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_log = log_path.parent / f"{log_path.stem}_{timestamp}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter in handlers

    # Remove existing handlers to avoid duplicates
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    file_handler = RotatingFileHandler(
        session_log,
        mode='a',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=10,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers in console (but keep in file)
    for noisy in ("httpx", "httpcore", "google_genai", "mcp.server.lowlevel.server"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info(f"Logging configured: console={logging.getLevelName(console_level)}, file={session_log} ({logging.getLevelName(file_level)})")
    return session_log
