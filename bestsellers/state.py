"""Checkpoint file of the batch scraper."""

import json
from pathlib import Path

from loguru import logger

from bestsellers.records import ScraperState


def load_state(file_path: str) -> ScraperState:
    """Return the saved checkpoint, or a fresh one when missing or unreadable."""
    path = Path(file_path)
    if not path.exists():
        return ScraperState()
    try:
        return ScraperState.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, TypeError) as e:
        logger.warning("Ignoring unreadable state file {}: {}", path, e)
        return ScraperState()


def save_state(state: ScraperState, file_path: str) -> None:
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state.as_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
