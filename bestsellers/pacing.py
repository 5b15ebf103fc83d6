"""Randomized pauses and backoff used to pace browsing like a human."""

import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from loguru import logger

Range = Tuple[float, float]


def _as_range(value: Any, default: Range) -> Range:
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
        low, high = float(value[0]), float(value[1])
        return (min(low, high), max(low, high))
    return default


@dataclass
class DelayPolicy:
    """Delay strategy injected into the browser session, discoverer and orchestrator.

    Ranges are in seconds. ``sleep`` and ``rng`` are swappable so tests can run
    with :meth:`none` and never block.
    """

    settle: Range = (2.0, 4.0)
    department: Range = (5.0, 10.0)
    category: Range = (8.0, 15.0)
    subcategory: Range = (3.0, 6.0)
    challenge: Range = (30.0, 60.0)
    backoff_base_seconds: float = 10.0
    sleep: Callable[[float], None] = time.sleep
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def from_config(cls, delay_config: Optional[Dict[str, Any]] = None, **overrides) -> "DelayPolicy":
        cfg = delay_config or {}
        defaults = cls()
        policy = cls(
            settle=_as_range(cfg.get("settle"), defaults.settle),
            department=_as_range(cfg.get("department"), defaults.department),
            category=_as_range(cfg.get("category"), defaults.category),
            subcategory=_as_range(cfg.get("subcategory"), defaults.subcategory),
            challenge=_as_range(cfg.get("challenge"), defaults.challenge),
            backoff_base_seconds=float(cfg.get("backoff_base_seconds", defaults.backoff_base_seconds)),
        )
        for key, value in overrides.items():
            setattr(policy, key, value)
        return policy

    @classmethod
    def none(cls, sleep: Optional[Callable[[float], None]] = None) -> "DelayPolicy":
        """Zero-delay policy; ``sleep`` still receives every (zero) pause."""
        return cls(
            settle=(0.0, 0.0),
            department=(0.0, 0.0),
            category=(0.0, 0.0),
            subcategory=(0.0, 0.0),
            challenge=(0.0, 0.0),
            backoff_base_seconds=0.0,
            sleep=sleep or (lambda _seconds: None),
        )

    def backoff(self, attempt: int) -> float:
        """Exponential backoff after failed attempt ``attempt`` (1-based)."""
        return (2 ** attempt) * self.backoff_base_seconds

    def pick(self, bounds: Range) -> float:
        low, high = bounds
        return self.rng.uniform(low, high) if high > low else low

    def pause(self, bounds: Range, reason: str = "") -> float:
        seconds = self.pick(bounds)
        if seconds > 0:
            logger.debug("Waiting {:.1f}s ({})", seconds, reason or "pause")
        self.sleep(seconds)
        return seconds

    def settle_pause(self) -> float:
        return self.pause(self.settle, "settle")

    def department_pause(self) -> float:
        return self.pause(self.department, "between departments")

    def category_pause(self) -> float:
        return self.pause(self.category, "between categories")

    def subcategory_pause(self) -> float:
        return self.pause(self.subcategory, "before subcategory page")

    def challenge_pause(self) -> float:
        return self.pause(self.challenge, "bot challenge")
