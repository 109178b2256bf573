"""
Non-behavioral ledger metrics.

Privacy boundary:
- No subject identifiers
- No payload contents
- Operation and rejection counts only
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


def success_counter(operation: str) -> str:
    return f"{operation}_total"


def rejection_counter(operation: str, error: BaseException) -> str:
    return f"{operation}_rejected_{type(error).__name__}_total"


@dataclass
class Metrics:
    """
    Per-operation outcome counters plus ledger gauges.

    Counters are keyed by success_counter / rejection_counter names;
    gauges hold last-seen values such as the latest issued credential id.
    """

    counters: Dict[str, int] = field(default_factory=dict)
    gauges: Dict[str, float] = field(default_factory=dict)

    def inc(self, name: str, by: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + by

    def succeeded(self, operation: str) -> None:
        self.inc(success_counter(operation))

    def rejected(self, operation: str, error: BaseException) -> None:
        self.inc(rejection_counter(operation, error))

    def observe(self, name: str, value: float) -> None:
        self.gauges[name] = float(value)

    def get(self, name: str) -> int:
        return self.counters.get(name, 0)

    def rejections(self, operation: str) -> Dict[str, int]:
        """Rejection counts for one operation, keyed by error class name."""
        prefix = f"{operation}_rejected_"
        return {
            name[len(prefix):-len("_total")]: count
            for name, count in self.counters.items()
            if name.startswith(prefix)
        }

    def snapshot(self) -> dict:
        return {
            "counters": dict(self.counters),
            "gauges": dict(self.gauges),
        }
