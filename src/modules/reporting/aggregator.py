"""Headline summary statistics over a flat record set."""

import logging
import math
from typing import Iterable

from src.modules.reporting.schemas import Record, SummaryStats
from src.utils.helpers import is_number, safe_div

logger = logging.getLogger(__name__)

COMPLETION_THRESHOLD = 80


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def mean(values: list[float]) -> float:
    return safe_div(sum(values), len(values))


def summarize(records: Iterable[Record]) -> SummaryStats:
    """Compute :class:`SummaryStats`; never raises on an empty set.

    The bounds are seeded so an empty set yields highest 0 and lowest 100.
    """
    records = list(records)
    total = len(records)
    scores = [r["score"] for r in records if is_number(r.get("score"))]
    positive_scores = [s for s in scores if s > 0]
    times = [
        r["time_taken"] for r in records
        if is_number(r.get("time_taken")) and r["time_taken"] > 0
    ]
    completed = sum(
        1 for r in records
        if is_number(r.get("completion_rate")) and r["completion_rate"] > COMPLETION_THRESHOLD
    )

    stats = SummaryStats(
        total_records=total,
        average_score=round(mean(positive_scores), 2) if positive_scores else 0,
        highest_score=max(scores + [0]),
        lowest_score=min(scores + [100]),
        average_time=round_half_up(mean(times)) if times else 0,
        completion_rate=round(safe_div(completed * 100, total), 2),
    )
    logger.debug("Summary over %d records: %s", total, stats)
    return stats
