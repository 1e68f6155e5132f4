"""
Aggregation of check-in metrics into insight signals.

Pure functions: no I/O, deterministic for the same input.

Metric field names differ between clients (``sleep`` vs ``sleepHours`` ...),
so each logical metric has an ordered alias list. For a record the first
alias, in list order, holding a usable number wins.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import math

METRIC_ALIASES: Dict[str, Tuple[str, ...]] = {
    'sleep': ('sleep', 'sleepHours', 'sleep_hours'),
    'soreness': ('soreness', 'sorenessLevel', 'soreness_level'),
    'weight': ('weight', 'bodyweight', 'body_weight'),
}

LOW_SLEEP_HOURS = 7.0
HIGH_SORENESS = 6.0

NO_SIGNALS_SUMMARY = "No notable signals detected for this period."


@dataclass(frozen=True)
class InsightSignals:
    avg_sleep: Optional[float]
    avg_soreness: Optional[float]
    weight_delta: Optional[float]


def to_number(value: Any) -> Optional[float]:
    """Finite int/float or numeric string; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def pick_metric(metrics: Optional[Mapping[str, Any]], aliases: Sequence[str]) -> Optional[float]:
    if not metrics:
        return None
    for alias in aliases:
        if alias in metrics:
            number = to_number(metrics[alias])
            if number is not None:
                return number
    return None


def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def compute_signals(records: Iterable[Tuple[date, Mapping[str, Any]]]) -> InsightSignals:
    """
    Args:
        records: (date, metrics) pairs in any order

    Means only count records that carry the metric. The weight delta is
    newest minus oldest weight among records with a weight, and needs at
    least two of them.
    """
    sleep: List[float] = []
    soreness: List[float] = []
    weights: List[Tuple[date, float]] = []

    for record_date, metrics in records:
        value = pick_metric(metrics, METRIC_ALIASES['sleep'])
        if value is not None:
            sleep.append(value)

        value = pick_metric(metrics, METRIC_ALIASES['soreness'])
        if value is not None:
            soreness.append(value)

        value = pick_metric(metrics, METRIC_ALIASES['weight'])
        if value is not None:
            weights.append((record_date, value))

    weight_delta = None
    if len(weights) >= 2:
        weights.sort(key=lambda item: item[0])
        weight_delta = weights[-1][1] - weights[0][1]

    return InsightSignals(
        avg_sleep=mean(sleep),
        avg_soreness=mean(soreness),
        weight_delta=weight_delta,
    )


def _one_decimal(value: float) -> str:
    """Magnitude to one decimal, ties rounded away from zero."""
    if not math.isfinite(value):
        return f"{abs(value):.1f}"
    # Decimal(float) is exact, so ties like 0.25 are seen as ties
    with localcontext() as ctx:
        ctx.prec = 400
        return str(Decimal(abs(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def build_summary(signals: InsightSignals) -> str:
    lines: List[str] = []

    low_sleep = signals.avg_sleep is not None and signals.avg_sleep < LOW_SLEEP_HOURS
    high_soreness = signals.avg_soreness is not None and signals.avg_soreness >= HIGH_SORENESS

    if low_sleep and high_soreness:
        lines.append("Recovery warning: low average sleep with high soreness.")

    delta = signals.weight_delta
    if delta is not None and delta < 0:
        lines.append(f"Weight trend: down {_one_decimal(delta)} over the period.")
    elif delta is not None and delta > 0:
        lines.append(f"Weight trend: up {_one_decimal(delta)} over the period.")

    if not lines:
        return NO_SIGNALS_SUMMARY
    return ' '.join(lines)
