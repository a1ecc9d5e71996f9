"""Data structures for metric series and synthetic timestamp generation."""
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence
import logging
import time

from omb_remote_write.labels import Label, LabelSet, build_label_set, label_key

logger = logging.getLogger(__name__)

# OMB reports one sample every 10 seconds, most recent last.
SAMPLE_INTERVAL_MS = 10_000

Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock time in integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Sample:
    """A single timestamped value."""
    timestamp: int
    value: float


@dataclass
class TimeSeries:
    """A labeled sequence of samples, oldest first."""
    labels: LabelSet = ()
    samples: List[Sample] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.labels[0].value if self.labels else ""


def synthesize_series(
    data: Sequence[float],
    metric_name: str,
    additional_labels: Iterable[Label] = (),
    clock: Clock = None,
) -> TimeSeries:
    """
    Turn one numeric array into a time series with synthetic timestamps.

    Sample ``i`` of ``n`` is stamped ``now - 10s * (n - i)``, so the last value
    lands 10 seconds before the run. ``now`` is read from the clock for every
    sample, not once per series, so spacing is at least 10 seconds and drifts
    by however long the loop takes.

    Args:
        data: Values in reporting order
        metric_name: Value of the ``__name__`` label
        additional_labels: Labels appended after ``__name__``
        clock: Millisecond clock, defaults to the wall clock

    Returns:
        TimeSeries with exactly ``len(data)`` samples
    """
    clock = clock or system_clock
    labels = build_label_set(metric_name, additional_labels)
    n = len(data)

    series = TimeSeries(labels=labels)
    for i in range(n):
        timestamp = clock() - SAMPLE_INTERVAL_MS * (n - i)
        series.samples.append(Sample(timestamp=timestamp, value=float(data[i])))

    logger.debug(f"Synthesized {n} samples for {{{label_key(labels)}}}")
    return series
