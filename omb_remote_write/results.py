"""OpenMessaging Benchmark results file loading."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple
import json
import logging

import numpy as np

from omb_remote_write.errors import InputError

logger = logging.getLogger(__name__)

# (results field, metric name), in write-batch order.
METRIC_KINDS: List[Tuple[str, str]] = [
    ("consumeRate", "omb_results_consume_rate"),
    ("endToEndLatencyAvg", "omb_results_end_to_end_latency_avg"),
    ("publishLatency99pct", "omb_results_publish_latency_99pct"),
    ("publishRate", "omb_results_publish_rate"),
]


def _empty() -> np.ndarray:
    return np.empty(0, dtype=np.float64)


@dataclass
class BenchmarkResults:
    """The four OMB result arrays used for the upload."""
    consume_rate: np.ndarray = field(default_factory=_empty)
    end_to_end_latency_avg: np.ndarray = field(default_factory=_empty)
    publish_latency_99pct: np.ndarray = field(default_factory=_empty)
    publish_rate: np.ndarray = field(default_factory=_empty)

    def arrays(self) -> List[Tuple[str, np.ndarray]]:
        """(metric name, values) pairs in write-batch order."""
        values = [
            self.consume_rate,
            self.end_to_end_latency_avg,
            self.publish_latency_99pct,
            self.publish_rate,
        ]
        return [(metric_name, data) for (_, metric_name), data in zip(METRIC_KINDS, values)]


def _to_float_array(field_name: str, raw: Any) -> np.ndarray:
    if raw is None:
        return _empty()
    if not isinstance(raw, list) or any(isinstance(v, (str, bool)) for v in raw):
        raise InputError(f"'{field_name}' must be an array of numbers")
    try:
        arr = np.asarray(raw, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InputError(f"'{field_name}' must be an array of numbers: {e}") from e
    if arr.ndim != 1:
        raise InputError(f"'{field_name}' must be a flat array of numbers")
    return arr


def parse_results(raw: Dict[str, Any]) -> BenchmarkResults:
    """Build results from a decoded JSON object. Missing arrays are empty."""
    if not isinstance(raw, dict):
        raise InputError("results file must contain a JSON object")

    consume, e2e, p99, publish = (
        _to_float_array(field_name, raw.get(field_name)) for field_name, _ in METRIC_KINDS
    )
    return BenchmarkResults(
        consume_rate=consume,
        end_to_end_latency_avg=e2e,
        publish_latency_99pct=p99,
        publish_rate=publish,
    )


def load_results(path: str) -> BenchmarkResults:
    """
    Read and decode an OMB results JSON file.

    Raises:
        InputError: if the file cannot be read or is not valid results JSON
    """
    try:
        with open(path, 'r') as f:
            raw = json.load(f)
    except OSError as e:
        raise InputError(f"cannot read results file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"invalid JSON in results file {path}: {e}") from e

    results = parse_results(raw)
    logger.info(
        f"Loaded results from {path}: "
        + ", ".join(f"{name}={len(data)}" for name, data in results.arrays())
    )
    return results
