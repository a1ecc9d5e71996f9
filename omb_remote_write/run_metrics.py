"""Self-monitoring metrics for a single upload run."""
import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, write_to_textfile

logger = logging.getLogger(__name__)


class RunMetrics:
    """
    Metrics describing one run, kept on a private registry.

    The job exits right after the upload, so nothing is served over HTTP.
    Instead the registry can be dumped for the node-exporter textfile collector.
    """

    def __init__(self, registry=None, prefix="omb_remote_write_"):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.samples_total = Counter(
            f"{prefix}samples",
            "Samples synthesized from the results file",
            ["metric_name"],
            registry=registry
        )

        self.payload_bytes = Gauge(
            f"{prefix}payload_bytes",
            "Size of the write request payload",
            ["encoding"],
            registry=registry
        )

        self.send_attempts_total = Counter(
            f"{prefix}send_attempts",
            "Upload attempts made",
            registry=registry
        )

        self.send_failures_total = Counter(
            f"{prefix}send_failures",
            "Upload attempts that failed",
            registry=registry
        )

        self.send_duration_seconds = Histogram(
            f"{prefix}send_duration_seconds",
            "Duration of each upload attempt in seconds",
            buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            registry=registry
        )

        self.last_success = Gauge(
            f"{prefix}last_success",
            "1 if the run uploaded its batch, 0 otherwise",
            registry=registry
        )

    def record_samples(self, metric_name: str, count: int):
        """Record synthesized samples."""
        self.samples_total.labels(metric_name=metric_name).inc(count)

    def record_payload(self, raw_bytes: int, compressed_bytes: int):
        """Record payload sizes before and after compression."""
        self.payload_bytes.labels(encoding="protobuf").set(raw_bytes)
        self.payload_bytes.labels(encoding="snappy").set(compressed_bytes)

    def record_send_attempt(self):
        self.send_attempts_total.inc()

    def record_send_failure(self):
        self.send_failures_total.inc()

    def record_send_duration(self, duration: float):
        self.send_duration_seconds.observe(duration)

    def record_outcome(self, success: bool):
        self.last_success.set(1 if success else 0)

    def write_textfile(self, path: str):
        """Write the registry in text exposition format."""
        write_to_textfile(path, self.registry)
        logger.info(f"Run metrics written to {path}")
