"""Upload OpenMessaging Benchmark results to a Prometheus remote-write endpoint."""

__version__ = "0.1.0"
