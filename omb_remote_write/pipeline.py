"""Results-to-remote-write pipeline: synthesize, encode, transmit."""
from typing import Iterable, List, Optional
import logging

from omb_remote_write.config import WriterConfig
from omb_remote_write.encoder import encode_write_request
from omb_remote_write.labels import Label
from omb_remote_write.results import BenchmarkResults, load_results
from omb_remote_write.retry import policy_for
from omb_remote_write.run_metrics import RunMetrics
from omb_remote_write.series import Clock, TimeSeries, synthesize_series
from omb_remote_write.transmitter import RemoteWriteClient, build_receive_url

logger = logging.getLogger(__name__)


def build_write_batch(
    results: BenchmarkResults,
    additional_labels: Iterable[Label] = (),
    clock: Clock = None,
    metrics: Optional[RunMetrics] = None,
) -> List[TimeSeries]:
    """Synthesize the four result series, in fixed order, with shared labels."""
    additional_labels = list(additional_labels)
    batch = []
    for metric_name, data in results.arrays():
        series = synthesize_series(data, metric_name, additional_labels, clock=clock)
        if metrics:
            metrics.record_samples(metric_name, len(series.samples))
        batch.append(series)
    return batch


def create_client(config: WriterConfig, metrics: Optional[RunMetrics] = None) -> RemoteWriteClient:
    """Build the remote-write client described by the config."""
    return RemoteWriteClient(
        build_receive_url(config.thanos_url),
        bearer_token=config.token(),
        insecure_skip_verify=config.insecure_skip_verify,
        timeout=config.timeout_s,
        retry_policy=policy_for(config.retries),
        metrics=metrics,
    )


def run(
    config: WriterConfig,
    clock: Clock = None,
    client: Optional[RemoteWriteClient] = None,
    metrics: Optional[RunMetrics] = None,
) -> bytes:
    """
    Load results, build and encode the batch, and upload it once.

    Every failure propagates as a WriterError; nothing is sent unless the
    whole batch encoded successfully.

    Returns:
        The compressed payload that was sent (or would be, on a dry run)
    """
    try:
        results = load_results(config.results_path)
        url = build_receive_url(config.thanos_url)

        batch = build_write_batch(results, config.labels, clock=clock, metrics=metrics)
        payload = encode_write_request(batch, metrics=metrics)

        if config.dry_run:
            logger.info(f"Dry run: skipping upload to {url}")
            return payload

        if client is None:
            client = create_client(config, metrics)
        client.store(payload)
        return payload
    finally:
        if client is not None:
            client.close()
