"""Command-line entry point: push OMB results to Thanos Receive."""
import argparse
import logging
import sys

from omb_remote_write.config import load_config_file, resolve_config
from omb_remote_write.errors import WriterError
from omb_remote_write.pipeline import run
from omb_remote_write.run_metrics import RunMetrics


def setup_logging(log_level: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omb-remote-write",
        description="Upload OpenMessaging Benchmark results to a Prometheus remote-write endpoint"
    )
    parser.add_argument("--thanos", dest="thanos_url", default="", help="Thanos URL.")
    parser.add_argument("--results", dest="results_path", default="", help="OMB results json path.")
    parser.add_argument(
        "--labels",
        default="",
        help="Additional label:value pairs (separated by comma)."
    )
    parser.add_argument(
        "--insecure",
        dest="insecure_skip_verify",
        action="store_true",
        default=None,
        help="TLS insecure skip verify."
    )
    parser.add_argument("--token", dest="bearer_token", default="", help="Bearer token.")
    parser.add_argument("--timeout", dest="timeout_s", type=float, default=None, help="Request timeout in seconds.")
    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Extra upload attempts on recoverable errors (default 0)."
    )
    parser.add_argument("--log-level", dest="log_level", default=None, help="Log level.")
    parser.add_argument(
        "--metrics-textfile",
        dest="metrics_textfile",
        default=None,
        help="Write run metrics to this file in Prometheus text format."
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=None,
        help="Build and encode the request without sending it."
    )
    parser.add_argument("--config", "-c", default=None, help="Optional YAML configuration file.")
    return parser


def main(argv=None) -> int:
    """Main function. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        file_config = load_config_file(args.config) if args.config else {}
        config = resolve_config(vars(args), file_config=file_config)
    except WriterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)
    logger = logging.getLogger(__name__)

    logger.info(f"Uploading {config.results_path} to {config.thanos_url}")
    if config.labels:
        logger.info("Additional labels: " + ",".join(f"{l.name}={l.value}" for l in config.labels))

    metrics = RunMetrics()
    success = False
    try:
        run(config, metrics=metrics)
        success = True
    except WriterError as e:
        logger.debug("Upload failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
    finally:
        metrics.record_outcome(success)
        if config.metrics_textfile:
            try:
                metrics.write_textfile(config.metrics_textfile)
            except OSError as e:
                logger.warning(f"Could not write run metrics to {config.metrics_textfile}: {e}")

    if success:
        logger.info("Dry run complete" if config.dry_run else "Upload complete")
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
