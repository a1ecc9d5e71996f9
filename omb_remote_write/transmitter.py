"""Remote-write HTTP client."""
from typing import Dict, Optional
from urllib.parse import urlparse
import logging
import threading
import time

import requests

from omb_remote_write import __version__
from omb_remote_write.errors import ConfigError, TransmitError
from omb_remote_write.retry import RetryPolicy, SingleAttempt

logger = logging.getLogger(__name__)

RECEIVE_PATH = "/api/v1/receive"
REMOTE_WRITE_VERSION = "0.1.0"
# Bytes of the response body quoted in error messages.
MAX_ERROR_BODY = 256


def build_receive_url(base_url: str) -> str:
    """
    Append the ingestion path to a Thanos Receive base URL.

    Raises:
        ConfigError: if the result is not an absolute http(s) URL
    """
    if not base_url:
        raise ConfigError("remote-write base URL is empty")

    url = base_url.rstrip("/") + RECEIVE_PATH
    try:
        parsed = urlparse(url)
        # Accessing .port validates it.
        parsed.port
    except ValueError as e:
        raise ConfigError(f"invalid remote-write URL '{url}': {e}") from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ConfigError(f"invalid remote-write URL '{url}': expected http(s)://host[:port]")

    return url


class RemoteWriteClient:
    """Posts snappy-compressed write requests to a remote-write endpoint."""

    def __init__(
        self,
        url: str,
        bearer_token: Optional[str] = None,
        insecure_skip_verify: bool = False,
        timeout: float = 1.0,
        retry_policy: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        metrics=None,
    ):
        if timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {timeout}")

        self.url = url
        self.timeout = timeout
        self.retry_policy = retry_policy or SingleAttempt()
        self.metrics = metrics

        self.session = session or requests.Session()
        self.session.verify = not insecure_skip_verify
        self.session.headers.update(self._headers(bearer_token))

        if insecure_skip_verify:
            logger.warning("TLS certificate verification is disabled")

    @staticmethod
    def _headers(bearer_token: Optional[str]) -> Dict[str, str]:
        headers = {
            "Content-Encoding": "snappy",
            "Content-Type": "application/x-protobuf",
            "User-Agent": f"omb-remote-write/{__version__}",
            "X-Prometheus-Remote-Write-Version": REMOTE_WRITE_VERSION,
        }
        if bearer_token:
            headers["Authorization"] = f"Bearer {bearer_token}"
        return headers

    def store(self, payload: bytes) -> None:
        """
        Upload one compressed write request.

        Raises:
            TransmitError: on network error, timeout or a non-2xx response
        """
        self.retry_policy.run(lambda: self._attempt(payload))
        logger.info(f"Stored {len(payload)} bytes at {self.url}")

    def _attempt(self, payload: bytes) -> None:
        if self.metrics:
            self.metrics.record_send_attempt()

        start = time.perf_counter()
        try:
            self._post(payload)
        except TransmitError:
            if self.metrics:
                self.metrics.record_send_failure()
            raise
        finally:
            if self.metrics:
                self.metrics.record_send_duration(time.perf_counter() - start)

    def _send(self, payload: bytes, outcome: Dict[str, object]) -> None:
        try:
            outcome["response"] = self.session.post(self.url, data=payload, timeout=self.timeout)
        except Exception as e:
            outcome["error"] = e

    def _post_with_deadline(self, payload: bytes) -> requests.Response:
        """
        POST the payload, giving up once ``self.timeout`` has elapsed.

        The requests timeout only bounds connecting and each socket read, so
        the request runs on a daemon worker and is abandoned at the deadline.
        """
        outcome: Dict[str, object] = {}
        worker = threading.Thread(
            target=self._send, args=(payload, outcome), name="remote-write", daemon=True
        )
        worker.start()
        worker.join(self.timeout)

        if worker.is_alive():
            raise TransmitError(
                f"remote write to {self.url} timed out after {self.timeout}s", recoverable=True
            )

        error = outcome.get("error")
        if isinstance(error, requests.exceptions.Timeout):
            raise TransmitError(
                f"remote write to {self.url} timed out after {self.timeout}s", recoverable=True
            ) from error
        if isinstance(error, requests.exceptions.RequestException):
            raise TransmitError(f"remote write to {self.url} failed: {error}", recoverable=True) from error
        if error is not None:
            raise error
        return outcome["response"]

    def _post(self, payload: bytes) -> None:
        response = self._post_with_deadline(payload)

        if not 200 <= response.status_code < 300:
            body = response.content[:MAX_ERROR_BODY].decode("utf-8", errors="replace").strip()
            raise TransmitError(
                f"server returned HTTP status {response.status_code} {response.reason or ''}".rstrip()
                + (f": {body}" if body else ""),
                status_code=response.status_code,
                recoverable=response.status_code >= 500,
            )

    def close(self) -> None:
        self.session.close()
