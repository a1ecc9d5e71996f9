"""Serialize a write batch into a snappy-compressed remote-write request."""
from typing import List, Sequence
import logging

import snappy
from google.protobuf.message import DecodeError, EncodeError as ProtobufEncodeError

from omb_remote_write import remote_pb
from omb_remote_write.errors import EncodeError
from omb_remote_write.labels import Label
from omb_remote_write.series import Sample, TimeSeries

logger = logging.getLogger(__name__)


def to_write_request(batch: Sequence[TimeSeries]):
    """Build the protobuf WriteRequest for a batch of series."""
    request = remote_pb.WriteRequest()
    for series in batch:
        proto_series = request.timeseries.add()
        for label in series.labels:
            proto_series.labels.add(name=label.name, value=label.value)
        for sample in series.samples:
            proto_series.samples.add(value=sample.value, timestamp=sample.timestamp)
    return request


def encode_write_request(batch: Sequence[TimeSeries], metrics=None) -> bytes:
    """
    Serialize and compress the whole batch as a single message.

    Raises:
        EncodeError: if serialization or compression fails
    """
    try:
        data = to_write_request(batch).SerializeToString()
        compressed = snappy.compress(data)
    except (ProtobufEncodeError, TypeError, ValueError) as e:
        raise EncodeError(f"failed to encode write request: {e}") from e

    if metrics:
        metrics.record_payload(len(data), len(compressed))

    logger.info(
        f"Encoded {len(batch)} series "
        f"({sum(len(s.samples) for s in batch)} samples): "
        f"{len(data)} bytes raw, {len(compressed)} bytes compressed"
    )
    return compressed


def decode_write_request(payload: bytes) -> List[TimeSeries]:
    """
    Decompress and parse a payload produced by ``encode_write_request``.

    Raises:
        EncodeError: if the payload is not valid snappy or protobuf data
    """
    try:
        data = snappy.decompress(payload)
        request = remote_pb.WriteRequest.FromString(data)
    except (DecodeError, snappy.UncompressError) as e:
        raise EncodeError(f"failed to decode write request: {e}") from e

    batch = []
    for proto_series in request.timeseries:
        batch.append(TimeSeries(
            labels=tuple(Label(l.name, l.value) for l in proto_series.labels),
            samples=[Sample(timestamp=s.timestamp, value=s.value) for s in proto_series.samples],
        ))
    return batch
