"""Tests for the remote-write wire encoding."""
import pytest
import snappy

from omb_remote_write import remote_pb
from omb_remote_write.encoder import decode_write_request, encode_write_request, to_write_request
from omb_remote_write.errors import EncodeError
from omb_remote_write.labels import Label, build_label_set
from omb_remote_write.run_metrics import RunMetrics
from omb_remote_write.series import Sample, TimeSeries


def make_batch():
    extra = [Label("env", "prod"), Label("run", "7")]
    return [
        TimeSeries(build_label_set("omb_results_consume_rate", extra),
                   [Sample(1_000, 1.0), Sample(11_000, 2.0), Sample(21_000, 3.0)]),
        TimeSeries(build_label_set("omb_results_end_to_end_latency_avg", extra),
                   [Sample(5_000, 12.5)]),
        TimeSeries(build_label_set("omb_results_publish_latency_99pct", extra),
                   [Sample(5_000, -4.25), Sample(15_000, 0.0)]),
        TimeSeries(build_label_set("omb_results_publish_rate", extra), []),
    ]


def test_decode_recovers_encoded_batch():
    batch = make_batch()
    assert decode_write_request(encode_write_request(batch)) == batch


def test_payload_is_snappy_block_compressed_protobuf():
    batch = make_batch()
    payload = encode_write_request(batch)

    request = remote_pb.WriteRequest.FromString(snappy.decompress(payload))
    assert len(request.timeseries) == 4

    first = request.timeseries[0]
    assert [(l.name, l.value) for l in first.labels] == [
        ("__name__", "omb_results_consume_rate"), ("env", "prod"), ("run", "7")
    ]
    assert [(s.value, s.timestamp) for s in first.samples] == [(1.0, 1_000), (2.0, 11_000), (3.0, 21_000)]


def test_empty_series_stays_in_batch():
    request = to_write_request(make_batch())
    assert request.timeseries[3].labels[0].value == "omb_results_publish_rate"
    assert len(request.timeseries[3].samples) == 0


def test_known_wire_bytes():
    batch = [TimeSeries((Label("__name__", "a"),), [Sample(timestamp=1, value=1.0)])]
    raw = to_write_request(batch).SerializeToString()

    label = b"\x0a\x0d" + b"\x0a\x08__name__" + b"\x12\x01a"
    sample = b"\x12\x0b" + b"\x09" + b"\x00\x00\x00\x00\x00\x00\xf0\x3f" + b"\x10\x01"
    series = label + sample
    assert raw == b"\x0a" + bytes([len(series)]) + series


def test_large_timestamps_survive():
    ts = 1_700_000_000_123
    batch = [TimeSeries((Label("__name__", "m"),), [Sample(ts, 42.0)])]
    assert decode_write_request(encode_write_request(batch))[0].samples[0].timestamp == ts


def test_encode_records_payload_sizes():
    metrics = RunMetrics()
    payload = encode_write_request(make_batch(), metrics=metrics)

    compressed = metrics.registry.get_sample_value(
        "omb_remote_write_payload_bytes", {"encoding": "snappy"}
    )
    raw = metrics.registry.get_sample_value("omb_remote_write_payload_bytes", {"encoding": "protobuf"})
    assert compressed == len(payload)
    assert raw == len(snappy.decompress(payload))


def test_bad_label_value_is_encode_error():
    batch = [TimeSeries((Label("__name__", 5),), [])]
    with pytest.raises(EncodeError):
        encode_write_request(batch)


def test_decode_garbage_is_encode_error():
    with pytest.raises(EncodeError):
        decode_write_request(b"\xff\xff\xff\xff not snappy")
