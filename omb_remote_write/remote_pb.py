"""
Prometheus remote-write protobuf messages.

The message classes are built at import time from a descriptor equivalent to
the ``prometheus`` package in ``prompb/remote.proto`` and ``prompb/types.proto``:

    message WriteRequest { repeated TimeSeries timeseries = 1; }
    message TimeSeries   { repeated Label labels = 1; repeated Sample samples = 2; }
    message Label        { string name = 1; string value = 2; }
    message Sample       { double value = 1; int64 timestamp = 2; }

They live in a private descriptor pool so they never clash with another copy
of the Prometheus protos loaded into the default pool.
"""
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_FDP = descriptor_pb2.FieldDescriptorProto

_PACKAGE = "prometheus"


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="omb_remote_write/remote.proto",
        package=_PACKAGE,
        syntax="proto3",
    )

    label = file_proto.message_type.add(name="Label")
    label.field.add(name="name", number=1, type=_FDP.TYPE_STRING, label=_FDP.LABEL_OPTIONAL)
    label.field.add(name="value", number=2, type=_FDP.TYPE_STRING, label=_FDP.LABEL_OPTIONAL)

    sample = file_proto.message_type.add(name="Sample")
    sample.field.add(name="value", number=1, type=_FDP.TYPE_DOUBLE, label=_FDP.LABEL_OPTIONAL)
    sample.field.add(name="timestamp", number=2, type=_FDP.TYPE_INT64, label=_FDP.LABEL_OPTIONAL)

    series = file_proto.message_type.add(name="TimeSeries")
    series.field.add(
        name="labels", number=1, type=_FDP.TYPE_MESSAGE, label=_FDP.LABEL_REPEATED,
        type_name=f".{_PACKAGE}.Label",
    )
    series.field.add(
        name="samples", number=2, type=_FDP.TYPE_MESSAGE, label=_FDP.LABEL_REPEATED,
        type_name=f".{_PACKAGE}.Sample",
    )

    request = file_proto.message_type.add(name="WriteRequest")
    request.field.add(
        name="timeseries", number=1, type=_FDP.TYPE_MESSAGE, label=_FDP.LABEL_REPEATED,
        type_name=f".{_PACKAGE}.TimeSeries",
    )

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.{name}"))


Label = _message_class("Label")
Sample = _message_class("Sample")
TimeSeries = _message_class("TimeSeries")
WriteRequest = _message_class("WriteRequest")
