"""Protobuf codec for exposed-key batches.

The backend serves each batch as a ``ProtoExposedList``::

    message ProtoExposee {
        bytes key = 1;       // diagnosis key material
        int64 keyDate = 2;   // onset, epoch milliseconds
    }

    message ProtoExposedList {
        repeated ProtoExposee exposed = 1;
    }

The message classes are built at import time from a
:class:`~google.protobuf.descriptor_pb2.FileDescriptorProto`, so no
``protoc`` step is needed. Unknown fields in either message are skipped by
the protobuf runtime.
"""

from __future__ import annotations

from collections.abc import Iterable

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError

from exposee.exceptions import PayloadDecodeError
from exposee.models import ExposedBatch, ExposedRecord

_PACKAGE = "exposee.v1"
_FieldProto = descriptor_pb2.FieldDescriptorProto


def _build_pool() -> descriptor_pool.DescriptorPool:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="exposee/v1/exposed.proto",
        package=_PACKAGE,
        syntax="proto3",
    )

    exposee = file_proto.message_type.add(name="ProtoExposee")
    exposee.field.add(
        name="key",
        number=1,
        type=_FieldProto.TYPE_BYTES,
        label=_FieldProto.LABEL_OPTIONAL,
        json_name="key",
    )
    exposee.field.add(
        name="keyDate",
        number=2,
        type=_FieldProto.TYPE_INT64,
        label=_FieldProto.LABEL_OPTIONAL,
        json_name="keyDate",
    )

    exposed_list = file_proto.message_type.add(name="ProtoExposedList")
    exposed_list.field.add(
        name="exposed",
        number=1,
        type=_FieldProto.TYPE_MESSAGE,
        label=_FieldProto.LABEL_REPEATED,
        type_name=f".{_PACKAGE}.ProtoExposee",
        json_name="exposed",
    )

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return pool


_POOL = _build_pool()

ProtoExposee = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{_PACKAGE}.ProtoExposee")
)
ProtoExposedList = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{_PACKAGE}.ProtoExposedList")
)


def decode_batch(data: bytes) -> ExposedBatch:
    """Decode a serialised ``ProtoExposedList`` into records, in wire order.

    An empty body is a valid, empty batch.

    Raises:
        PayloadDecodeError: On truncated or malformed framing, or when a
            ``keyDate`` does not fit the supported date range.
    """
    message = ProtoExposedList()
    try:
        message.ParseFromString(data)
    except DecodeError as exc:
        raise PayloadDecodeError(f"Malformed exposed-key batch: {exc}") from exc

    records: ExposedBatch = []
    for entry in message.exposed:
        try:
            records.append(ExposedRecord.from_key_date(bytes(entry.key), entry.keyDate))
        except OverflowError as exc:
            raise PayloadDecodeError(f"keyDate out of range: {entry.keyDate}") from exc
    return records


def encode_batch(records: Iterable[ExposedRecord]) -> bytes:
    """Serialise *records* as a ``ProtoExposedList``."""
    message = ProtoExposedList()
    for record in records:
        entry = message.exposed.add()
        entry.key = record.key
        entry.keyDate = record.key_date
    return message.SerializeToString()
