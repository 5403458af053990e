"""
Serializers turn an ordered list of spans into one request payload.
The collector treats spans as opaque: element encoding is entirely up to the serializer.
"""

import struct
from typing import Any, Callable, List, NamedTuple, Optional, Protocol

from .exceptions import EncodeError
from .object_serialiser import to_json_bytes

THRIFT_CONTENT_TYPE = "application/x-thrift"
JSON_CONTENT_TYPE = "application/json"

# Thrift TType id for STRUCT, used as the list element type
THRIFT_TYPE_STRUCT = 12


class Payload(NamedTuple):
    body: bytes
    content_type: str


class Serializer(Protocol):
    def serialize(self, spans: List[Any]) -> Payload:
        ...


def _as_bytes(span: Any) -> bytes:
    if isinstance(span, (bytes, bytearray, memoryview)):
        return bytes(span)
    raise TypeError(f"expected pre-encoded bytes, got {type(span).__name__}")


class ThriftListSerializer:
    """
    Thrift binary-protocol list framing: one type byte (struct), a big-endian i32 element count,
    then each span's encoded bytes in order.

    Args:
        encode_span: Returns the Thrift binary encoding of one span.
            Defaults to treating each span as already-encoded bytes.
    """

    content_type = THRIFT_CONTENT_TYPE

    def __init__(self, encode_span: Optional[Callable[[Any], bytes]] = None):
        self._encode_span = encode_span or _as_bytes

    def serialize(self, spans: List[Any]) -> Payload:
        parts = [struct.pack(">bi", THRIFT_TYPE_STRUCT, len(spans))]
        for index, span in enumerate(spans):
            try:
                parts.append(self._encode_span(span))
            except Exception as e:
                raise EncodeError(f"Failed to encode span {index} of {len(spans)}: {type(e).__name__}: {e}",
                    span_count=len(spans)) from e
        return Payload(b"".join(parts), self.content_type)


class JSONSerializer:
    """Encodes the batch as a JSON array, converting objects with object_to_dict."""

    content_type = JSON_CONTENT_TYPE

    def serialize(self, spans: List[Any]) -> Payload:
        try:
            body = to_json_bytes(list(spans))
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Failed to encode {len(spans)} span(s) as JSON: {e}", span_count=len(spans)) from e
        return Payload(body, self.content_type)
