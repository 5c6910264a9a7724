# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Frame headers and the logic that separates a frame's header from its body.

   A frame is made of two CBOR encoded segments that are concatenated
   without any length prefix:

     +-------------------------+
     |          Header         |  CBOR map: {"op": int, "t": str}
     +-------------------------+
     |           Body          |  opaque, interpreted downstream
     +-------------------------+

   The header describes the frame.  An "op" value of 1 marks a message
   frame, in which case the optional "t" field names the type of the
   message carried in the body.  An "op" value of -1 marks an error frame.

   Since there is no length information on the wire, the only way to find
   where the header ends is to decode one CBOR value from the start of the
   buffer and see how many bytes the decoder consumed.

"""

import enum
import io
from dataclasses import dataclass
from typing import Any, ClassVar, TypeAlias

import cbor2

from .exceptions import HeaderDecodeError, InvalidFrameDataError, InvalidFrameTypeError

__all__ = (  # noqa: RUF022
    'WireData',
    'FrameType',
    'FrameHeader',
    'MessageHeader',
    'ErrorHeader',
    'split_frame',
    'decode_header',
    'interpret_header',
)


WireData: TypeAlias = bytes | bytearray | memoryview


class FrameType(enum.IntEnum):
    message = 1
    error = -1


# Headers

@dataclass(frozen=True, slots=True)
class MessageHeader:
    op: ClassVar[FrameType] = FrameType.message

    type: str | None = None

    def to_value(self) -> dict[str, Any]:
        if self.type is None:
            return {'op': int(self.op)}
        return {'op': int(self.op), 't': self.type}

    def to_wire(self) -> bytes:
        return cbor2.dumps(self.to_value(), canonical=True)


@dataclass(frozen=True, slots=True)
class ErrorHeader:
    op: ClassVar[FrameType] = FrameType.error

    def to_value(self) -> dict[str, Any]:
        return {'op': int(self.op)}

    def to_wire(self) -> bytes:
        return cbor2.dumps(self.to_value(), canonical=True)


FrameHeader: TypeAlias = MessageHeader | ErrorHeader


# Split point detection

class _PositionTracker(io.RawIOBase):
    """
    A read-only, non-seekable view over a buffer that records how many
    bytes were handed out.

    The decoder is not allowed to read ahead on a stream it cannot seek
    back on, so after decoding a value the position is exactly the encoded
    length of that value.
    """

    def __init__(self, data: bytes) -> None:
        super().__init__()
        self._data = memoryview(data)
        self.position = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def readinto(self, buffer: Any) -> int:  # noqa: ANN401
        chunk = self._data[self.position:self.position + len(buffer)]
        size = len(chunk)
        buffer[:size] = chunk
        self.position += size
        return size


def split_frame(buffer: WireData) -> tuple[bytes, bytes]:
    """Split a frame into its header and body segments"""
    data = bytes(buffer)
    reader = _PositionTracker(data)
    try:
        cbor2.CBORDecoder(reader).decode()
    except cbor2.CBORDecodeError as exc:
        raise InvalidFrameDataError(data) from exc
    if reader.position >= len(data):
        # a header without a body is not a valid frame
        raise InvalidFrameDataError(data)
    return data[:reader.position], data[reader.position:]


# Header interpretation

def interpret_header(value: Any) -> FrameHeader:  # noqa: ANN401
    """Map a decoded header value onto a frame header"""
    match value:
        case {'op': bool()}:
            pass  # booleans are not valid op codes even though they compare equal to 1
        case {'op': int(FrameType.message)}:
            match value.get('t'):
                case str() as message_type:
                    return MessageHeader(type=message_type)
                case _:
                    return MessageHeader(type=None)
        case {'op': int(FrameType.error)}:
            return ErrorHeader()
    raise InvalidFrameTypeError(value)


def decode_header(data: WireData) -> FrameHeader:
    data = bytes(data)
    try:
        value = cbor2.loads(data)
    except cbor2.CBORDecodeError as exc:
        raise HeaderDecodeError(data) from exc
    return interpret_header(value)
