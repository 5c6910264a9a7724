# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Repository event stream frames.

   Each event sent over the stream is a single binary frame, made of a
   CBOR encoded header immediately followed by a CBOR encoded body:

     +-------------------------+
     |          Header         |
     +-------------------------+
     |           Body          |
     +-------------------------+

   Header:  Identifies the frame as either a message or an error.  For
      messages it may also carry the type of the message, which is used
      to select the schema that applies to the body.

   Body:  The payload of the frame.  From the perspective of this layer
      the body is opaque and it is handed over unmodified to the message
      schema decoder.  Error frames will eventually carry an error
      description in the body, but since its structure is not defined
      yet, the body of error frames is dropped.

"""

from dataclasses import dataclass, field
from typing import ClassVar, Self, TypeAlias

from .datamodel import (
    ErrorHeader,
    FrameHeader,
    FrameType,
    MessageHeader,
    WireData,
    decode_header,
    interpret_header,
    split_frame,
)
from .exceptions import FrameDecodeError, HeaderDecodeError, InvalidFrameDataError, InvalidFrameTypeError

__all__ = (  # noqa: RUF022
    # Frame types

    'Frame',
    'Message',
    'Error',
    'MessageFrame',
    'ErrorFrame',

    # Headers

    'FrameType',
    'FrameHeader',
    'MessageHeader',
    'ErrorHeader',

    # Exceptions

    'FrameDecodeError',
    'HeaderDecodeError',
    'InvalidFrameDataError',
    'InvalidFrameTypeError',

    # Functions

    'WireData',
    'assemble_frame',
    'decode_frame',
    'decode_header',
    'encode_frame',
    'interpret_header',
    'split_frame',
)


@dataclass(frozen=True, slots=True)
class MessageFrame:
    body: bytes

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(body=<{len(self.body)} bytes>)'


@dataclass(frozen=True, slots=True)
class ErrorFrame:
    # The error payload is not defined yet. Once it is, it will be decoded
    # from the frame body and stored here.
    pass


@dataclass(frozen=True, slots=True)
class Message:
    kind: ClassVar[FrameType] = FrameType.message

    type: str | None
    frame: MessageFrame

    @property
    def header(self) -> MessageHeader:
        return MessageHeader(type=self.type)

    @property
    def body(self) -> bytes:
        return self.frame.body

    @classmethod
    def from_wire(cls, buffer: WireData) -> Self:
        frame = decode_frame(buffer)
        if not isinstance(frame, cls):
            raise InvalidFrameTypeError(frame.header.to_value())
        return frame

    def to_wire(self) -> bytes:
        return encode_frame(self.header, self.frame.body)

    def wire_length(self) -> int:
        return len(self.header.to_wire()) + len(self.frame.body)


@dataclass(frozen=True, slots=True)
class Error:
    kind: ClassVar[FrameType] = FrameType.error

    frame: ErrorFrame = field(default_factory=ErrorFrame)

    @property
    def header(self) -> ErrorHeader:
        return ErrorHeader()


Frame: TypeAlias = Message | Error


def assemble_frame(header: FrameHeader, body: bytes) -> Frame:
    """Combine an interpreted header with the frame body"""
    match header:
        case MessageHeader(type=message_type):
            return Message(type=message_type, frame=MessageFrame(body=body))
        case ErrorHeader():
            return Error(frame=ErrorFrame())
        case _:
            raise TypeError(f'Unsupported frame header: {header!r}')


def decode_frame(buffer: WireData) -> Frame:
    """
    Decode a frame from the given buffer.

    The buffer must contain exactly one frame. The returned frame owns a
    copy of the body bytes and does not reference the buffer.

    :raises InvalidFrameDataError: if the buffer cannot be split into a header and a body
    :raises HeaderDecodeError: if the header is not valid CBOR
    :raises InvalidFrameTypeError: if the header does not describe a known frame type
    """
    header_data, body = split_frame(buffer)
    header = decode_header(header_data)
    return assemble_frame(header, body)


def encode_frame(header: FrameHeader, body: WireData) -> bytes:
    body = bytes(body)
    if not body:
        raise ValueError('A frame must have a non-empty body')
    return header.to_wire() + body
