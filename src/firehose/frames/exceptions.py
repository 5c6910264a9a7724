# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from typing import Any

__all__ = 'FrameDecodeError', 'HeaderDecodeError', 'InvalidFrameDataError', 'InvalidFrameTypeError'


class FrameDecodeError(ValueError):
    """Base class for the errors raised while decoding a frame."""


class HeaderDecodeError(FrameDecodeError):
    """
    Raised when the header segment is not valid CBOR.

    The underlying codec error is available as ``__cause__``.

    """

    def __init__(self, data: bytes) -> None:
        super().__init__(f'Failed to decode the frame header: {data!r}')
        self.data = data


class InvalidFrameTypeError(FrameDecodeError):
    """
    Raised when the header decodes fine, but does not describe a known frame.

    This covers headers that are not maps, that miss the ``op`` field or
    have an ``op`` value other than 1 (message) or -1 (error).

    """

    def __init__(self, value: Any) -> None:
        super().__init__(f'Invalid frame type: {value!r}')
        self.value = value


class InvalidFrameDataError(FrameDecodeError):
    """
    Raised when the buffer cannot be split into a header and a body.

    Either the leading CBOR value cannot be decoded, or it takes up the
    whole buffer leaving nothing for the body.

    """

    def __init__(self, data: bytes) -> None:
        super().__init__(f'Invalid frame data: {data!r}')
        self.data = data
