# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Decoding of record lists.

A record list is a single contiguous buffer holding several frames that were
received back to back, together with the length of each frame and the time
offset at which it was received relative to the previous one. Each frame in
the list is decoded independently of the others.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from firehose.frames import Frame, FrameDecodeError, WireData, decode_frame

__all__ = 'ErrorPolicy', 'Record', 'RecordListDecoder', 'decode_records'  # noqa: RUF022


logger = logging.getLogger(__name__)


class ErrorPolicy(Enum):
    """What to do with a record that fails to decode"""

    skip = 'skip'
    abort = 'abort'

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


@dataclass(frozen=True, slots=True)
class Record:
    timestamp: int
    frame: Frame


class RecordListDecoder:
    error_policy: ClassVar[ErrorPolicy] = ErrorPolicy.skip

    def __init__(self, *, error_policy: ErrorPolicy | None = None) -> None:
        if error_policy is not None:
            self.error_policy = error_policy  # type: ignore[misc]

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(error_policy={self.error_policy!r})'

    def decode(self, buffer: WireData, lengths: Sequence[int], timestamp_start: int, timestamp_offsets: Sequence[int]) -> list[Record]:
        """
        Decode all the records in the buffer, in order.

        The timestamp of each record is obtained by adding its offset to the
        timestamp of the record before it, starting from timestamp_start.

        Records that fail to decode are either skipped or abort the whole
        list, depending on the error policy. When aborting, the original
        decoding error is raised with a note indicating the failed record.
        """
        records = []
        skipped = 0
        for index, (timestamp, data) in enumerate(self._iter_slices(buffer, lengths, timestamp_start, timestamp_offsets)):
            try:
                frame = decode_frame(data)
            except FrameDecodeError as exc:
                if self.error_policy is ErrorPolicy.abort:
                    exc.add_note(f'while decoding record {index} (timestamp {timestamp})')
                    raise
                logger.warning('Skipping record %d (timestamp %d): %s', index, timestamp, exc)
                skipped += 1
            else:
                records.append(Record(timestamp=timestamp, frame=frame))
        logger.debug('Decoded %d out of %d records (%d skipped)', len(records), len(lengths), skipped)
        return records

    @staticmethod
    def _iter_slices(buffer: WireData, lengths: Sequence[int], timestamp_start: int, timestamp_offsets: Sequence[int]) -> Iterator[tuple[int, memoryview]]:
        if len(lengths) != len(timestamp_offsets):
            raise ValueError(f'The number of lengths and timestamp offsets must match ({len(lengths)} != {len(timestamp_offsets)})')
        if any(length < 0 for length in lengths):
            raise ValueError('Record lengths cannot be negative')
        if any(offset < 0 for offset in timestamp_offsets):
            raise ValueError('Timestamp offsets cannot be negative')
        view = memoryview(buffer)
        if sum(lengths) > len(view):
            raise ValueError(f'Record lengths exceed the buffer size ({sum(lengths)} > {len(view)})')
        position = 0
        timestamp = timestamp_start
        for length, offset in zip(lengths, timestamp_offsets, strict=True):
            timestamp += offset
            yield timestamp, view[position:position + length]
            position += length


def decode_records(buffer: WireData, lengths: Sequence[int], timestamp_start: int, timestamp_offsets: Sequence[int]) -> list[Record]:
    return RecordListDecoder().decode(buffer, lengths, timestamp_start, timestamp_offsets)
