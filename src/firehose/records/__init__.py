# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from .batch import ErrorPolicy, Record, RecordListDecoder, decode_records

__all__ = 'ErrorPolicy', 'Record', 'RecordListDecoder', 'decode_records'  # noqa: RUF022
