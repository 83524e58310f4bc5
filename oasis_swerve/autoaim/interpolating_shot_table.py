################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""
Sorted shot table with clamped linear interpolation between entries
"""

from __future__ import annotations

import math
from bisect import bisect_left
from typing import Iterable
from typing import Iterator

from oasis_swerve.autoaim.shot_record import ShotRecord


class ShotTableError(Exception):
    """Raised when the shot table cannot satisfy a request."""


class EmptyShotTableError(ShotTableError):
    """Raised when looking up a table that has no calibration entries."""


def inverse_interpolate(floor_key: float, ceiling_key: float, key: float) -> float:
    """
    Return the fraction of key between floor_key and ceiling_key

    The fraction is clamped to [0, 1] and is zero for an empty or inverted
    interval.
    """

    span: float = ceiling_key - floor_key
    if span <= 0.0:
        return 0.0
    offset: float = key - floor_key
    if offset <= 0.0:
        return 0.0
    return min(offset / span, 1.0)


class InterpolatingShotTable:
    """
    Map from target distance in meters to a calibrated shot record

    Populate once at startup, then read from any number of threads. Writers
    must not overlap readers.
    """

    def __init__(self) -> None:
        self._keys: list[float] = []
        self._records: list[ShotRecord] = []

    @classmethod
    def from_entries(
        cls, entries: Iterable[tuple[float, ShotRecord]]
    ) -> InterpolatingShotTable:
        """Build a table by inserting entries in order."""
        table: InterpolatingShotTable = cls()
        for key, record in entries:
            table.insert(key, record)
        return table

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (int, float)) or isinstance(key, bool):
            return False
        index: int = bisect_left(self._keys, key)
        return index < len(self._keys) and self._keys[index] == key

    def insert(self, key: float, record: ShotRecord) -> None:
        """Insert or replace the record stored at a key."""
        key = _require_key(key)
        if not isinstance(record, ShotRecord):
            raise ValueError("record must be a ShotRecord")

        index: int = bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            self._records[index] = record
            return
        self._keys.insert(index, key)
        self._records.insert(index, record)

    def lookup(self, key: float) -> ShotRecord:
        """
        Return the record for a key

        Exact keys return the stored record. Keys outside the calibrated
        range return the nearest edge record. Keys between two entries
        return the blend of their records.

        Raises:
            EmptyShotTableError: If the table has no entries
        """

        key = _require_key(key)
        if not self._keys:
            raise EmptyShotTableError("shot table has no calibration entries")

        index: int = bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            return self._records[index]
        if index == 0:
            return self._records[0]
        if index == len(self._keys):
            return self._records[-1]

        floor_key: float = self._keys[index - 1]
        ceiling_key: float = self._keys[index]
        t: float = inverse_interpolate(floor_key, ceiling_key, key)
        return self._records[index - 1].interpolate(self._records[index], t)

    def clear(self) -> None:
        """Remove every entry, for recalibration only."""
        self._keys = []
        self._records = []

    def require_populated(self) -> None:
        """
        Raise EmptyShotTableError if the table has no entries

        Called once at startup so an empty calibration is reported as a
        configuration error rather than on every lookup.
        """

        if not self._keys:
            raise EmptyShotTableError("shot table has no calibration entries")

    def min_key(self) -> float:
        self.require_populated()
        return self._keys[0]

    def max_key(self) -> float:
        self.require_populated()
        return self._keys[-1]

    def keys(self) -> tuple[float, ...]:
        return tuple(self._keys)

    def items(self) -> Iterator[tuple[float, ShotRecord]]:
        yield from zip(list(self._keys), list(self._records))


def _require_key(key: float) -> float:
    """Ensure a key is a finite real number."""
    if isinstance(key, bool) or not isinstance(key, (int, float)):
        raise ValueError("key must be a float")
    if not math.isfinite(key):
        raise ValueError("key must be finite")
    return float(key)
