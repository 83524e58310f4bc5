################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the interpolating shot table."""

from __future__ import annotations

import math

import pytest

from oasis_swerve.autoaim.interpolating_shot_table import EmptyShotTableError
from oasis_swerve.autoaim.interpolating_shot_table import InterpolatingShotTable
from oasis_swerve.autoaim.interpolating_shot_table import ShotTableError
from oasis_swerve.autoaim.interpolating_shot_table import inverse_interpolate
from oasis_swerve.autoaim.shot_record import ShotRecord


def _record(aim_angle_rad: float, flight_time_s: float = 0.5) -> ShotRecord:
    return ShotRecord(
        aim_angle_rad=aim_angle_rad,
        left_wheel_speed_rps=50.0 + aim_angle_rad,
        right_wheel_speed_rps=45.0 + aim_angle_rad,
        flight_time_s=flight_time_s,
    )


def _table() -> InterpolatingShotTable:
    return InterpolatingShotTable.from_entries(
        [(3.0, _record(10.0)), (1.0, _record(0.0)), (5.0, _record(12.0))]
    )


def test_exact_key_returns_stored_record() -> None:
    """An exact key returns the identical record with no arithmetic."""
    record: ShotRecord = ShotRecord(
        aim_angle_rad=0.1 + 0.2,
        left_wheel_speed_rps=1.0 / 3.0,
        right_wheel_speed_rps=math.pi,
        flight_time_s=0.7,
    )
    table: InterpolatingShotTable = InterpolatingShotTable()
    table.insert(1.0, _record(0.0))
    table.insert(2.2, record)
    table.insert(4.0, _record(1.0))

    assert table.lookup(2.2) is record


def test_midpoint_interpolates() -> None:
    """Halfway between two keys returns the halfway record."""
    shot: ShotRecord = _table().lookup(2.0)

    assert shot.aim_angle_rad == 5.0
    assert shot.left_wheel_speed_rps == pytest.approx(55.0)
    assert shot.right_wheel_speed_rps == pytest.approx(50.0)
    assert shot.flight_time_s == pytest.approx(0.5)


def test_keys_outside_range_clamp_to_edges() -> None:
    """Keys below or above the calibrated range return the edge records."""
    table: InterpolatingShotTable = _table()

    assert table.lookup(0.0) == _record(0.0)
    assert table.lookup(-4.0) == _record(0.0)
    assert table.lookup(100.0) == _record(12.0)


def test_lookup_is_monotone_between_keys() -> None:
    """Blended angles stay between the bracketing records."""
    table: InterpolatingShotTable = _table()
    previous: float = table.lookup(1.0).aim_angle_rad
    for step in range(1, 21):
        angle: float = table.lookup(1.0 + 0.1 * step).aim_angle_rad
        assert 0.0 <= angle <= 10.0
        assert angle >= previous
        previous = angle


def test_lookup_is_idempotent() -> None:
    """Lookups do not change the table."""
    table: InterpolatingShotTable = _table()
    first: ShotRecord = table.lookup(2.5)

    assert table.lookup(2.5) == first
    assert table.keys() == (1.0, 3.0, 5.0)


def test_insert_replaces_existing_key() -> None:
    """Inserting at an existing key replaces the record."""
    table: InterpolatingShotTable = _table()
    table.insert(3.0, _record(20.0))

    assert len(table) == 3
    assert table.lookup(3.0) == _record(20.0)
    assert 3.0 in table
    assert 2.0 not in table
    assert "3.0" not in table


def test_keys_are_sorted() -> None:
    """Keys and items are returned in ascending order."""
    table: InterpolatingShotTable = _table()

    assert [key for key, _ in table.items()] == [1.0, 3.0, 5.0]
    assert table.min_key() == 1.0
    assert table.max_key() == 5.0


def test_single_entry_table_returns_that_entry() -> None:
    """A one-entry table answers every key with its record."""
    table: InterpolatingShotTable = InterpolatingShotTable()
    table.insert(2.0, _record(4.0))

    assert table.lookup(0.5) == _record(4.0)
    assert table.lookup(9.0) == _record(4.0)


def test_empty_table_lookup_raises() -> None:
    """Looking up an empty or cleared table is an error."""
    table: InterpolatingShotTable = _table()
    table.clear()

    assert len(table) == 0
    with pytest.raises(EmptyShotTableError):
        table.lookup(1.0)
    with pytest.raises(ShotTableError):
        table.require_populated()
    with pytest.raises(EmptyShotTableError):
        table.min_key()


def test_invalid_inserts_raise() -> None:
    """Keys must be finite numbers and values shot records."""
    table: InterpolatingShotTable = InterpolatingShotTable()
    with pytest.raises(ValueError):
        table.insert(math.nan, _record(0.0))
    with pytest.raises(ValueError):
        table.insert(math.inf, _record(0.0))
    with pytest.raises(ValueError):
        table.insert(1.0, (0.0, 0.0, 0.0, 0.0))  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        _table().lookup(math.nan)


def test_inverse_interpolate() -> None:
    """The fraction is clamped and degenerate intervals give zero."""
    assert inverse_interpolate(1.0, 3.0, 2.0) == 0.5
    assert inverse_interpolate(1.0, 3.0, 0.0) == 0.0
    assert inverse_interpolate(1.0, 3.0, 4.0) == 1.0
    assert inverse_interpolate(2.0, 2.0, 2.0) == 0.0
    assert inverse_interpolate(3.0, 1.0, 2.0) == 0.0
