################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for signal sample containers."""

from __future__ import annotations

import math

import pytest

from oasis_swerve.localization.odometry.odometry_types import GYRO_MODULE_ID
from oasis_swerve.localization.odometry.odometry_types import SignalId
from oasis_swerve.localization.odometry.odometry_types import SignalKind
from oasis_swerve.localization.odometry.odometry_types import SignalSample


def test_signal_id_factories() -> None:
    """Factory helpers should build the expected channel keys."""
    assert SignalId.drive(2) == SignalId(SignalKind.DRIVE_DISTANCE, 2)
    assert SignalId.steer(0) == SignalId(SignalKind.STEER_ANGLE, 0)
    assert SignalId.gyro() == SignalId(SignalKind.GYRO_YAW, GYRO_MODULE_ID)


def test_signal_id_rejects_invalid_indices() -> None:
    """Module channels need non-negative indices and the gyro needs its own."""
    with pytest.raises(ValueError):
        SignalId.drive(-1)
    with pytest.raises(ValueError):
        SignalId(SignalKind.GYRO_YAW, 0)
    with pytest.raises(ValueError):
        SignalId(SignalKind.STEER_ANGLE, True)


def test_absent_channels_read_as_none() -> None:
    """Channels not in the sample should read as None."""
    sample: SignalSample = SignalSample(
        timestamp_s=1.0, values={SignalId.drive(0): 1.5, SignalId.gyro(): 30.0}
    )

    assert sample.drive_distance(0) == 1.5
    assert sample.steer_angle(0) is None
    assert sample.drive_distance(1) is None
    assert sample.gyro_yaw() == 30.0
    assert sample.get(SignalKind.DRIVE_DISTANCE, 0) == 1.5


def test_sample_values_are_frozen() -> None:
    """The sample should not change when the source mapping does."""
    values: dict[SignalId, float] = {SignalId.drive(0): 1.0}
    sample: SignalSample = SignalSample(timestamp_s=0.0, values=values)
    values[SignalId.drive(0)] = 2.0

    assert sample.drive_distance(0) == 1.0
    with pytest.raises(TypeError):
        sample.values[SignalId.drive(1)] = 3.0  # type: ignore[index]


def test_sample_rejects_non_finite_values() -> None:
    """Non-finite timestamps and readings are rejected."""
    with pytest.raises(ValueError):
        SignalSample(timestamp_s=math.nan)
    with pytest.raises(ValueError):
        SignalSample(timestamp_s=0.0, values={SignalId.drive(0): math.inf})
    with pytest.raises(ValueError):
        SignalSample(timestamp_s=0.0, values={"drive": 1.0})  # type: ignore[dict-item]
