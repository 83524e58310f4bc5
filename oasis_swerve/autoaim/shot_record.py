################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Firing parameters for one calibrated shot distance."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ShotRecord:
    """Calibrated firing parameters.

    Attributes:
        aim_angle_rad: Launcher aim angle in radians
        left_wheel_speed_rps: Left flywheel speed in rotations per second
        right_wheel_speed_rps: Right flywheel speed in rotations per second
        flight_time_s: Projectile flight time in seconds
    """

    aim_angle_rad: float = 0.0
    left_wheel_speed_rps: float = 0.0
    right_wheel_speed_rps: float = 0.0
    flight_time_s: float = 0.0

    def __post_init__(self) -> None:
        """Validate that every field is a finite scalar."""
        for name in (
            "aim_angle_rad",
            "left_wheel_speed_rps",
            "right_wheel_speed_rps",
            "flight_time_s",
        ):
            value: object = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a float")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
            object.__setattr__(self, name, float(value))

    def interpolate(self, end: ShotRecord, t: float) -> ShotRecord:
        """
        Blend toward another record by fraction t in [0, 1]

        Each field is interpolated independently as a + (b - a) * t. The aim
        angle is treated as a plain scalar, not on the shortest arc.
        """

        return ShotRecord(
            aim_angle_rad=_lerp(self.aim_angle_rad, end.aim_angle_rad, t),
            left_wheel_speed_rps=_lerp(
                self.left_wheel_speed_rps, end.left_wheel_speed_rps, t
            ),
            right_wheel_speed_rps=_lerp(
                self.right_wheel_speed_rps, end.right_wheel_speed_rps, t
            ),
            flight_time_s=_lerp(self.flight_time_s, end.flight_time_s, t),
        )


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t
