################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Per-module position and state types for swerve odometry."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ModulePosition:
    """Cumulative drive distance and absolute steer angle of one module.

    The same shape carries a module delta, where ``distance_m`` is the
    distance traveled since the previous observation and ``angle_rad`` is
    the current absolute steer angle.

    Attributes:
        distance_m: Drive distance in meters
        angle_rad: Steer angle in radians
    """

    distance_m: float = 0.0
    angle_rad: float = 0.0

    def __post_init__(self) -> None:
        """Validate module position fields."""
        _require_finite(self.distance_m, "distance_m")
        _require_finite(self.angle_rad, "angle_rad")
        object.__setattr__(self, "distance_m", float(self.distance_m))
        object.__setattr__(self, "angle_rad", float(self.angle_rad))

    def delta_from(self, previous: ModulePosition) -> ModulePosition:
        """Return the delta against an earlier observation."""
        return ModulePosition(
            distance_m=self.distance_m - previous.distance_m,
            angle_rad=self.angle_rad,
        )


@dataclass(frozen=True)
class ModuleState:
    """Instantaneous drive speed and steer angle of one module.

    Attributes:
        speed_mps: Drive speed in m/s
        angle_rad: Steer angle in radians
    """

    speed_mps: float = 0.0
    angle_rad: float = 0.0

    def __post_init__(self) -> None:
        """Validate module state fields."""
        _require_finite(self.speed_mps, "speed_mps")
        _require_finite(self.angle_rad, "angle_rad")
        object.__setattr__(self, "speed_mps", float(self.speed_mps))
        object.__setattr__(self, "angle_rad", float(self.angle_rad))


def _require_finite(value: float, name: str) -> None:
    """Ensure a scalar value is finite."""
    if isinstance(value, bool) or not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
