################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""High-level configuration wrapper for swerve odometry and auto-aim."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .swerve_params import SwerveParams
from .swerve_params import SwerveParamsError


# Accepted steer angle units
STEER_ANGLE_UNITS: frozenset[str] = frozenset({"rotations", "radians"})
# Accepted gyro yaw units
GYRO_YAW_UNITS: frozenset[str] = frozenset({"degrees", "radians"})


class SwerveConfigError(Exception):
    """Raised when swerve configuration validation fails."""


@dataclass(frozen=True)
class SwerveConfig:
    """Convenience wrapper around swerve parameters."""

    params: SwerveParams

    def __init__(self, params: SwerveParams) -> None:
        """Initialize the configuration wrapper and validate."""
        object.__setattr__(self, "params", params)
        self.validate()

    @classmethod
    def defaults(cls) -> SwerveConfig:
        """Return a configuration built from default parameters."""
        return cls(SwerveParams.defaults())

    def validate(self) -> None:
        """Validate parameter invariants and enumerated options."""
        try:
            self.params.validate()
        except SwerveParamsError as exc:
            raise SwerveConfigError(str(exc)) from exc

        if self.params.signals.steer_angle_units not in STEER_ANGLE_UNITS:
            raise SwerveConfigError(
                "signals.steer_angle_units must be rotations or radians"
            )

        if self.params.signals.gyro_yaw_units not in GYRO_YAW_UNITS:
            raise SwerveConfigError("signals.gyro_yaw_units must be degrees or radians")

    def module_translations(self) -> tuple[tuple[float, float], ...]:
        """Return the configured module offsets from the robot center."""
        return self.params.drivebase.module_translations()

    def steer_angle_to_rad(self, value: float) -> float:
        """Convert a raw steer angle reading into radians."""
        if self.params.signals.steer_angle_units == "rotations":
            return value * 2.0 * math.pi
        return value

    def gyro_yaw_to_rad(self, value: float) -> float:
        """Convert a raw gyro yaw reading into radians."""
        if self.params.signals.gyro_yaw_units == "degrees":
            return math.radians(value)
        return value
