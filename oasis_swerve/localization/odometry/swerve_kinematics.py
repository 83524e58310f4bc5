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
Swerve drive forward kinematics
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from oasis_swerve.localization.odometry.odometry_types.module_position import (
    ModulePosition,
)
from oasis_swerve.localization.odometry.odometry_types.module_position import (
    ModuleState,
)
from oasis_swerve.math_utils.geometry2d import Twist2d
from oasis_swerve.math_utils.geometry2d import rotate_vector


@dataclass(frozen=True)
class ChassisSpeeds:
    """Planar chassis velocity.

    Attributes:
        vx_mps: Velocity along +X in m/s
        vy_mps: Velocity along +Y in m/s
        omega_rps: Angular velocity in rad/s
    """

    vx_mps: float = 0.0
    vy_mps: float = 0.0
    omega_rps: float = 0.0

    def __post_init__(self) -> None:
        """Validate velocity components."""
        for name in ("vx_mps", "vy_mps", "omega_rps"):
            value: float = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
            object.__setattr__(self, name, value)

    def to_field_relative(self, heading_rad: float) -> ChassisSpeeds:
        """Rotate robot-relative speeds into the field frame."""
        vx_mps, vy_mps = rotate_vector(self.vx_mps, self.vy_mps, heading_rad)
        return ChassisSpeeds(vx_mps=vx_mps, vy_mps=vy_mps, omega_rps=self.omega_rps)

    def to_robot_relative(self, heading_rad: float) -> ChassisSpeeds:
        """Rotate field-relative speeds into the robot frame."""
        vx_mps, vy_mps = rotate_vector(self.vx_mps, self.vy_mps, -heading_rad)
        return ChassisSpeeds(vx_mps=vx_mps, vy_mps=vy_mps, omega_rps=self.omega_rps)


class SwerveKinematics:
    """
    Least-squares map from per-module motion to chassis motion

    Each module at (x_i, y_i) contributes two rows to the inverse kinematics
    matrix, [1, 0, -y_i] and [0, 1, x_i]. The forward map is its
    pseudo-inverse.
    """

    def __init__(self, module_translations: Sequence[tuple[float, float]]) -> None:
        if len(module_translations) < 2:
            raise ValueError("swerve kinematics requires at least two modules")

        translations: np.ndarray = np.asarray(module_translations, dtype=np.float64)
        if translations.shape != (len(module_translations), 2):
            raise ValueError("module translations must be (x, y) pairs")
        if not np.all(np.isfinite(translations)):
            raise ValueError("module translations must be finite")

        inverse: np.ndarray = np.zeros((2 * len(translations), 3), dtype=np.float64)
        for index, (x_m, y_m) in enumerate(translations):
            inverse[2 * index] = (1.0, 0.0, -y_m)
            inverse[2 * index + 1] = (0.0, 1.0, x_m)

        self._translations: np.ndarray = translations
        self._inverse: np.ndarray = inverse
        self._forward: np.ndarray = np.linalg.pinv(inverse)

    @property
    def module_count(self) -> int:
        return int(self._translations.shape[0])

    def to_twist(self, deltas: Sequence[ModulePosition]) -> Twist2d:
        """
        Convert module deltas into a robot-frame twist
        """

        vector: np.ndarray = self._module_vector(
            [(delta.distance_m, delta.angle_rad) for delta in deltas]
        )
        dx_m, dy_m, dtheta_rad = self._forward @ vector
        return Twist2d(
            dx_m=float(dx_m), dy_m=float(dy_m), dtheta_rad=float(dtheta_rad)
        )

    def to_chassis_speeds(self, states: Sequence[ModuleState]) -> ChassisSpeeds:
        """
        Convert module states into robot-relative chassis speeds
        """

        vector: np.ndarray = self._module_vector(
            [(state.speed_mps, state.angle_rad) for state in states]
        )
        vx_mps, vy_mps, omega_rps = self._forward @ vector
        return ChassisSpeeds(
            vx_mps=float(vx_mps), vy_mps=float(vy_mps), omega_rps=float(omega_rps)
        )

    def _module_vector(self, polar: list[tuple[float, float]]) -> np.ndarray:
        if len(polar) != self.module_count:
            raise ValueError(
                f"expected {self.module_count} modules, received {len(polar)}"
            )
        vector: np.ndarray = np.empty(2 * len(polar), dtype=np.float64)
        for index, (magnitude, angle_rad) in enumerate(polar):
            vector[2 * index] = magnitude * math.cos(angle_rad)
            vector[2 * index + 1] = magnitude * math.sin(angle_rad)
        return vector
