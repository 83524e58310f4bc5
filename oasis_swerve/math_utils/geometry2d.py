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
Planar pose, twist and rotation helpers
"""

from __future__ import annotations

import math
from dataclasses import dataclass


# Units: rad. Meaning: threshold below which SE(2) series expansions are used
_SMALL_ANGLE_RAD: float = 1.0e-9


def wrap_angle(angle_rad: float) -> float:
    """
    Wrap an angle to the interval (-pi, pi]
    """

    wrapped: float = math.atan2(math.sin(angle_rad), math.cos(angle_rad))
    if wrapped == -math.pi:
        return math.pi
    return wrapped


def rotate_vector(x: float, y: float, angle_rad: float) -> tuple[float, float]:
    """
    Rotate a 2D vector counter-clockwise by an angle
    """

    cos_a: float = math.cos(angle_rad)
    sin_a: float = math.sin(angle_rad)
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a)


@dataclass(frozen=True)
class Twist2d:
    """Incremental robot-frame motion over a short time step.

    Attributes:
        dx_m: Forward displacement in meters
        dy_m: Leftward displacement in meters
        dtheta_rad: Heading change in radians
    """

    dx_m: float = 0.0
    dy_m: float = 0.0
    dtheta_rad: float = 0.0

    def __post_init__(self) -> None:
        """Validate twist components."""
        for name in ("dx_m", "dy_m", "dtheta_rad"):
            value: float = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
            object.__setattr__(self, name, value)

    def scaled(self, factor: float) -> Twist2d:
        """Return the twist multiplied by a scalar factor."""
        return Twist2d(
            dx_m=self.dx_m * factor,
            dy_m=self.dy_m * factor,
            dtheta_rad=self.dtheta_rad * factor,
        )

    def with_dtheta(self, dtheta_rad: float) -> Twist2d:
        """Return a copy of the twist with a replaced heading change."""
        return Twist2d(dx_m=self.dx_m, dy_m=self.dy_m, dtheta_rad=dtheta_rad)


@dataclass(frozen=True)
class Pose2d:
    """Robot pose on the field.

    Attributes:
        x_m: Field X coordinate in meters
        y_m: Field Y coordinate in meters
        theta_rad: Heading in radians, counter-clockwise from field +X
    """

    x_m: float = 0.0
    y_m: float = 0.0
    theta_rad: float = 0.0

    def __post_init__(self) -> None:
        """Validate pose components."""
        for name in ("x_m", "y_m", "theta_rad"):
            value: float = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite")
            object.__setattr__(self, name, value)

    def with_rotation(self, theta_rad: float) -> Pose2d:
        """Return the same translation with a replaced heading."""
        return Pose2d(x_m=self.x_m, y_m=self.y_m, theta_rad=theta_rad)

    def translated(self, dx_m: float, dy_m: float) -> Pose2d:
        """Return the pose shifted by a field-frame translation."""
        return Pose2d(
            x_m=self.x_m + dx_m, y_m=self.y_m + dy_m, theta_rad=self.theta_rad
        )

    def distance_to(self, other: Pose2d) -> float:
        """Return the planar distance between two pose translations."""
        return math.hypot(other.x_m - self.x_m, other.y_m - self.y_m)

    def transform_by(self, transform: Pose2d) -> Pose2d:
        """Apply a robot-frame transform to this pose."""
        dx_m, dy_m = rotate_vector(transform.x_m, transform.y_m, self.theta_rad)
        return Pose2d(
            x_m=self.x_m + dx_m,
            y_m=self.y_m + dy_m,
            theta_rad=wrap_angle(self.theta_rad + transform.theta_rad),
        )

    def relative_to(self, other: Pose2d) -> Pose2d:
        """Express this pose in the frame of another pose."""
        x_m, y_m = rotate_vector(
            self.x_m - other.x_m, self.y_m - other.y_m, -other.theta_rad
        )
        return Pose2d(
            x_m=x_m, y_m=y_m, theta_rad=wrap_angle(self.theta_rad - other.theta_rad)
        )

    def exp(self, twist: Twist2d) -> Pose2d:
        """Integrate a constant-curvature twist from this pose."""
        dtheta: float = twist.dtheta_rad
        sin_theta: float = math.sin(dtheta)
        cos_theta: float = math.cos(dtheta)

        s: float
        c: float
        if abs(dtheta) < _SMALL_ANGLE_RAD:
            s = 1.0 - dtheta * dtheta / 6.0
            c = 0.5 * dtheta
        else:
            s = sin_theta / dtheta
            c = (1.0 - cos_theta) / dtheta

        transform: Pose2d = Pose2d(
            x_m=twist.dx_m * s - twist.dy_m * c,
            y_m=twist.dx_m * c + twist.dy_m * s,
            theta_rad=dtheta,
        )
        return self.transform_by(transform)

    def log(self, end: Pose2d) -> Twist2d:
        """Return the twist that carries this pose to the end pose."""
        transform: Pose2d = end.relative_to(self)
        dtheta: float = transform.theta_rad
        half_dtheta: float = 0.5 * dtheta
        cos_minus_one: float = math.cos(dtheta) - 1.0

        half_theta_by_tan: float
        if abs(cos_minus_one) < _SMALL_ANGLE_RAD:
            half_theta_by_tan = 1.0 - dtheta * dtheta / 12.0
        else:
            half_theta_by_tan = -(half_dtheta * math.sin(dtheta)) / cos_minus_one

        scale: float = math.hypot(half_theta_by_tan, half_dtheta)
        x_m, y_m = rotate_vector(
            transform.x_m,
            transform.y_m,
            math.atan2(-half_dtheta, half_theta_by_tan),
        )
        return Twist2d(dx_m=x_m * scale, dy_m=y_m * scale, dtheta_rad=dtheta)

    def interpolate(self, end: Pose2d, t: float) -> Pose2d:
        """Interpolate along the twist between two poses."""
        if t <= 0.0:
            return self
        if t >= 1.0:
            return end
        return self.exp(self.log(end).scaled(t))


def rotation_to_translation(target: Pose2d, pose: Pose2d) -> float:
    """
    Return the field heading in radians pointing from pose toward target
    """

    return math.atan2(target.y_m - pose.y_m, target.x_m - pose.x_m)
