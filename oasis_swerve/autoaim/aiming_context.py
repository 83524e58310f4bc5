################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Per-cycle aiming state and the solver that refreshes it."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from dataclasses import field

from oasis_swerve.autoaim.interpolating_shot_table import InterpolatingShotTable
from oasis_swerve.autoaim.shot_record import ShotRecord
from oasis_swerve.config.swerve_config import SwerveConfig
from oasis_swerve.localization.odometry.swerve_kinematics import ChassisSpeeds
from oasis_swerve.math_utils.geometry2d import Pose2d
from oasis_swerve.math_utils.geometry2d import rotation_to_translation
from oasis_swerve.math_utils.geometry2d import wrap_angle


_LOG: logging.Logger = logging.getLogger(__name__)


@dataclass
class AimingContext:
    """Aiming state owned by the control loop and passed to consumers.

    Attributes:
        lookahead_time_s: Base time used to project the robot pose forward
        effective_lookahead_s: Lookahead applied this cycle, including turn time
        shot: Shot record selected this cycle
        shot_speeds: Field-relative chassis speeds used this cycle
        ending_pose: Projected robot pose at the end of the lookahead
        virtual_target: Target shifted against robot motion over flight time
        distance_m: Distance from ending_pose to virtual_target
        heading_rad: Field heading from ending_pose toward virtual_target
        cycles: Number of completed updates
    """

    lookahead_time_s: float
    shot: ShotRecord = field(default_factory=ShotRecord)
    shot_speeds: ChassisSpeeds = field(default_factory=ChassisSpeeds)
    ending_pose: Pose2d = field(default_factory=Pose2d)
    virtual_target: Pose2d = field(default_factory=Pose2d)
    distance_m: float = 0.0
    heading_rad: float = 0.0
    effective_lookahead_s: float = 0.0
    cycles: int = 0

    @classmethod
    def from_config(cls, config: SwerveConfig) -> AimingContext:
        return cls(lookahead_time_s=config.params.autoaim.lookahead_time_sec)


def aiming_lookahead_time(base_time_s: float, pose: Pose2d, target: Pose2d) -> float:
    """
    Return the projection time for aiming from the current pose

    The launcher faces the back of the robot. The remaining turn toward the
    target, in rotations, is added to the base time as seconds.
    """

    bearing_rad: float = rotation_to_translation(target, pose)
    turn_rad: float = wrap_angle(bearing_rad - pose.theta_rad - math.pi)
    return base_time_s + abs(turn_rad) / (2.0 * math.pi)


def linear_future_pose(
    pose: Pose2d, field_speeds: ChassisSpeeds, time_s: float
) -> Pose2d:
    """
    Project a pose forward assuming constant velocity and heading
    """

    robot_speeds: ChassisSpeeds = field_speeds.to_robot_relative(pose.theta_rad)
    return pose.transform_by(
        Pose2d(
            x_m=robot_speeds.vx_mps * time_s,
            y_m=robot_speeds.vy_mps * time_s,
            theta_rad=0.0,
        )
    )


class AimingSolver:
    """
    Refresh an AimingContext once per control cycle from the shot table
    """

    def __init__(self, config: SwerveConfig, table: InterpolatingShotTable) -> None:
        # Empty calibration is a setup error, reported here rather than per cycle
        table.require_populated()
        self._table: InterpolatingShotTable = table
        self._compensate_flight_time: bool = (
            config.params.autoaim.compensate_flight_time
        )
        _LOG.info(
            "Shot table loaded with %d entries over [%.2f, %.2f] m",
            len(table),
            table.min_key(),
            table.max_key(),
        )

    def update(
        self,
        context: AimingContext,
        pose: Pose2d,
        field_speeds: ChassisSpeeds,
        target: Pose2d,
    ) -> ShotRecord:
        """
        Recompute the aiming state for this cycle

        Args:
            context: Context to update in place
            pose: Current robot pose estimate
            field_speeds: Field-relative robot velocity
            target: Target location on the field

        Returns:
            The shot record selected for this cycle
        """

        lookahead_s: float = aiming_lookahead_time(
            context.lookahead_time_s, pose, target
        )
        ending_pose: Pose2d = linear_future_pose(pose, field_speeds, lookahead_s)

        virtual_target: Pose2d = target
        shot: ShotRecord = self._table.lookup(ending_pose.distance_to(target))
        if self._compensate_flight_time:
            virtual_target = target.translated(
                -field_speeds.vx_mps * shot.flight_time_s,
                -field_speeds.vy_mps * shot.flight_time_s,
            )
            shot = self._table.lookup(ending_pose.distance_to(virtual_target))

        context.shot = shot
        context.shot_speeds = field_speeds
        context.ending_pose = ending_pose
        context.effective_lookahead_s = lookahead_s
        context.virtual_target = virtual_target
        context.distance_m = ending_pose.distance_to(virtual_target)
        context.heading_rad = rotation_to_translation(virtual_target, ending_pose)
        context.cycles += 1
        return shot
