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
Swerve pose estimator blending wheel odometry with latent vision poses
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional
from typing import Sequence

import numpy as np

from oasis_swerve.config.swerve_config import SwerveConfig
from oasis_swerve.localization.estimation.pose_history_buffer import (
    PoseHistoryBuffer,
)
from oasis_swerve.localization.odometry.odometry_types import ModulePosition
from oasis_swerve.localization.odometry.swerve_kinematics import SwerveKinematics
from oasis_swerve.math_utils.geometry2d import Pose2d
from oasis_swerve.math_utils.geometry2d import Twist2d
from oasis_swerve.math_utils.geometry2d import wrap_angle


_LOG: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _VisionCorrection:
    timestamp_s: float
    # Blended estimate at timestamp_s
    corrected_pose: Pose2d
    # Odometry pose at timestamp_s
    odometry_pose: Pose2d

    def compensate(self, odometry_pose: Pose2d) -> Pose2d:
        """Carry the correction forward by odometry motion since it was made."""
        return self.corrected_pose.transform_by(
            odometry_pose.relative_to(self.odometry_pose)
        )


def vision_gains(state_std_devs: np.ndarray, vision_std_devs: np.ndarray) -> np.ndarray:
    """
    Return per-axis steady-state gains for a vision measurement

    For state variance q and measurement variance r, the gain is
    q / (q + sqrt(q * r)), or zero when q is zero.
    """

    q: np.ndarray = np.square(np.asarray(state_std_devs, dtype=np.float64))
    r: np.ndarray = np.square(np.asarray(vision_std_devs, dtype=np.float64))
    gains: np.ndarray = np.zeros(3, dtype=np.float64)
    for axis in range(3):
        if q[axis] == 0.0:
            continue
        gains[axis] = q[axis] / (q[axis] + math.sqrt(q[axis] * r[axis]))
    return gains


class SwervePoseEstimator:
    """
    Reference pose container for reconciled odometry and vision

    Odometry is integrated from absolute module positions and an absolute
    rotation. Each odometry pose is kept in a history window so a vision
    measurement can be blended at its own capture time, then carried
    forward by the odometry motion recorded since.
    """

    def __init__(
        self,
        config: SwerveConfig,
        *,
        kinematics: Optional[SwerveKinematics] = None,
        initial_pose: Pose2d = Pose2d(),
        initial_rotation_rad: float = 0.0,
        initial_positions: Optional[Sequence[ModulePosition]] = None,
    ) -> None:
        self._config: SwerveConfig = config
        self._kinematics: SwerveKinematics = (
            kinematics
            if kinematics is not None
            else SwerveKinematics(config.module_translations())
        )
        self._state_std_devs: np.ndarray = config.params.estimator.state_std_devs
        self._buffer: PoseHistoryBuffer = PoseHistoryBuffer(
            config.params.estimator.history_window_sec
        )
        self._corrections: list[_VisionCorrection] = []
        self._odometry_pose: Pose2d = Pose2d()
        self._estimate: Pose2d = Pose2d()
        self._previous_positions: tuple[ModulePosition, ...] = ()
        self._previous_angle_rad: float = 0.0
        self._rotation_offset_rad: float = 0.0
        self.reset_pose(initial_pose, initial_rotation_rad, initial_positions)

    def estimated_pose(self) -> Pose2d:
        return self._estimate

    def odometry_pose(self) -> Pose2d:
        """Return the pose from odometry alone."""
        return self._odometry_pose

    def reset_pose(
        self,
        pose: Pose2d,
        rotation_rad: float = 0.0,
        module_positions: Optional[Sequence[ModulePosition]] = None,
    ) -> None:
        """
        Reset the estimate to a known pose and discard history

        Args:
            pose: New field pose
            rotation_rad: Absolute rotation reported at the reset instant
            module_positions: Module positions at the reset instant
        """

        positions: tuple[ModulePosition, ...]
        if module_positions is None:
            positions = tuple(
                ModulePosition() for _ in range(self._kinematics.module_count)
            )
        else:
            positions = tuple(module_positions)
        if len(positions) != self._kinematics.module_count:
            raise ValueError("module position count does not match kinematics")

        self._rotation_offset_rad = pose.theta_rad - rotation_rad
        self._previous_angle_rad = pose.theta_rad
        self._previous_positions = positions
        self._odometry_pose = pose
        self._estimate = pose
        self._buffer.clear()
        self._corrections = []

    def apply_odometry(
        self,
        timestamp_s: float,
        rotation_rad: float,
        module_positions: Sequence[ModulePosition],
    ) -> Pose2d:
        positions: tuple[ModulePosition, ...] = tuple(module_positions)
        deltas: list[ModulePosition] = [
            position.delta_from(previous)
            for position, previous in zip(positions, self._previous_positions)
        ]
        twist: Twist2d = self._kinematics.to_twist(deltas)

        angle_rad: float = wrap_angle(rotation_rad + self._rotation_offset_rad)
        twist = twist.with_dtheta(wrap_angle(angle_rad - self._previous_angle_rad))
        self._odometry_pose = self._odometry_pose.exp(twist).with_rotation(angle_rad)

        self._previous_angle_rad = angle_rad
        self._previous_positions = positions
        self._buffer.add(timestamp_s, self._odometry_pose)
        self._prune_corrections()

        self._estimate = self._estimate_from(self._odometry_pose, None)
        return self._estimate

    def apply_vision_measurement(
        self,
        pose: Pose2d,
        timestamp_s: float,
        std_devs: np.ndarray,
    ) -> None:
        vision_std_devs: np.ndarray = np.asarray(std_devs, dtype=np.float64)
        if vision_std_devs.shape != (3,):
            raise ValueError("std_devs must have shape (3,)")
        if not np.all(np.isfinite(vision_std_devs)) or np.any(vision_std_devs < 0.0):
            raise ValueError("std_devs must be finite and non-negative")

        if len(self._buffer) == 0:
            _LOG.debug("Ignoring vision pose at t=%.3f s, no odometry yet", timestamp_s)
            return
        if self._buffer.too_old(timestamp_s):
            _LOG.debug(
                "Ignoring vision pose at t=%.3f s, older than %.2f s history",
                timestamp_s,
                self._buffer.window_sec,
            )
            return

        odometry_at_t: Optional[Pose2d] = self._buffer.sample(timestamp_s)
        if odometry_at_t is None:
            return

        estimate_at_t: Pose2d = self._estimate_from(odometry_at_t, timestamp_s)
        gains: np.ndarray = vision_gains(self._state_std_devs, vision_std_devs)
        error: Twist2d = estimate_at_t.log(pose)
        correction_twist: Twist2d = Twist2d(
            dx_m=gains[0] * error.dx_m,
            dy_m=gains[1] * error.dy_m,
            dtheta_rad=gains[2] * error.dtheta_rad,
        )

        correction: _VisionCorrection = _VisionCorrection(
            timestamp_s=timestamp_s,
            corrected_pose=estimate_at_t.exp(correction_twist),
            odometry_pose=odometry_at_t,
        )
        # Corrections newer than this measurement are discarded
        index: int = bisect_right(
            [item.timestamp_s for item in self._corrections], timestamp_s
        )
        del self._corrections[index:]
        self._corrections.append(correction)
        self._prune_corrections()

        self._estimate = self._estimate_from(self._odometry_pose, None)

    def _estimate_from(
        self, odometry_pose: Pose2d, timestamp_s: Optional[float]
    ) -> Pose2d:
        # Latest correction at or before timestamp_s, or the latest overall
        correction: Optional[_VisionCorrection] = None
        for candidate in reversed(self._corrections):
            if timestamp_s is None or candidate.timestamp_s <= timestamp_s:
                correction = candidate
                break
        if correction is None:
            return odometry_pose
        return correction.compensate(odometry_pose)

    def _prune_corrections(self) -> None:
        earliest: Optional[float] = self._buffer.earliest_time()
        if earliest is None or not self._corrections:
            return

        # Keep the newest correction older than the window as the baseline
        keep_from: int = 0
        for index, correction in enumerate(self._corrections):
            if correction.timestamp_s < earliest:
                keep_from = index
        if keep_from > 0:
            del self._corrections[:keep_from]
