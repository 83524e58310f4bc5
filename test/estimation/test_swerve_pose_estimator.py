################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the swerve pose estimator."""

from __future__ import annotations

import math

import numpy as np
import pytest

from oasis_swerve.config.swerve_config import SwerveConfig
from oasis_swerve.config.swerve_params import EstimatorParams
from oasis_swerve.config.swerve_params import SwerveParams
from oasis_swerve.localization.estimation.swerve_pose_estimator import (
    SwervePoseEstimator,
)
from oasis_swerve.localization.estimation.swerve_pose_estimator import vision_gains
from oasis_swerve.localization.odometry.odometry_types import ModulePosition
from oasis_swerve.math_utils.geometry2d import Pose2d


_EQUAL_STD_DEVS: np.ndarray = np.array([0.1, 0.1, 0.1])


def _forward(distance_m: float) -> list[ModulePosition]:
    return [ModulePosition(distance_m=distance_m)] * 4


def _estimator() -> SwervePoseEstimator:
    estimator: SwervePoseEstimator = SwervePoseEstimator(SwerveConfig.defaults())
    estimator.apply_odometry(0.0, 0.0, _forward(0.0))
    return estimator


def test_odometry_integrates_module_positions() -> None:
    """Forward module travel moves the pose along its heading."""
    estimator: SwervePoseEstimator = _estimator()
    pose: Pose2d = estimator.apply_odometry(0.1, 0.0, _forward(1.0))

    assert pose.x_m == pytest.approx(1.0)
    assert pose.y_m == pytest.approx(0.0, abs=1e-12)
    assert estimator.odometry_pose() == pose


def test_odometry_uses_absolute_rotation() -> None:
    """The pose heading follows the supplied rotation."""
    estimator: SwervePoseEstimator = _estimator()
    pose: Pose2d = estimator.apply_odometry(0.1, math.radians(90.0), _forward(0.0))

    assert pose.theta_rad == pytest.approx(math.radians(90.0))
    assert pose.x_m == pytest.approx(0.0, abs=1e-12)


def test_reset_pose_offsets_rotation() -> None:
    """Rotation after a reset is measured from the reset rotation."""
    estimator: SwervePoseEstimator = SwervePoseEstimator(SwerveConfig.defaults())
    estimator.reset_pose(Pose2d(x_m=1.0, y_m=2.0, theta_rad=0.0), rotation_rad=1.0)
    pose: Pose2d = estimator.apply_odometry(0.0, 1.5, _forward(0.0))

    assert pose.x_m == pytest.approx(1.0)
    assert pose.y_m == pytest.approx(2.0)
    assert pose.theta_rad == pytest.approx(0.5)


def test_vision_gains() -> None:
    """Equal variances give a half gain and zero state variance gives none."""
    gains: np.ndarray = vision_gains(np.array([0.1, 0.0, 0.1]), _EQUAL_STD_DEVS)

    assert gains[0] == pytest.approx(0.5)
    assert gains[1] == 0.0
    assert gains[2] == pytest.approx(0.5)


def test_vision_pulls_estimate_toward_measurement() -> None:
    """A vision pose blends into the estimate and persists with odometry."""
    estimator: SwervePoseEstimator = _estimator()
    estimator.apply_odometry(1.0, 0.0, _forward(1.0))
    estimator.apply_vision_measurement(Pose2d(x_m=2.0), 1.0, _EQUAL_STD_DEVS)

    assert estimator.estimated_pose().x_m == pytest.approx(1.5)
    assert estimator.odometry_pose().x_m == pytest.approx(1.0)

    estimator.apply_odometry(1.1, 0.0, _forward(2.0))
    assert estimator.estimated_pose().x_m == pytest.approx(2.5)


def test_latent_vision_is_replayed_forward() -> None:
    """A measurement older than the newest odometry is applied at its time."""
    estimator: SwervePoseEstimator = _estimator()
    estimator.apply_odometry(1.0, 0.0, _forward(1.0))
    estimator.apply_vision_measurement(Pose2d(x_m=1.5), 0.5, _EQUAL_STD_DEVS)

    assert estimator.estimated_pose().x_m == pytest.approx(1.5)


def test_stale_vision_is_ignored() -> None:
    """Measurements older than the history window leave the estimate alone."""
    estimator: SwervePoseEstimator = _estimator()
    estimator.apply_odometry(5.0, 0.0, _forward(1.0))
    estimator.apply_vision_measurement(Pose2d(x_m=10.0), 1.0, _EQUAL_STD_DEVS)

    assert estimator.estimated_pose().x_m == pytest.approx(1.0)


def test_vision_before_odometry_is_ignored() -> None:
    """Without odometry history a vision pose has nothing to blend into."""
    estimator: SwervePoseEstimator = SwervePoseEstimator(SwerveConfig.defaults())
    estimator.apply_vision_measurement(Pose2d(x_m=3.0), 0.0, _EQUAL_STD_DEVS)

    assert estimator.estimated_pose() == Pose2d()


def test_zero_state_std_dev_axis_is_not_corrected() -> None:
    """An axis with zero odometry uncertainty ignores vision."""
    params: SwerveParams = SwerveParams.defaults().replace(
        estimator=EstimatorParams(state_std_devs=[0.0, 0.1, 0.1])
    )
    estimator: SwervePoseEstimator = SwervePoseEstimator(SwerveConfig(params))
    estimator.apply_odometry(0.0, 0.0, _forward(0.0))
    estimator.apply_vision_measurement(Pose2d(x_m=2.0), 0.0, _EQUAL_STD_DEVS)

    assert estimator.estimated_pose().x_m == pytest.approx(0.0, abs=1e-12)


def test_invalid_vision_std_devs_raise() -> None:
    """Vision standard deviations must be three finite non-negative values."""
    estimator: SwervePoseEstimator = _estimator()
    with pytest.raises(ValueError):
        estimator.apply_vision_measurement(Pose2d(), 0.0, np.array([0.1, 0.1]))
    with pytest.raises(ValueError):
        estimator.apply_vision_measurement(Pose2d(), 0.0, np.array([0.1, -1.0, 0.1]))
