################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Interface between odometry/vision producers and a pose estimate."""

from __future__ import annotations

from typing import Protocol
from typing import Sequence

import numpy as np

from oasis_swerve.localization.odometry.odometry_types.module_position import (
    ModulePosition,
)
from oasis_swerve.math_utils.geometry2d import Pose2d


class PoseContainer(Protocol):
    """Time-ordered pose estimate fed by odometry and vision.

    Odometry calls arrive in non-decreasing time order from a single
    thread. Vision calls may carry timestamps older than the latest
    odometry call; how far back they are honored is up to the container.
    """

    def apply_odometry(
        self,
        timestamp_s: float,
        rotation_rad: float,
        module_positions: Sequence[ModulePosition],
    ) -> Pose2d:
        """Apply absolute rotation and module positions at a timestamp."""
        ...

    def apply_vision_measurement(
        self,
        pose: Pose2d,
        timestamp_s: float,
        std_devs: np.ndarray,
    ) -> None:
        """Blend a vision pose with per-axis standard deviations."""
        ...

    def estimated_pose(self) -> Pose2d:
        """Return the current pose estimate."""
        ...
