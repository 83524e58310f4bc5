################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Forward vision pose measurements into a pose container."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from oasis_swerve.config.swerve_config import SwerveConfig
from oasis_swerve.localization.estimation.pose_container import PoseContainer
from oasis_swerve.localization.vision.vision_measurement import VisionMeasurement
from oasis_swerve.math_utils.geometry2d import Pose2d


_LOG: logging.Logger = logging.getLogger(__name__)


class VisionIngestor:
    """Thin adapter between the vision pipeline and a pose container.

    Every measurement is forwarded. Several cameras may report results
    captured at the same instant, so newness only tracks whether the
    pipeline produced a fresh frame.

    Attributes:
        forwarded: Count of measurements handed to the container
        new_results: Count of measurements with a fresh timestamp
        repeated: Count of measurements repeating the last timestamp
    """

    def __init__(self, config: SwerveConfig, pose_container: PoseContainer) -> None:
        self._pose_container: PoseContainer = pose_container
        self._default_std_devs: np.ndarray = config.params.vision.std_devs
        self._epsilon_sec: float = config.params.vision.new_result_epsilon_sec
        self._last_timestamp_s: Optional[float] = None
        self.forwarded: int = 0
        self.new_results: int = 0
        self.repeated: int = 0

    @property
    def last_timestamp_s(self) -> Optional[float]:
        """Return the timestamp of the last new result."""
        return self._last_timestamp_s

    def is_new_result(self, timestamp_s: float) -> bool:
        """Return True when a timestamp differs from the last new result."""
        if self._last_timestamp_s is None:
            return True
        return abs(timestamp_s - self._last_timestamp_s) > self._epsilon_sec

    def ingest(self, measurement: VisionMeasurement) -> bool:
        """
        Forward a measurement to the pose container

        Returns:
            True if the measurement carried a new timestamp, False if it
            repeated the previous result's timestamp
        """

        new_result: bool = self.is_new_result(measurement.timestamp_s)

        _LOG.debug(
            "Vision pose from %s at t=%.3f s: (%.3f, %.3f, %.3f)%s",
            measurement.source or "camera",
            measurement.timestamp_s,
            measurement.pose.x_m,
            measurement.pose.y_m,
            measurement.pose.theta_rad,
            "" if new_result else ", repeated timestamp",
        )
        self._pose_container.apply_vision_measurement(
            measurement.pose, measurement.timestamp_s, measurement.std_devs
        )
        self.forwarded += 1

        if new_result:
            self._last_timestamp_s = measurement.timestamp_s
            self.new_results += 1
        else:
            self.repeated += 1
        return new_result

    def ingest_pose(
        self,
        pose: Pose2d,
        timestamp_s: float,
        std_devs: Optional[np.ndarray] = None,
        *,
        source: str = "",
    ) -> bool:
        """Forward a raw (pose, timestamp, std devs) triple."""
        return self.ingest(
            VisionMeasurement(
                pose=pose,
                timestamp_s=timestamp_s,
                std_devs=self._default_std_devs if std_devs is None else std_devs,
                source=source,
            )
        )
