################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Vision pose measurement types."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from oasis_swerve.math_utils.geometry2d import Pose2d


@dataclass(frozen=True)
class VisionMeasurement:
    """Field pose computed by the vision pipeline from one camera frame.

    Attributes:
        pose: Estimated robot pose on the field
        timestamp_s: Capture timestamp in seconds, on the odometry time base
        std_devs: Standard deviations [x m, y m, theta rad]
        source: Camera or pipeline name
    """

    pose: Pose2d
    timestamp_s: float
    std_devs: np.ndarray
    source: str = ""

    def __post_init__(self) -> None:
        """Validate the measurement and coerce standard deviations."""
        if not isinstance(self.pose, Pose2d):
            raise ValueError("pose must be a Pose2d")
        if isinstance(self.timestamp_s, bool) or not math.isfinite(self.timestamp_s):
            raise ValueError("timestamp_s must be finite")
        if not isinstance(self.source, str):
            raise ValueError("source must be a str")
        object.__setattr__(self, "timestamp_s", float(self.timestamp_s))
        object.__setattr__(self, "std_devs", _as_std_devs(self.std_devs))


def _as_std_devs(value: Any) -> np.ndarray:
    """Coerce standard deviations to a finite, non-negative (3,) array."""
    array: np.ndarray = np.asarray(value, dtype=np.float64)
    if array.shape != (3,):
        raise ValueError("std_devs must have shape (3,)")
    if not np.all(np.isfinite(array)):
        raise ValueError("std_devs must contain finite values")
    if np.any(array < 0.0):
        raise ValueError("std_devs must be non-negative")
    return array
