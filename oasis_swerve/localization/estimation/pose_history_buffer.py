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
Fixed-window buffer of timestamped odometry poses
"""

from __future__ import annotations

from bisect import bisect_left
from bisect import bisect_right
from typing import Iterator
from typing import Optional

from oasis_swerve.math_utils.geometry2d import Pose2d


class PoseHistoryBuffer:
    """
    Time-ordered pose history with linear interpolation between entries
    """

    def __init__(self, window_sec: float) -> None:
        if window_sec <= 0.0:
            raise ValueError("window_sec must be positive")
        self._window_sec: float = window_sec
        self._timestamps: list[float] = []
        self._poses: list[Pose2d] = []

    def __len__(self) -> int:
        return len(self._timestamps)

    @property
    def window_sec(self) -> float:
        return self._window_sec

    def add(self, timestamp_s: float, pose: Pose2d) -> None:
        # Equal timestamps replace the stored pose
        index: int = bisect_left(self._timestamps, timestamp_s)
        if index < len(self._timestamps) and self._timestamps[index] == timestamp_s:
            self._poses[index] = pose
        else:
            self._timestamps.insert(index, timestamp_s)
            self._poses.insert(index, pose)
        self._evict()

    def clear(self) -> None:
        self._timestamps = []
        self._poses = []

    def too_old(self, timestamp_s: float) -> bool:
        latest: Optional[float] = self.latest_time()
        if latest is None:
            return False
        return timestamp_s < latest - self._window_sec

    def sample(self, timestamp_s: float) -> Optional[Pose2d]:
        """
        Return the pose at a timestamp, clamped to the buffered interval
        """

        if not self._timestamps:
            return None
        if timestamp_s <= self._timestamps[0]:
            return self._poses[0]
        if timestamp_s >= self._timestamps[-1]:
            return self._poses[-1]

        upper: int = bisect_right(self._timestamps, timestamp_s)
        lower: int = upper - 1
        if self._timestamps[lower] == timestamp_s:
            return self._poses[lower]

        t_lower: float = self._timestamps[lower]
        t_upper: float = self._timestamps[upper]
        fraction: float = (timestamp_s - t_lower) / (t_upper - t_lower)
        return self._poses[lower].interpolate(self._poses[upper], fraction)

    def earliest_time(self) -> Optional[float]:
        if not self._timestamps:
            return None
        return self._timestamps[0]

    def latest_time(self) -> Optional[float]:
        if not self._timestamps:
            return None
        return self._timestamps[-1]

    def iter_entries(self) -> Iterator[tuple[float, Pose2d]]:
        yield from zip(self._timestamps, self._poses)

    def _evict(self) -> None:
        cutoff: float = self._timestamps[-1] - self._window_sec
        index: int = bisect_left(self._timestamps, cutoff)
        if index > 0:
            del self._timestamps[:index]
            del self._poses[:index]
