################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Timestamped raw sensor samples drained from the odometry sampler."""

from __future__ import annotations

import math
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from types import MappingProxyType
from typing import Mapping
from typing import Optional


# Module index used by the single gyro yaw channel
GYRO_MODULE_ID: int = -1


class SignalKind(Enum):
    """Kind of raw channel produced by the sampler."""

    DRIVE_DISTANCE = "drive_distance"
    STEER_ANGLE = "steer_angle"
    GYRO_YAW = "gyro_yaw"


@dataclass(frozen=True)
class SignalId:
    """Key identifying one channel in a signal sample.

    Attributes:
        kind: Channel kind
        module_index: Module index, or GYRO_MODULE_ID for the gyro channel
    """

    kind: SignalKind
    module_index: int

    def __post_init__(self) -> None:
        """Validate the channel key."""
        if not isinstance(self.kind, SignalKind):
            raise ValueError("kind must be a SignalKind")
        if not isinstance(self.module_index, int) or isinstance(
            self.module_index, bool
        ):
            raise ValueError("module_index must be an int")
        if self.kind is SignalKind.GYRO_YAW:
            if self.module_index != GYRO_MODULE_ID:
                raise ValueError("gyro channel must use GYRO_MODULE_ID")
        elif self.module_index < 0:
            raise ValueError("module_index must be non-negative")

    @classmethod
    def drive(cls, module_index: int) -> SignalId:
        """Return the drive distance key for a module."""
        return cls(SignalKind.DRIVE_DISTANCE, module_index)

    @classmethod
    def steer(cls, module_index: int) -> SignalId:
        """Return the steer angle key for a module."""
        return cls(SignalKind.STEER_ANGLE, module_index)

    @classmethod
    def gyro(cls) -> SignalId:
        """Return the gyro yaw key."""
        return cls(SignalKind.GYRO_YAW, GYRO_MODULE_ID)


@dataclass(frozen=True)
class SignalSample:
    """Raw channel readings captured at one sampler timestamp.

    Channels absent from ``values`` were not received at this timestamp.

    Attributes:
        timestamp_s: Sample timestamp in seconds
        values: Mapping from channel key to raw reading
    """

    timestamp_s: float
    values: Mapping[SignalId, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the timestamp and freeze the reading map."""
        if isinstance(self.timestamp_s, bool):
            raise ValueError("timestamp_s must be a float")
        timestamp_s: float = float(self.timestamp_s)
        if not math.isfinite(timestamp_s):
            raise ValueError("timestamp_s must be finite")

        values: dict[SignalId, float] = {}
        for key, value in dict(self.values).items():
            if not isinstance(key, SignalId):
                raise ValueError("values keys must be SignalId")
            reading: float = float(value)
            if not math.isfinite(reading):
                raise ValueError(f"reading for {key} must be finite")
            values[key] = reading

        object.__setattr__(self, "timestamp_s", timestamp_s)
        object.__setattr__(self, "values", MappingProxyType(values))

    def get(self, kind: SignalKind, module_index: int) -> Optional[float]:
        """Return a reading, or None when the channel is absent."""
        return self.values.get(SignalId(kind, module_index))

    def drive_distance(self, module_index: int) -> Optional[float]:
        """Return a module's drive distance reading when present."""
        return self.values.get(SignalId.drive(module_index))

    def steer_angle(self, module_index: int) -> Optional[float]:
        """Return a module's steer angle reading when present."""
        return self.values.get(SignalId.steer(module_index))

    def gyro_yaw(self) -> Optional[float]:
        """Return the gyro yaw reading when present."""
        return self.values.get(SignalId.gyro())
