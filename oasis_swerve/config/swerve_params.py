################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Structured configuration schema for swerve odometry and auto-aim."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from dataclasses import replace
from typing import Any

import numpy as np


# Meters per inch
_M_PER_IN: float = 0.0254

# Distance between front and back module centers in meters
DRIVEBASE_TRACK_WIDTH_X_M: float = 21.75 * _M_PER_IN
# Distance between left and right module centers in meters
DRIVEBASE_TRACK_WIDTH_Y_M: float = 21.25 * _M_PER_IN
# Number of swerve modules, ordered FL, FR, BL, BR
DRIVEBASE_MODULE_COUNT: int = 4

# Units reported by the sampler for steer angle channels
SIGNAL_STEER_ANGLE_UNITS: str = "rotations"
# Units reported by the sampler for the gyro yaw channel
SIGNAL_GYRO_YAW_UNITS: str = "degrees"

# Odometry state standard deviations [x m, y m, theta rad]
ESTIMATOR_STATE_STD_DEVS: np.ndarray = np.array([0.1, 0.1, 0.1], dtype=np.float64)
# Odometry pose history window for latent vision measurements in seconds
ESTIMATOR_HISTORY_WINDOW_SEC: float = 1.5

# Default vision standard deviations [x m, y m, theta rad]
VISION_STD_DEVS: np.ndarray = np.array([0.9, 0.9, 0.9], dtype=np.float64)
# Timestamps closer than this are treated as the same vision result, seconds
VISION_NEW_RESULT_EPSILON_SEC: float = 1.0e-5

# Lookahead time used to project the robot pose when aiming, seconds
AUTOAIM_LOOKAHEAD_TIME_SEC: float = 0.1
# Subtract velocity times flight time from the target when aiming on the move
AUTOAIM_COMPENSATE_FLIGHT_TIME: bool = True

# Consecutive dropped samples before total sensor loss is reported
DIAG_SUSTAINED_LOSS_SAMPLES: int = 50


class SwerveParamsError(Exception):
    """Raised when swerve parameter validation fails."""


def _as_float_array(value: Any, name: str) -> np.ndarray:
    """Coerce a value to a float64 numpy array with shape (3,)."""
    array: np.ndarray = np.asarray(value, dtype=np.float64)
    if array.shape != (3,):
        raise SwerveParamsError(f"{name} must have shape (3,)")
    if not np.all(np.isfinite(array)):
        raise SwerveParamsError(f"{name} must contain finite values")
    return array


def _require_positive(value: float, name: str) -> None:
    """Require a positive value."""
    if value <= 0.0:
        raise SwerveParamsError(f"{name} must be positive")


def _require_non_negative(value: float, name: str) -> None:
    """Require a non-negative value."""
    if value < 0.0:
        raise SwerveParamsError(f"{name} must be non-negative")


def _require_positive_int(value: int, name: str) -> None:
    """Require a positive integer value."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise SwerveParamsError(f"{name} must be an int")
    if value <= 0:
        raise SwerveParamsError(f"{name} must be positive")


def _validate_non_negative_array(values: np.ndarray, name: str) -> None:
    """Validate that an array contains non-negative values."""
    if np.any(values < 0.0):
        raise SwerveParamsError(f"{name} must be non-negative")


@dataclass(frozen=True)
class DrivebaseParams:
    """Physical layout of the swerve drivebase."""

    # Front-to-back module spacing in meters
    track_width_x_m: float = DRIVEBASE_TRACK_WIDTH_X_M
    # Left-to-right module spacing in meters
    track_width_y_m: float = DRIVEBASE_TRACK_WIDTH_Y_M
    # Number of modules
    module_count: int = DRIVEBASE_MODULE_COUNT

    def module_translations(self) -> tuple[tuple[float, float], ...]:
        """Return module (x, y) offsets from the robot center, FL FR BL BR."""
        half_x: float = self.track_width_x_m / 2.0
        half_y: float = self.track_width_y_m / 2.0
        return (
            (half_x, half_y),
            (half_x, -half_y),
            (-half_x, half_y),
            (-half_x, -half_y),
        )


@dataclass(frozen=True)
class SignalParams:
    """Units of the raw channels produced by the odometry sampler."""

    # Steer angle units, "rotations" or "radians"
    steer_angle_units: str = SIGNAL_STEER_ANGLE_UNITS
    # Gyro yaw units, "degrees" or "radians"
    gyro_yaw_units: str = SIGNAL_GYRO_YAW_UNITS


@dataclass(frozen=True)
class EstimatorParams:
    """Pose estimator blending parameters."""

    # Odometry state standard deviations [x m, y m, theta rad]
    state_std_devs: np.ndarray = field(
        default_factory=lambda: ESTIMATOR_STATE_STD_DEVS.copy()
    )
    # Pose history window in seconds
    history_window_sec: float = ESTIMATOR_HISTORY_WINDOW_SEC

    def __post_init__(self) -> None:
        """Coerce standard deviations into a float64 numpy array."""
        object.__setattr__(
            self,
            "state_std_devs",
            _as_float_array(self.state_std_devs, "estimator.state_std_devs"),
        )


@dataclass(frozen=True)
class VisionParams:
    """Vision ingestion parameters."""

    # Default standard deviations [x m, y m, theta rad]
    std_devs: np.ndarray = field(default_factory=lambda: VISION_STD_DEVS.copy())
    # Timestamp tolerance for identifying a repeated result in seconds
    new_result_epsilon_sec: float = VISION_NEW_RESULT_EPSILON_SEC

    def __post_init__(self) -> None:
        """Coerce standard deviations into a float64 numpy array."""
        object.__setattr__(
            self,
            "std_devs",
            _as_float_array(self.std_devs, "vision.std_devs"),
        )


@dataclass(frozen=True)
class AutoAimParams:
    """Aiming parameters."""

    # Pose projection lookahead in seconds
    lookahead_time_sec: float = AUTOAIM_LOOKAHEAD_TIME_SEC
    # Lead the target by velocity times flight time
    compensate_flight_time: bool = AUTOAIM_COMPENSATE_FLIGHT_TIME


@dataclass(frozen=True)
class DiagParams:
    """Diagnostics thresholds."""

    # Consecutive dropped samples before reporting sustained loss
    sustained_loss_samples: int = DIAG_SUSTAINED_LOSS_SAMPLES


@dataclass(frozen=True)
class SwerveParams:
    """Complete configuration tree for swerve odometry and auto-aim."""

    drivebase: DrivebaseParams
    signals: SignalParams
    estimator: EstimatorParams
    vision: VisionParams
    autoaim: AutoAimParams
    diag: DiagParams

    @classmethod
    def defaults(cls) -> SwerveParams:
        """Return the default parameter tree."""
        return cls(
            drivebase=DrivebaseParams(),
            signals=SignalParams(),
            estimator=EstimatorParams(),
            vision=VisionParams(),
            autoaim=AutoAimParams(),
            diag=DiagParams(),
        )

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        _require_positive(self.drivebase.track_width_x_m, "drivebase.track_width_x_m")
        _require_positive(self.drivebase.track_width_y_m, "drivebase.track_width_y_m")
        _require_positive_int(self.drivebase.module_count, "drivebase.module_count")
        if self.drivebase.module_count != len(self.drivebase.module_translations()):
            raise SwerveParamsError("drivebase.module_count must be 4")

        if not self.signals.steer_angle_units:
            raise SwerveParamsError("signals.steer_angle_units must be set")
        if not self.signals.gyro_yaw_units:
            raise SwerveParamsError("signals.gyro_yaw_units must be set")

        _validate_non_negative_array(
            self.estimator.state_std_devs, "estimator.state_std_devs"
        )
        _require_positive(
            self.estimator.history_window_sec, "estimator.history_window_sec"
        )

        _validate_non_negative_array(self.vision.std_devs, "vision.std_devs")
        _require_non_negative(
            self.vision.new_result_epsilon_sec, "vision.new_result_epsilon_sec"
        )

        _require_non_negative(
            self.autoaim.lookahead_time_sec, "autoaim.lookahead_time_sec"
        )

        _require_positive_int(
            self.diag.sustained_loss_samples, "diag.sustained_loss_samples"
        )

    def replace(self, **namespace_overrides: Any) -> SwerveParams:
        """Return a modified copy of the parameters."""
        return replace(self, **namespace_overrides)

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict representation for debugging."""
        return _dataclass_to_dict(self)


def _dataclass_to_dict(value: Any) -> Any:
    """Convert dataclasses and numpy arrays into plain Python values."""
    if hasattr(value, "__dataclass_fields__"):
        return {
            field.name: _dataclass_to_dict(getattr(value, field.name))
            for field in fields(value)
        }
    if isinstance(value, np.ndarray):
        return value.tolist()
    return value
