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
Reconcile batches of high-rate drivetrain samples into pose updates
"""

from __future__ import annotations

import logging
from typing import Optional
from typing import Sequence

from oasis_swerve.config.swerve_config import SwerveConfig
from oasis_swerve.localization.estimation.pose_container import PoseContainer
from oasis_swerve.localization.odometry.diagnostics.dropout_tracker import (
    DropoutTracker,
)
from oasis_swerve.localization.odometry.odometry_types import ModulePosition
from oasis_swerve.localization.odometry.odometry_types import OdometryUpdate
from oasis_swerve.localization.odometry.odometry_types import ReconcileResult
from oasis_swerve.localization.odometry.odometry_types import RotationSource
from oasis_swerve.localization.odometry.odometry_types import SampleOutcome
from oasis_swerve.localization.odometry.odometry_types import SampleReport
from oasis_swerve.localization.odometry.odometry_types import SignalId
from oasis_swerve.localization.odometry.odometry_types import SignalSample
from oasis_swerve.localization.odometry.swerve_kinematics import SwerveKinematics
from oasis_swerve.math_utils.geometry2d import Twist2d
from oasis_swerve.math_utils.geometry2d import wrap_angle


_LOG: logging.Logger = logging.getLogger(__name__)


def select_rotation_source(gyro_yaw_rad: Optional[float]) -> RotationSource:
    """
    Choose the heading source for a complete sample

    The gyro wins whenever it is connected and reported in the sample.
    """

    if gyro_yaw_rad is None:
        return RotationSource.KINEMATIC
    return RotationSource.GYRO


class OdometryReconciler:
    """
    Turn partially-complete signal samples into ordered odometry updates

    Owns the last-known module positions and the rotation accumulator. Both
    are only mutated from the thread that calls reconcile().

    Every sample is classified as exactly one of:
        - FULL_UPDATE: all modules complete, translation and rotation applied
        - ROTATION_ONLY: some module incomplete, gyro heading applied
        - DROPPED: some module incomplete and no gyro heading available

    A single incomplete module disqualifies translation for the whole
    sample. Complete modules still refresh their cached positions so the
    next delta is taken against the most recent observation.
    """

    def __init__(
        self,
        config: SwerveConfig,
        *,
        kinematics: Optional[SwerveKinematics] = None,
        pose_container: Optional[PoseContainer] = None,
        tracker: Optional[DropoutTracker] = None,
    ) -> None:
        self._config: SwerveConfig = config
        self._module_count: int = config.params.drivebase.module_count
        self._kinematics: SwerveKinematics = (
            kinematics
            if kinematics is not None
            else SwerveKinematics(config.module_translations())
        )
        if self._kinematics.module_count != self._module_count:
            raise ValueError("kinematics module count does not match config")
        self._pose_container: Optional[PoseContainer] = pose_container
        self._tracker: DropoutTracker = (
            tracker
            if tracker is not None
            else DropoutTracker(
                sustained_loss_samples=config.params.diag.sustained_loss_samples
            )
        )

        self._positions: list[ModulePosition] = []
        # Positions carried by the last emitted update
        self._applied_positions: tuple[ModulePosition, ...] = ()
        self._rotation_rad: float = 0.0
        self.reset()

    @property
    def rotation_rad(self) -> float:
        """Return the rotation accumulator in radians."""
        return self._rotation_rad

    @property
    def tracker(self) -> DropoutTracker:
        return self._tracker

    def module_positions(self) -> tuple[ModulePosition, ...]:
        """Return the last known position of every module."""
        return tuple(self._positions)

    def reset(
        self,
        rotation_rad: float = 0.0,
        module_positions: Optional[Sequence[ModulePosition]] = None,
    ) -> None:
        """Re-seed the rotation accumulator and module position cache."""
        positions: list[ModulePosition]
        if module_positions is None:
            positions = [ModulePosition() for _ in range(self._module_count)]
        else:
            positions = list(module_positions)
            if len(positions) != self._module_count:
                raise ValueError(
                    f"expected {self._module_count} module positions, "
                    f"received {len(positions)}"
                )

        self._positions = positions
        self._applied_positions = tuple(positions)
        self._rotation_rad = float(rotation_rad)

    def reconcile(
        self, samples: Sequence[SignalSample], gyro_connected: bool
    ) -> ReconcileResult:
        """
        Reconcile a drained, time-ordered sample batch

        Args:
            samples: Samples with non-decreasing timestamps
            gyro_connected: Whether the gyro currently reports as connected

        Returns:
            The emitted updates, one report per sample, and the rotation
            accumulator after the batch

        Raises:
            ValueError: If timestamps decrease within the batch
        """

        for previous, current in zip(samples, samples[1:]):
            if current.timestamp_s < previous.timestamp_s:
                raise ValueError(
                    "sample timestamps must be non-decreasing within a batch "
                    f"({current.timestamp_s} after {previous.timestamp_s})"
                )

        updates: list[OdometryUpdate] = []
        reports: list[SampleReport] = []
        for sample in samples:
            update, report = self._reconcile_sample(sample, gyro_connected)
            reports.append(report)
            self._tracker.record(report)
            if update is None:
                continue

            updates.append(update)
            if self._pose_container is not None:
                self._pose_container.apply_odometry(
                    update.timestamp_s, update.rotation_rad, update.module_positions
                )

        return ReconcileResult(
            updates=tuple(updates),
            reports=tuple(reports),
            rotation_rad=self._rotation_rad,
        )

    def _reconcile_sample(
        self, sample: SignalSample, gyro_connected: bool
    ) -> tuple[Optional[OdometryUpdate], SampleReport]:
        observed: list[Optional[ModulePosition]] = []
        incomplete: list[int] = []
        missing: list[SignalId] = []

        for index in range(self._module_count):
            distance_m: Optional[float] = sample.drive_distance(index)
            steer: Optional[float] = sample.steer_angle(index)
            if distance_m is None:
                missing.append(SignalId.drive(index))
            if steer is None:
                missing.append(SignalId.steer(index))
            if distance_m is None or steer is None:
                incomplete.append(index)
                observed.append(None)
                continue
            observed.append(
                ModulePosition(
                    distance_m=distance_m,
                    angle_rad=self._config.steer_angle_to_rad(steer),
                )
            )

        gyro_yaw_rad: Optional[float] = None
        if gyro_connected:
            gyro_raw: Optional[float] = sample.gyro_yaw()
            if gyro_raw is not None:
                gyro_yaw_rad = self._config.gyro_yaw_to_rad(gyro_raw)

        if incomplete:
            return self._reconcile_partial(
                sample, observed, incomplete, missing, gyro_yaw_rad
            )

        positions: list[ModulePosition] = [
            position for position in observed if position is not None
        ]
        deltas: list[ModulePosition] = [
            position.delta_from(previous)
            for position, previous in zip(positions, self._positions)
        ]
        twist: Twist2d = self._kinematics.to_twist(deltas)

        source: RotationSource = select_rotation_source(gyro_yaw_rad)
        dtheta_rad: float
        if gyro_yaw_rad is not None:
            dtheta_rad = wrap_angle(gyro_yaw_rad - self._rotation_rad)
            self._rotation_rad = gyro_yaw_rad
        else:
            dtheta_rad = twist.dtheta_rad
            self._rotation_rad += dtheta_rad

        self._positions = positions
        self._applied_positions = tuple(positions)

        update: OdometryUpdate = OdometryUpdate(
            timestamp_s=sample.timestamp_s,
            twist=twist.with_dtheta(dtheta_rad),
            rotation_rad=self._rotation_rad,
            module_positions=self._applied_positions,
            outcome=SampleOutcome.FULL_UPDATE,
        )
        report: SampleReport = SampleReport(
            timestamp_s=sample.timestamp_s,
            outcome=SampleOutcome.FULL_UPDATE,
            rotation_source=source,
        )
        return update, report

    def _reconcile_partial(
        self,
        sample: SignalSample,
        observed: list[Optional[ModulePosition]],
        incomplete: list[int],
        missing: list[SignalId],
        gyro_yaw_rad: Optional[float],
    ) -> tuple[Optional[OdometryUpdate], SampleReport]:
        # Incomplete modules hold their last complete observation
        for index, position in enumerate(observed):
            if position is not None:
                self._positions[index] = position

        if gyro_yaw_rad is None:
            _LOG.debug(
                "Dropping odometry sample at t=%.6f s, modules %s incomplete "
                "and no gyro reading",
                sample.timestamp_s,
                incomplete,
            )
            return None, SampleReport(
                timestamp_s=sample.timestamp_s,
                outcome=SampleOutcome.DROPPED,
                rotation_source=RotationSource.NONE,
                incomplete_modules=tuple(incomplete),
                missing_signals=tuple(missing),
            )

        _LOG.debug(
            "Rotation-only odometry update at t=%.6f s, modules %s incomplete",
            sample.timestamp_s,
            incomplete,
        )
        dtheta_rad: float = wrap_angle(gyro_yaw_rad - self._rotation_rad)
        self._rotation_rad = gyro_yaw_rad

        # Positions last handed to the pose container, so no translation is
        # inferred from a partial observation
        update: OdometryUpdate = OdometryUpdate(
            timestamp_s=sample.timestamp_s,
            twist=Twist2d(dtheta_rad=dtheta_rad),
            rotation_rad=self._rotation_rad,
            module_positions=self._applied_positions,
            outcome=SampleOutcome.ROTATION_ONLY,
        )
        report: SampleReport = SampleReport(
            timestamp_s=sample.timestamp_s,
            outcome=SampleOutcome.ROTATION_ONLY,
            rotation_source=RotationSource.GYRO,
            incomplete_modules=tuple(incomplete),
            missing_signals=tuple(missing),
        )
        return update, report
