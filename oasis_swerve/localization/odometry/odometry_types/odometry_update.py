################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Reconciliation outputs: pose updates and per-sample reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from oasis_swerve.localization.odometry.odometry_types.module_position import (
    ModulePosition,
)
from oasis_swerve.localization.odometry.odometry_types.signal_sample import SignalId
from oasis_swerve.math_utils.geometry2d import Twist2d


class SampleOutcome(Enum):
    """Classification of one reconciled sample."""

    FULL_UPDATE = "full_update"
    ROTATION_ONLY = "rotation_only"
    DROPPED = "dropped"


class RotationSource(Enum):
    """Source used for the heading of one sample."""

    GYRO = "gyro"
    KINEMATIC = "kinematic"
    NONE = "none"


@dataclass(frozen=True)
class SampleReport:
    """Diagnostic record describing how one sample was reconciled.

    Attributes:
        timestamp_s: Sample timestamp in seconds
        outcome: Outcome classification
        rotation_source: Heading source used for the sample
        incomplete_modules: Indices of modules with a missing channel
        missing_signals: Every missing module channel key
    """

    timestamp_s: float
    outcome: SampleOutcome
    rotation_source: RotationSource
    incomplete_modules: tuple[int, ...] = ()
    missing_signals: tuple[SignalId, ...] = ()

    def __post_init__(self) -> None:
        """Validate the report and normalize sequences into tuples."""
        if not isinstance(self.outcome, SampleOutcome):
            raise ValueError("outcome must be a SampleOutcome")
        if not isinstance(self.rotation_source, RotationSource):
            raise ValueError("rotation_source must be a RotationSource")
        object.__setattr__(self, "incomplete_modules", tuple(self.incomplete_modules))
        object.__setattr__(self, "missing_signals", tuple(self.missing_signals))
        if self.outcome is SampleOutcome.FULL_UPDATE and self.incomplete_modules:
            raise ValueError("full updates cannot have incomplete modules")
        if self.outcome is SampleOutcome.DROPPED and (
            self.rotation_source is not RotationSource.NONE
        ):
            raise ValueError("dropped samples have no rotation source")

    @property
    def fully_reconciled(self) -> bool:
        """Return True when translation and rotation were both applied."""
        return self.outcome is SampleOutcome.FULL_UPDATE

    @property
    def gyro_used(self) -> bool:
        """Return True when the gyro supplied the heading."""
        return self.rotation_source is RotationSource.GYRO


@dataclass(frozen=True)
class OdometryUpdate:
    """Pose update instruction emitted for one reconciled sample.

    Attributes:
        timestamp_s: Originating sample timestamp in seconds
        twist: Robot-frame motion since the previous update
        rotation_rad: Absolute heading to apply in radians
        module_positions: Absolute module positions, FL FR BL BR
        outcome: FULL_UPDATE or ROTATION_ONLY
    """

    timestamp_s: float
    twist: Twist2d
    rotation_rad: float
    module_positions: tuple[ModulePosition, ...]
    outcome: SampleOutcome

    def __post_init__(self) -> None:
        """Validate the update."""
        if self.outcome is SampleOutcome.DROPPED:
            raise ValueError("dropped samples do not produce updates")
        object.__setattr__(self, "module_positions", tuple(self.module_positions))

    @property
    def rotation_only(self) -> bool:
        """Return True when the update carries no translation."""
        return self.outcome is SampleOutcome.ROTATION_ONLY


@dataclass(frozen=True)
class ReconcileResult:
    """Outputs of reconciling one sample batch.

    Attributes:
        updates: Emitted pose updates in sample order
        reports: One report per input sample, in sample order
        rotation_rad: Rotation accumulator after the batch in radians
    """

    updates: tuple[OdometryUpdate, ...]
    reports: tuple[SampleReport, ...]
    rotation_rad: float

    def count(self, outcome: SampleOutcome) -> int:
        """Return the number of samples with the given outcome."""
        return sum(1 for report in self.reports if report.outcome is outcome)
