################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Type definitions for swerve odometry reconciliation."""

from __future__ import annotations

from oasis_swerve.localization.odometry.odometry_types.module_position import (
    ModulePosition,
)
from oasis_swerve.localization.odometry.odometry_types.module_position import (
    ModuleState,
)
from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    OdometryUpdate,
)
from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    ReconcileResult,
)
from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    RotationSource,
)
from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    SampleOutcome,
)
from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    SampleReport,
)
from oasis_swerve.localization.odometry.odometry_types.signal_sample import (
    GYRO_MODULE_ID,
)
from oasis_swerve.localization.odometry.odometry_types.signal_sample import SignalId
from oasis_swerve.localization.odometry.odometry_types.signal_sample import (
    SignalKind,
)
from oasis_swerve.localization.odometry.odometry_types.signal_sample import (
    SignalSample,
)


__all__ = [
    "GYRO_MODULE_ID",
    "ModulePosition",
    "ModuleState",
    "OdometryUpdate",
    "ReconcileResult",
    "RotationSource",
    "SampleOutcome",
    "SampleReport",
    "SignalId",
    "SignalKind",
    "SignalSample",
]
