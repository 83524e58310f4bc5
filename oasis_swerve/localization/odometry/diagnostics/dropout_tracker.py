################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Outcome counters and sustained sensor-loss detection."""

from __future__ import annotations

import logging

from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    SampleOutcome,
)
from oasis_swerve.localization.odometry.odometry_types.odometry_update import (
    SampleReport,
)


_LOG: logging.Logger = logging.getLogger(__name__)


class DropoutTracker:
    """Track reconciliation outcomes for diagnostics.

    Attributes:
        full_updates: Count of fully reconciled samples
        rotation_only_updates: Count of rotation-only samples
        dropped_samples: Count of dropped samples
        consecutive_dropped: Dropped samples since the last applied update
    """

    def __init__(self, *, sustained_loss_samples: int) -> None:
        if sustained_loss_samples <= 0:
            raise ValueError("sustained_loss_samples must be positive")
        self._sustained_loss_samples: int = sustained_loss_samples
        self._in_sustained_loss: bool = False
        self._loss_start_s: float | None = None
        self.full_updates: int = 0
        self.rotation_only_updates: int = 0
        self.dropped_samples: int = 0
        self.consecutive_dropped: int = 0

    @property
    def sustained_loss(self) -> bool:
        """Return True while total sensor loss has persisted."""
        return self._in_sustained_loss

    @property
    def total_samples(self) -> int:
        return self.full_updates + self.rotation_only_updates + self.dropped_samples

    def record(self, report: SampleReport) -> None:
        """Record one sample report."""
        if report.outcome is SampleOutcome.DROPPED:
            self.dropped_samples += 1
            if self.consecutive_dropped == 0:
                self._loss_start_s = report.timestamp_s
            self.consecutive_dropped += 1
            if (
                not self._in_sustained_loss
                and self.consecutive_dropped >= self._sustained_loss_samples
            ):
                self._in_sustained_loss = True
                _LOG.warning(
                    "Odometry sensors lost for %d samples since t=%.3f s, "
                    "pose is free-running",
                    self.consecutive_dropped,
                    self._loss_start_s,
                )
            return

        if report.outcome is SampleOutcome.FULL_UPDATE:
            self.full_updates += 1
        else:
            self.rotation_only_updates += 1

        if self._in_sustained_loss:
            _LOG.info(
                "Odometry sensors recovered at t=%.3f s after %d dropped samples",
                report.timestamp_s,
                self.consecutive_dropped,
            )
        self._in_sustained_loss = False
        self._loss_start_s = None
        self.consecutive_dropped = 0

    def reset(self) -> None:
        """Clear all counters."""
        self._in_sustained_loss = False
        self._loss_start_s = None
        self.full_updates = 0
        self.rotation_only_updates = 0
        self.dropped_samples = 0
        self.consecutive_dropped = 0
