################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""YAML schema utilities for shot table calibration files."""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from typing import Any
from typing import cast

import yaml

from oasis_swerve.autoaim.interpolating_shot_table import InterpolatingShotTable
from oasis_swerve.autoaim.shot_record import ShotRecord


# Supported calibration file format version
FORMAT_VERSION: int = 1

_ENTRY_KEYS: set[str] = {
    "distance_m",
    "aim_angle_rad",
    "left_wheel_speed_rps",
    "right_wheel_speed_rps",
    "flight_time_s",
}

_LOG: logging.Logger = logging.getLogger(__name__)


class ShotTableYamlError(Exception):
    """Raised when the shot table YAML schema is invalid."""


@dataclass(frozen=True)
class ShotEntryYaml:
    """One calibration point.

    Attributes:
        distance_m: Measured distance to the target in meters
        record: Firing parameters calibrated at that distance
    """

    distance_m: float
    record: ShotRecord


def table_to_dict(table: InterpolatingShotTable) -> dict[str, object]:
    """Convert a shot table to a YAML-safe dictionary."""
    entries: list[dict[str, object]] = [
        {
            "distance_m": distance_m,
            "aim_angle_rad": record.aim_angle_rad,
            "left_wheel_speed_rps": record.left_wheel_speed_rps,
            "right_wheel_speed_rps": record.right_wheel_speed_rps,
            "flight_time_s": record.flight_time_s,
        }
        for distance_m, record in table.items()
    ]
    return {
        "format_version": FORMAT_VERSION,
        "entries": entries,
    }


def entries_from_dict(data: dict[str, object]) -> list[ShotEntryYaml]:
    """Parse calibration entries from a YAML dictionary."""
    if not isinstance(data, dict):
        raise ShotTableYamlError("YAML root must be a mapping")
    _require_keys("root", data, {"format_version", "entries"})

    format_version: int = _require_int(data["format_version"], "format_version")
    if format_version != FORMAT_VERSION:
        raise ShotTableYamlError(f"format_version must be {FORMAT_VERSION}")

    raw_entries: object = data["entries"]
    if not isinstance(raw_entries, list):
        raise ShotTableYamlError("entries must be a list")

    entries: list[ShotEntryYaml] = []
    for index, raw_entry in enumerate(raw_entries):
        scope: str = f"entries[{index}]"
        entry: dict[str, object] = _require_mapping(raw_entry, scope)
        _require_keys(scope, entry, _ENTRY_KEYS)
        try:
            record: ShotRecord = ShotRecord(
                aim_angle_rad=_require_float(
                    entry["aim_angle_rad"], f"{scope}.aim_angle_rad"
                ),
                left_wheel_speed_rps=_require_float(
                    entry["left_wheel_speed_rps"], f"{scope}.left_wheel_speed_rps"
                ),
                right_wheel_speed_rps=_require_float(
                    entry["right_wheel_speed_rps"], f"{scope}.right_wheel_speed_rps"
                ),
                flight_time_s=_require_float(
                    entry["flight_time_s"], f"{scope}.flight_time_s"
                ),
            )
        except ValueError as exc:
            raise ShotTableYamlError(f"{scope}: {exc}") from exc
        entries.append(
            ShotEntryYaml(
                distance_m=_require_float(entry["distance_m"], f"{scope}.distance_m"),
                record=record,
            )
        )
    return entries


def table_from_dict(data: dict[str, object]) -> InterpolatingShotTable:
    """Build a shot table from a YAML dictionary.

    Repeated distances keep the last entry.
    """
    table: InterpolatingShotTable = InterpolatingShotTable()
    for entry in entries_from_dict(data):
        if entry.distance_m in table:
            _LOG.warning(
                "Duplicate shot table distance %.3f m, keeping the later entry",
                entry.distance_m,
            )
        try:
            table.insert(entry.distance_m, entry.record)
        except ValueError as exc:
            raise ShotTableYamlError(str(exc)) from exc
    return table


def dumps_yaml(table: InterpolatingShotTable) -> str:
    """Serialize a shot table to deterministic YAML."""
    data: dict[str, object] = table_to_dict(table)
    safe_dump: Any = cast(Any, yaml.safe_dump)
    return safe_dump(
        data,
        sort_keys=False,
        indent=2,
        default_flow_style=False,
    )


def loads_yaml(text: str) -> InterpolatingShotTable:
    """Parse a shot table from YAML text."""
    try:
        loaded: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ShotTableYamlError("Malformed YAML") from exc
    if not isinstance(loaded, dict):
        raise ShotTableYamlError("YAML root must be a mapping")
    return table_from_dict(loaded)


def _require_keys(scope: str, data: dict[str, object], required: set[str]) -> None:
    """Ensure a mapping has exactly the required keys."""
    # YAML allows non-string keys, reported by their text form
    unknown: set[str] = {str(key) for key in data.keys() if key not in required}
    if unknown:
        raise ShotTableYamlError(
            f"Unexpected keys in {scope}: {', '.join(sorted(unknown))}"
        )
    missing: set[str] = {key for key in required if key not in data}
    if missing:
        raise ShotTableYamlError(
            f"Missing keys in {scope}: {', '.join(sorted(missing))}"
        )


def _require_mapping(value: object, name: str) -> dict[str, object]:
    """Ensure the value is a dictionary."""
    if not isinstance(value, dict):
        raise ShotTableYamlError(f"{name} must be a mapping")
    return value


def _require_int(value: object, name: str) -> int:
    """Ensure the value is an integer."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ShotTableYamlError(f"{name} must be an integer")
    return int(value)


def _require_float(value: object, name: str) -> float:
    """Ensure the value is a float."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ShotTableYamlError(f"{name} must be a float")
    return float(value)
