################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for shot table YAML storage."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from oasis_swerve.autoaim.interpolating_shot_table import InterpolatingShotTable
from oasis_swerve.autoaim.shot_record import ShotRecord
from oasis_swerve.autoaim.storage.shot_table_store import ShotTableStore
from oasis_swerve.autoaim.storage.shot_table_store import ShotTableStoreError
from oasis_swerve.autoaim.storage.yaml_format import FORMAT_VERSION
from oasis_swerve.autoaim.storage.yaml_format import ShotTableYamlError
from oasis_swerve.autoaim.storage.yaml_format import dumps_yaml
from oasis_swerve.autoaim.storage.yaml_format import loads_yaml
from oasis_swerve.autoaim.storage.yaml_format import table_from_dict


def _entry(distance_m: float, aim_angle_rad: float) -> dict[str, object]:
    return {
        "distance_m": distance_m,
        "aim_angle_rad": aim_angle_rad,
        "left_wheel_speed_rps": 60.0,
        "right_wheel_speed_rps": 55.0,
        "flight_time_s": 0.4,
    }


def _table() -> InterpolatingShotTable:
    return InterpolatingShotTable.from_entries(
        [
            (1.5, ShotRecord(0.3, 50.0, 45.0, 0.35)),
            (4.0, ShotRecord(0.6, 70.0, 65.0, 0.6)),
        ]
    )


def test_dump_is_deterministic_and_ordered() -> None:
    """Dumped YAML lists entries by ascending distance with fixed keys."""
    data = yaml.safe_load(dumps_yaml(_table()))

    assert data["format_version"] == FORMAT_VERSION
    assert [entry["distance_m"] for entry in data["entries"]] == [1.5, 4.0]
    assert list(data["entries"][0].keys()) == [
        "distance_m",
        "aim_angle_rad",
        "left_wheel_speed_rps",
        "right_wheel_speed_rps",
        "flight_time_s",
    ]
    assert dumps_yaml(_table()) == dumps_yaml(_table())


def test_load_restores_lookup_behavior() -> None:
    """A loaded table answers lookups like the saved one."""
    loaded: InterpolatingShotTable = loads_yaml(dumps_yaml(_table()))

    assert loaded.keys() == (1.5, 4.0)
    assert loaded.lookup(2.75) == _table().lookup(2.75)


def test_duplicate_distance_keeps_last(caplog: pytest.LogCaptureFixture) -> None:
    """Repeated distances keep the later entry and log a warning."""
    data: dict[str, object] = {
        "format_version": 1,
        "entries": [_entry(2.0, 0.1), _entry(2.0, 0.9)],
    }
    with caplog.at_level(logging.WARNING):
        table: InterpolatingShotTable = table_from_dict(data)

    assert len(table) == 1
    assert table.lookup(2.0).aim_angle_rad == 0.9
    assert "Duplicate" in caplog.text


def test_unexpected_and_missing_keys_raise() -> None:
    """The schema is strict about entry keys."""
    extra: dict[str, object] = _entry(1.0, 0.1)
    extra["hood_angle"] = 0.0
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 1, "entries": [extra]})

    missing: dict[str, object] = _entry(1.0, 0.1)
    del missing["flight_time_s"]
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 1, "entries": [missing]})


def test_bad_values_raise() -> None:
    """Versions, types and finiteness are validated."""
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 2, "entries": []})
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 1, "entries": {}})
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 1, "entries": [_entry("far", 0.1)]})
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 1, "entries": [_entry(1.0, float("nan"))]})
    with pytest.raises(ShotTableYamlError):
        table_from_dict({"format_version": 1, "entries": [_entry(float("inf"), 0.1)]})
    with pytest.raises(ShotTableYamlError):
        loads_yaml("entries: [unterminated")
    with pytest.raises(ShotTableYamlError):
        loads_yaml("- just\n- a list\n")


def test_non_string_entry_key_raises() -> None:
    """Entries with non-string keys are schema errors, not crashes."""
    text: str = (
        "format_version: 1\n"
        "entries:\n"
        "  - distance_m: 1.0\n"
        "    aim_angle_rad: 0.2\n"
        "    left_wheel_speed_rps: 50.0\n"
        "    right_wheel_speed_rps: 45.0\n"
        "    flight_time_s: 0.3\n"
        "    1: 2\n"
    )
    with pytest.raises(ShotTableYamlError) as excinfo:
        loads_yaml(text)

    assert "entries[0]" in str(excinfo.value)
    with pytest.raises(ShotTableYamlError):
        loads_yaml("format_version: 1\nentries: []\n2: 3\n")


def test_save_and_load_file(tmp_path: Path) -> None:
    """Tables saved to disk load back with the same entries."""
    store: ShotTableStore = ShotTableStore(tmp_path / "calibration" / "shots.yaml")
    assert not store.exists()

    store.save(_table())
    loaded: InterpolatingShotTable = store.load()

    assert store.exists()
    assert list(loaded.items()) == list(_table().items())
    assert [child.name for child in store.path.parent.iterdir()] == ["shots.yaml"]


def test_non_atomic_save(tmp_path: Path) -> None:
    """Direct writes produce the same file contents."""
    store: ShotTableStore = ShotTableStore(tmp_path / "shots.yml")
    store.save(_table(), atomic_write=False)

    assert store.path.read_text(encoding="utf-8") == dumps_yaml(_table())


def test_reload_replaces_table_entries(tmp_path: Path) -> None:
    """Recalibration swaps the entries of a running table in place."""
    store: ShotTableStore = ShotTableStore(tmp_path / "shots.yaml")
    store.save(_table())
    table: InterpolatingShotTable = InterpolatingShotTable.from_entries(
        [(9.0, ShotRecord(1.0, 90.0, 85.0, 1.2))]
    )

    assert store.reload_into(table) == 2
    assert table.keys() == (1.5, 4.0)
    assert 9.0 not in table


def test_bad_file_leaves_table_untouched(tmp_path: Path) -> None:
    """A failed reload keeps the entries the table already had."""
    store: ShotTableStore = ShotTableStore(tmp_path / "broken.yaml")
    store.path.write_text("format_version: 1\nentries: 3\n", encoding="utf-8")
    table: InterpolatingShotTable = _table()

    with pytest.raises(ShotTableStoreError):
        store.reload_into(table)

    assert table.keys() == (1.5, 4.0)


def test_store_errors(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Bad extensions and missing files are reported as store errors."""
    with pytest.raises(ShotTableStoreError):
        ShotTableStore(tmp_path / "shots.json")
    with pytest.raises(ShotTableStoreError):
        ShotTableStore(tmp_path / "missing.yaml").load()

    empty: ShotTableStore = ShotTableStore(tmp_path / "empty.yaml")
    empty.save(InterpolatingShotTable())
    with caplog.at_level(logging.WARNING):
        assert len(empty.load()) == 0
    assert "no entries" in caplog.text
