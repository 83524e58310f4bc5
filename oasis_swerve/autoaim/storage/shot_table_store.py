################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Calibration file backing a shot table."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from oasis_swerve.autoaim.interpolating_shot_table import InterpolatingShotTable
from oasis_swerve.autoaim.storage.yaml_format import ShotTableYamlError
from oasis_swerve.autoaim.storage.yaml_format import dumps_yaml
from oasis_swerve.autoaim.storage.yaml_format import loads_yaml


# Accepted calibration file extensions
YAML_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml"})

_LOG: logging.Logger = logging.getLogger(__name__)


class ShotTableStoreError(Exception):
    """Raised when a calibration file cannot be read or written."""


class ShotTableStore:
    """
    YAML calibration file for an interpolating shot table

    A file is parsed completely before any table is modified, so a bad
    recalibration file leaves the running table as it was.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        path_obj: Path = Path(os.fspath(path))
        if path_obj.suffix.lower() not in YAML_SUFFIXES:
            raise ShotTableStoreError(f"{path_obj} is not a .yaml or .yml file")
        self._path: Path = path_obj

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> InterpolatingShotTable:
        """Read the calibration file into a new table."""
        try:
            table: InterpolatingShotTable = loads_yaml(
                self._path.read_text(encoding="utf-8")
            )
        except OSError as exc:
            raise ShotTableStoreError(f"Cannot read shot table {self._path}") from exc
        except ShotTableYamlError as exc:
            raise ShotTableStoreError(
                f"Invalid shot table {self._path}: {exc}"
            ) from exc

        if len(table) == 0:
            _LOG.warning("Shot table %s has no entries", self._path)
        else:
            _LOG.info(
                "Loaded %d shot table entries over [%.2f, %.2f] m from %s",
                len(table),
                table.min_key(),
                table.max_key(),
                self._path,
            )
        return table

    def reload_into(self, table: InterpolatingShotTable) -> int:
        """
        Replace the entries of an existing table with the file contents

        Must not overlap lookups on the same table.

        Returns:
            The number of entries now in the table
        """

        loaded: InterpolatingShotTable = self.load()
        table.clear()
        for distance_m, record in loaded.items():
            table.insert(distance_m, record)
        return len(table)

    def save(self, table: InterpolatingShotTable, *, atomic_write: bool = True) -> None:
        """Write a table to the calibration file."""
        text: str = dumps_yaml(table)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if atomic_write:
                self._replace_atomically(text)
            else:
                self._path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ShotTableStoreError(f"Cannot write shot table {self._path}") from exc
        _LOG.info("Saved %d shot table entries to %s", len(table), self._path)

    def _replace_atomically(self, text: str) -> None:
        tmp_path: Path = self._path.with_name(f".{self._path.name}.tmp.{os.getpid()}")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        finally:
            # Left behind only when writing or renaming failed
            if tmp_path.exists():
                tmp_path.unlink()
