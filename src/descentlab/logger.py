"""
CSV logging for simulation state with performance optimization.

Buffers data in memory and writes in batches to minimize I/O overhead.
Implements context manager protocol for safe resource handling.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, TextIO

from descentlab.dynamics.body import RigidBody

VALID_FIELDS = {"p", "v", "a", "f"}
COMPONENT_COLUMNS = ("state", "rho", "vt")


class CSVLogger:
    """
    Buffered CSV logger for simulation data.

    Parameters
    ----------
    filepath : str | Path
        Output CSV file path
    buffer_size : int
        Number of rows to buffer before writing. Higher = fewer writes but more memory.
    fields : list[str] | None
        State fields to log per body. Default: ["p", "v", "a", "f"]
        Options: "p" (position), "v" (velocity), "a" (acceleration),
                 "f" (net force of the last step)
    log_components : bool
        Also log per-skydiver columns: deployment state code, air density
        and terminal-velocity estimate.

    Notes
    -----
    Column names are ``<body>.<field>_<x|y|z>`` and
    ``<component>.<state|rho|vt>``; the first column is time ``t``.

    Examples
    --------
    >>> with CSVLogger("output.csv") as logger:
    ...     for _ in range(num_steps):
    ...         world.step(dt)
    ...         logger.log(world)
    """

    def __init__(
        self,
        filepath: str | Path,
        buffer_size: int = 1000,
        fields: list[str] | None = None,
        log_components: bool = True,
    ) -> None:
        self.filepath = Path(filepath)
        self.buffer_size = buffer_size
        self.fields = fields if fields is not None else ["p", "v", "a", "f"]
        self.log_components = log_components

        invalid = set(self.fields) - VALID_FIELDS
        if invalid:
            raise ValueError(
                f"Invalid fields: {invalid}. Valid options: {VALID_FIELDS}"
            )

        self._buffer: list[list[str]] = []
        self._file: TextIO | None = None
        self._writer: Any = None  # csv.writer is a function, not a type
        self._header_written = False

        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> CSVLogger:
        """Open file for writing."""
        self._file = open(self.filepath, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close file, flushing any remaining data."""
        self.close()

    @staticmethod
    def _get_val(b: RigidBody, field: str) -> Any:
        if field == "f":
            return b.last_force
        return getattr(b, field)

    def _components(self, world: Any) -> list:
        if not self.log_components:
            return []
        return [c for c in getattr(world, "components", []) if hasattr(c, "telemetry")]

    def _write_header(self, world: Any) -> None:
        """Generate and write CSV header row."""
        hdr = ["t"]
        for b in world.bodies:
            for field in self.fields:
                for axis in ("x", "y", "z"):
                    hdr.append(f"{b.name}.{field}_{axis}")
        for comp in self._components(world):
            for col in COMPONENT_COLUMNS:
                hdr.append(f"{comp.name}.{col}")

        if self._writer:
            self._writer.writerow(hdr)
            if self._file:
                self._file.flush()

        self._header_written = True

    def log(self, world: Any) -> None:
        """
        Log current world state to buffer.

        Parameters
        ----------
        world : World
            World object to log

        Notes
        -----
        Automatically opens file on first call if not using context manager.
        Writes to disk when buffer is full.
        """
        if self._file is None:
            self.__enter__()

        if not self._header_written:
            self._write_header(world)

        row = [f"{world.time:.10f}"]
        for b in world.bodies:
            for field in self.fields:
                row.extend(f"{v:.10e}" for v in self._get_val(b, field))
        for comp in self._components(world):
            tel = comp.telemetry()
            row.append(str(tel.state.value))
            row.append(f"{tel.air_density:.10e}")
            row.append(f"{tel.terminal_velocity:.10e}")

        self._buffer.append(row)

        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write buffered data to disk and clear buffer."""
        if self._writer and self._buffer:
            self._writer.writerows(self._buffer)
            if self._file:
                self._file.flush()
            self._buffer.clear()

    def close(self) -> None:
        """Flush remaining data and close file."""
        self.flush()
        if self._file:
            self._file.close()
            self._file = None
            self._writer = None
