"""Collects the in-situ measurements of all simulation runs and writes them out."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path

from abmsim.insitu import InSituMeasurements

MEASUREMENT_DIRECTORY = "measurements"


class Analyser:
    """Hands out measurement sets to runs and writes them all to one directory."""

    def __init__(
        self,
        active_measurements: Iterable[str] = (),
        project_dir: str | Path | None = None,
        output_every_x_time_unit: float = 0.0,
    ) -> None:
        self.active_measurements = tuple(dict.fromkeys(active_measurements))
        self.output_every_x_time_unit = output_every_x_time_unit
        self.measurements: list[InSituMeasurements] = []
        self.measurement_path: Path | None = None
        self._lock = threading.Lock()
        if self.active_measurements and project_dir is not None:
            self.measurement_path = Path(project_dir) / MEASUREMENT_DIRECTORY
            self.measurement_path.mkdir(parents=True, exist_ok=True)

    def generate_measurement(self, owner_id: str) -> InSituMeasurements:
        """Create, keep and return a new measurement set for one run."""
        measurement = InSituMeasurements(
            self.active_measurements, owner_id, self.output_every_x_time_unit
        )
        with self._lock:
            self.measurements.append(measurement)
        return measurement

    def output_all_measurements(self) -> None:
        """Write every measurement set to the measurement directory."""
        if self.measurement_path is None:
            return
        with self._lock:
            measurements = list(self.measurements)
        for measurement in measurements:
            measurement.write_to_files(self.measurement_path)