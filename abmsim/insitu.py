"""In-situ measurements taken from a simulation site while it runs."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import chain
from pathlib import Path
from typing import Any

from abmsim.measurements import DELIMITER, HistogramMeasurement, PairMeasurement
from abmsim.sampling import (
    MEASUREMENT_COLUMNS,
    SimulationClock,
    SiteView,
    is_due,
    parse_measurement_name,
    record_environment,
    record_snapshot,
)

_OBSERVED = frozenset(
    {
        "molecules",
        "molecules_test",
        "spatial_dist_center",
        "spatial_dist_center_updated",
        "mol",
        "agent-statistics",
        "inside_conc",
        "dist_2_cells",
        "uptake",
    }
)

_AT_END = frozenset({"environment", "mol_environment"})

_POST_SIMULATION = frozenset(
    {
        "membrane",
        "inside",
        "final_conc",
        "molecules",
        "molecules_test",
        "spatial_dist_center",
        "spatial_dist_center_updated",
        "mol",
        "agent-statistics",
        "inside_conc",
        "mod_distrib",
    }
)


def _base_name(active: str) -> str:
    """Measurement name with any "%X" interval suffix removed."""
    pos = active.find("%")
    return active[:pos] if pos > 0 else active


class InSituMeasurements:
    """The set of measurements one simulation run takes from its site."""

    def __init__(
        self,
        active_measurements: Iterable[str] = (),
        owner_id: str = "",
        every_x_time_unit: float = 0.0,
    ) -> None:
        self.active_measurements = tuple(dict.fromkeys(active_measurements))
        self.owner_id = owner_id
        self.every_x_time_unit = every_x_time_unit
        self.site: SiteView | None = None
        self.histogram_measurements: dict[str, HistogramMeasurement] = {}
        self.pair_measurements: dict[str, PairMeasurement] = {}
        for active in self.active_measurements:
            name = _base_name(active)
            columns = MEASUREMENT_COLUMNS.get(name)
            if columns is not None:
                self.pair_measurements[name] = PairMeasurement(owner_id, *columns)

    def set_site(self, site: SiteView) -> None:
        """Attach the site measurements are taken from."""
        self.site = site

    def _require_site(self) -> SiteView:
        if self.site is None:
            raise RuntimeError("no site attached to the measurements")
        return self.site

    def observe(self, time: SimulationClock) -> None:
        """Take the measurements due at the current time step."""
        at_end = time.max_time - time.current_time <= time.current_delta_t
        for active in self.active_measurements:
            name, every_x_step = parse_measurement_name(active)
            due = is_due(every_x_step, self.every_x_time_unit, time)
            measurement = self.pair_measurements.get(name)
            if measurement is None:
                continue
            if due and name in _OBSERVED:
                record_snapshot(name, measurement, self._require_site(), time.current_time)
            if at_end and name in _AT_END:
                record_environment(name, measurement, self._require_site())

    def post_simulation(self, time: SimulationClock) -> None:
        """Take the measurements recorded once after the run has finished."""
        for active in self.active_measurements:
            name = _base_name(active)
            measurement = self.pair_measurements.get(name)
            if measurement is None or name not in _POST_SIMULATION:
                continue
            record_snapshot(name, measurement, self._require_site(), time.current_time)

    def write_to_files(self, output_dir: str | Path) -> None:
        """Write every measurement to <output_dir>/<name>.csv and clear its rows.

        A new file starts with a header line; an existing one is appended to.
        """
        directory = Path(output_dir)
        measurements = chain(self.histogram_measurements.items(), self.pair_measurements.items())
        for name, measurement in measurements:
            path = directory / f"{name}.csv"
            if not path.exists():
                header = "id" + DELIMITER + "".join(key + DELIMITER for key in measurement.keys)
                with path.open("w", encoding="utf-8") as handle:
                    handle.write(header + "\n")
                    handle.write(measurement.render())
            else:
                with path.open("a", encoding="utf-8") as handle:
                    handle.write(measurement.render())
            measurement.clear_data()

    def increment(self, kind: type, measurement_name: str, curve_name: str, value: Any) -> None:
        """Add value to the cached entry of a curve; lists collect the value instead."""
        measurement = self._lookup(kind, measurement_name)
        if measurement is None:
            return
        current = measurement.cache.get(curve_name)
        if current is None:
            measurement.cache[curve_name] = value
        elif isinstance(current, list):
            if kind is HistogramMeasurement:
                raise TypeError("histogram caches hold numbers only")
            current.append(value)
        else:
            measurement.cache[curve_name] = value + current

    def add_values(self, kind: type, measurement_name: str, *args: Any) -> None:
        """Record values in the named measurement of the given kind, if it exists."""
        measurement = self._lookup(kind, measurement_name)
        if measurement is None:
            return
        if isinstance(measurement, HistogramMeasurement):
            measurement.add_values(*args)
        else:
            measurement.add_value_pairs(*args)

    def _lookup(self, kind: type, measurement_name: str) -> HistogramMeasurement | PairMeasurement | None:
        if kind is HistogramMeasurement:
            return self.histogram_measurements.get(measurement_name)
        if kind is PairMeasurement:
            return self.pair_measurements.get(measurement_name)
        raise TypeError(f"unknown measurement kind: {kind!r}")