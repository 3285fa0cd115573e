"""Recording of individual in-situ measurements from a simulation site.

A site is any object offering ``molecule_manager``, ``agents`` and
``system_boundaries``; the protocols below name the attributes used.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from itertools import islice
from typing import Protocol

from abmsim.coordinate import Coordinate3D
from abmsim.measurements import PairMeasurement

DEFAULT_EVERY_X_STEP = 10
INSIDE_DISTANCE_LIMIT = 3.4

MEASUREMENT_COLUMNS: dict[str, tuple[str, ...]] = {
    "agent-statistics": ("time", "agent", "agentid", "radius", "x", "y", "z", "cellpart", "cellpart_id"),
    "environment": ("x", "y", "z", "radius_or_length", "type", "additional"),
    "record-random-numbers": ("origin", "value"),
    "molecules": ("name", "time", "x", "y", "z", "value"),
    "molecules_test": ("time", "x", "y", "z", "AMP", "Complex", "Defensive"),
    "mol": ("name", "time", "grid_point_id", "value"),
    "mol_environment": ("grid_point_id", "x", "y", "z"),
    "inside_conc": ("time", "agent", "agentid", "mol_type", "inside_concentration"),
    "membrane": ("agentID", "TypeName", "x", "y", "z", "distance"),
    "inside": ("agentID", "TypeName", "x", "y", "z"),
    "spatial_dist_center": ("time", "dist_to_cell", "AMP", "Complex", "Defensive"),
    "spatial_dist_center_updated": ("time", "dist_to_cell", "AMP", "Complex", "Defensive", "AMP_uptaken"),
    "spatial_dist_cell": ("time", "dist_to_cell", "AMP", "Complex", "Defensive"),
    "final_conc": ("AMP", "Complex", "Defensive"),
    "dist_2_cells": ("time", "x", "AMP", "Complex", "Defensive", "center_cell", "radius"),
    "mod_distrib": ("time", "AMP", "Complex", "Defensive"),
    "uptake": ("time", "molecule", "uptake"),
}


class SimulationClock(Protocol):
    current_time: float
    current_delta_t: float
    current_time_step: int
    max_time: float


class Sphere(Protocol):
    radius: float
    position: Coordinate3D
    description: str


class AgentView(Protocol):
    id: int
    type_name: str
    position: Coordinate3D
    spheres: Sequence[Sphere]
    basic_radius: float
    track_inside_conc: bool
    inside_conc: Mapping[str, float]
    current_uptake: Mapping[str, float]
    membrane: Sequence[tuple[int, int, int]]
    inside: Sequence[tuple[int, int, int]]


class MoleculeGrid(Protocol):
    grid_size: tuple[int, int, int]
    locations: Sequence[Coordinate3D]
    concentrations: Mapping[str, Sequence[float]]

    def location_at(self, i: int, j: int, k: int) -> Coordinate3D: ...


class SiteView(Protocol):
    molecule_manager: MoleculeGrid
    agents: Sequence[AgentView]
    system_boundaries: Sequence[Coordinate3D]


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_ORIGIN = Coordinate3D(0.0, 0.0, 0.0)


def parse_measurement_name(active: str) -> tuple[str, int]:
    """Split "name%X" into the name and its step interval (default 10)."""
    pos = active.find("%")
    if pos <= 0:
        return active, DEFAULT_EVERY_X_STEP
    match = _LEADING_INT.match(active[pos + 1 :])
    if match is None:
        raise ValueError(f"invalid step interval in measurement {active!r}")
    return active[:pos], int(match.group(1))


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def is_due(every_x_step: int, every_x_time_unit: float, time: SimulationClock) -> bool:
    """Whether a measurement is taken at the current time step."""
    if every_x_time_unit != 0:
        xstep = _round_half_away(every_x_time_unit / time.current_delta_t)
        return time.current_time_step % xstep == 0
    return time.current_time_step % every_x_step == 0


def _cell_count(grid: MoleculeGrid) -> int:
    n_x, n_y, n_z = grid.grid_size
    return n_x * n_y * n_z


def _center_index(grid: MoleculeGrid, i: int) -> int:
    n_x, n_y, _ = grid.grid_size
    return n_x // 2 + (n_x * n_y) // 2 + n_y * n_x * i


def _center_distance(grid: MoleculeGrid, i: int) -> float:
    n_x, n_y, _ = grid.grid_size
    return _ORIGIN.euclidean_distance(grid.location_at(i, n_y // 2, n_x // 2))


def _record_molecules(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    count = _cell_count(grid)
    for name, data in grid.concentrations.items():
        for loc, value in islice(zip(grid.locations, data), count):
            m.add_value_pairs(name, time, loc.x, loc.y, loc.z, value)


def _record_molecules_test(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    for i, loc in enumerate(islice(grid.locations, _cell_count(grid))):
        values = [data[i] for data in grid.concentrations.values()]
        m.add_value_pairs(time, loc.x, loc.y, loc.z, values[0], values[1], values[2])


def _center_profile(site: SiteView) -> Iterable[tuple[float, list[float]]]:
    grid = site.molecule_manager
    n_z = grid.grid_size[2]
    for i in range(n_z // 2, n_z):
        index = _center_index(grid, i)
        values = [data[index] for data in grid.concentrations.values()]
        dist = _center_distance(grid, i) if values else 0.0
        yield dist, values


def _record_spatial_dist_center(m: PairMeasurement, site: SiteView, time: float) -> None:
    for dist, values in _center_profile(site):
        m.add_value_pairs(time, dist, values[0], values[1], values[2])


def _record_spatial_dist_center_updated(m: PairMeasurement, site: SiteView, time: float) -> None:
    for dist, values in _center_profile(site):
        inside = 0.0
        if dist < INSIDE_DISTANCE_LIMIT:
            for agent in site.agents:
                if agent.track_inside_conc:
                    inside = agent.inside_conc["AMP"]
        m.add_value_pairs(time, dist, values[0], values[1], values[2], inside)


def _record_mol(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    count = _cell_count(grid)
    for name, data in grid.concentrations.items():
        for i, value in enumerate(islice(data, count)):
            m.add_value_pairs(name, time, i, value)


def _record_agent_statistics(m: PairMeasurement, site: SiteView, time: float) -> None:
    for agent in site.agents:
        for sphere in agent.spheres:
            pos = sphere.position
            m.add_value_pairs(
                time, agent.type_name, agent.id, sphere.radius,
                pos.x, pos.y, pos.z, "Mothercell", sphere.description,
            )


def _record_inside_conc(m: PairMeasurement, site: SiteView, time: float) -> None:
    names = list(site.molecule_manager.concentrations)
    for agent in site.agents:
        if agent.track_inside_conc:
            for name in names:
                m.add_value_pairs(time, agent.type_name, agent.id, name, agent.inside_conc[name])


def _record_dist_2_cells(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    n_x, n_y, n_z = grid.grid_size
    first = site.agents[0]
    pos_cell = first.position
    radius = first.basic_radius
    for k in range(n_x):
        index = k + (n_x * n_y) // 2 + (n_y * n_x * n_z) // 2
        values = [data[index] for data in grid.concentrations.values()]
        x = grid.location_at(n_x // 2, n_y // 2, k).x
        m.add_value_pairs(time, x, values[0], values[1], values[2], pos_cell.x, radius)


def _record_uptake(m: PairMeasurement, site: SiteView, time: float) -> None:
    names = list(site.molecule_manager.concentrations)
    for agent in site.agents:
        if agent.type_name == "Cell":
            for name in names:
                m.add_value_pairs(time, name, agent.current_uptake[name])


def _record_membrane(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    for agent in site.agents:
        for point in agent.membrane:
            loc = grid.location_at(*point)
            dist = loc.euclidean_distance(_ORIGIN)
            m.add_value_pairs(agent.id, agent.type_name, loc.x, loc.y, loc.z, dist)


def _record_inside(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    for agent in site.agents:
        for point in agent.inside:
            loc = grid.location_at(*point)
            m.add_value_pairs(agent.id, agent.type_name, loc.x, loc.y, loc.z)


def _record_final_conc(m: PairMeasurement, site: SiteView, time: float) -> None:
    averages = {
        name: (sum(conc) / len(conc) if len(conc) else math.nan)
        for name, conc in site.molecule_manager.concentrations.items()
    }
    m.add_value_pairs(
        averages.get("AMP", 0.0), averages.get("Complex", 0.0), averages.get("Defensive", 0.0)
    )


def _record_mod_distrib(m: PairMeasurement, site: SiteView, time: float) -> None:
    grid = site.molecule_manager
    n_z = grid.grid_size[2]
    dists = []
    for data in grid.concentrations.values():
        max_value = 0.0
        max_dist = 0
        for i in range(n_z // 2, n_z):
            value = data[_center_index(grid, i)]
            if value > max_value:
                max_value = value
                max_dist = i
        dists.append(_center_distance(grid, max_dist))
    m.add_value_pairs(time, dists[0], dists[1], dists[2])


_SNAPSHOT_RECORDERS: dict[str, Callable[[PairMeasurement, SiteView, float], None]] = {
    "molecules": _record_molecules,
    "molecules_test": _record_molecules_test,
    "spatial_dist_center": _record_spatial_dist_center,
    "spatial_dist_center_updated": _record_spatial_dist_center_updated,
    "mol": _record_mol,
    "agent-statistics": _record_agent_statistics,
    "inside_conc": _record_inside_conc,
    "dist_2_cells": _record_dist_2_cells,
    "uptake": _record_uptake,
    "membrane": _record_membrane,
    "inside": _record_inside,
    "final_conc": _record_final_conc,
    "mod_distrib": _record_mod_distrib,
}


def record_snapshot(name: str, measurement: PairMeasurement, site: SiteView, current_time: float) -> bool:
    """Record the named measurement of the site's current state.

    Returns False, recording nothing, if the name is not a snapshot measurement.
    """
    recorder = _SNAPSHOT_RECORDERS.get(name)
    if recorder is None:
        return False
    recorder(measurement, site, current_time)
    return True


def record_environment(name: str, measurement: PairMeasurement, site: SiteView) -> bool:
    """Record the named description of the simulation environment.

    Returns False, recording nothing, if the name is not an environment measurement.
    """
    if name == "environment":
        lower, upper = site.system_boundaries[0], site.system_boundaries[1]
        measurement.add_value_pairs(lower.x, lower.y, lower.z, "0.0", "minBounds", 0.0)
        measurement.add_value_pairs(upper.x, upper.y, upper.z, "0.0", "maxBounds", 0.0)
        return True
    if name == "mol_environment":
        grid = site.molecule_manager
        for i, loc in enumerate(islice(grid.locations, _cell_count(grid))):
            measurement.add_value_pairs(i, loc.x, loc.y, loc.z)
        return True
    return False