import math
from dataclasses import dataclass, field

import pytest

from abmsim.coordinate import Coordinate3D
from abmsim.measurements import PairMeasurement
from abmsim.sampling import (
    is_due,
    parse_measurement_name,
    record_environment,
    record_snapshot,
)


@dataclass
class FakeSphere:
    radius: float
    position: Coordinate3D
    description: str


@dataclass
class FakeAgent:
    id: int
    type_name: str
    position: Coordinate3D
    spheres: list = field(default_factory=list)
    basic_radius: float = 1.0
    track_inside_conc: bool = False
    inside_conc: dict = field(default_factory=dict)
    current_uptake: dict = field(default_factory=dict)
    membrane: list = field(default_factory=list)
    inside: list = field(default_factory=list)


@dataclass
class FakeGrid:
    grid_size: tuple
    concentrations: dict

    @property
    def locations(self):
        n_x, n_y, n_z = self.grid_size
        return [
            Coordinate3D(float(x), float(y), float(z))
            for z in range(n_z)
            for y in range(n_y)
            for x in range(n_x)
        ]

    def location_at(self, i, j, k):
        return Coordinate3D(float(i), float(j), float(k))


@dataclass
class FakeSite:
    molecule_manager: FakeGrid
    agents: list = field(default_factory=list)
    system_boundaries: list = field(default_factory=list)


@dataclass
class FakeClock:
    current_time: float = 0.0
    current_delta_t: float = 1.0
    current_time_step: int = 0
    max_time: float = 10.0


def _site(agents=None):
    grid = FakeGrid(
        (2, 2, 2),
        {
            "AMP": [0, 1, 2, 3, 4, 5, 6, 7],
            "Complex": [10, 11, 12, 13, 14, 15, 16, 17],
            "Defensive": [20, 21, 22, 23, 24, 25, 26, 27],
        },
    )
    return FakeSite(grid, agents or [], [Coordinate3D(0, 0, 0), Coordinate3D(10, 20, 30)])


def _rows(measurement):
    return [line.split(";")[:-1] for line in measurement.render().splitlines()]


def test_parse_with_interval():
    assert parse_measurement_name("agent-statistics%25") == ("agent-statistics", 25)


def test_parse_without_interval_uses_default():
    assert parse_measurement_name("molecules") == ("molecules", 10)


def test_parse_percent_at_start_is_not_split():
    assert parse_measurement_name("%5") == ("%5", 10)


def test_parse_invalid_interval_raises():
    with pytest.raises(ValueError):
        parse_measurement_name("mol%abc")


@pytest.mark.parametrize("step,expected", [(0, True), (20, True), (25, False)])
def test_is_due_by_step(step, expected):
    assert is_due(10, 0, FakeClock(current_time_step=step)) is expected


@pytest.mark.parametrize("step,expected", [(15, True), (17, False)])
def test_is_due_by_time_unit(step, expected):
    clock = FakeClock(current_delta_t=0.1, current_time_step=step)
    assert is_due(10, 0.5, clock) is expected


def test_is_due_zero_interval_raises():
    with pytest.raises(ZeroDivisionError):
        is_due(10, 0.01, FakeClock(current_delta_t=1.0, current_time_step=3))


def test_unknown_name_records_nothing():
    m = PairMeasurement("T")
    assert record_snapshot("environment", m, _site(), 1.0) is False
    assert m.render() == ""


def test_molecules_rows():
    m = PairMeasurement("T")
    assert record_snapshot("molecules", m, _site(), 1.5) is True
    rows = _rows(m)
    assert len(rows) == 24
    assert rows[0] == ["T", "AMP", "1.5", "0", "0", "0", "0"]
    assert rows[-1] == ["T", "Defensive", "1.5", "1", "1", "1", "27"]


def test_molecules_test_rows():
    m = PairMeasurement("T")
    record_snapshot("molecules_test", m, _site(), 2.0)
    rows = _rows(m)
    assert len(rows) == 8
    assert rows[3] == ["T", "2", "1", "1", "0", "3", "13", "23"]


def test_mol_rows():
    m = PairMeasurement("T")
    record_snapshot("mol", m, _site(), 3.0)
    rows = _rows(m)
    assert len(rows) == 24
    assert rows[9] == ["T", "Complex", "3", "1", "11"]


def test_spatial_dist_center():
    m = PairMeasurement("T")
    record_snapshot("spatial_dist_center", m, _site(), 4.0)
    rows = _rows(m)
    assert len(rows) == 1
    expected = Coordinate3D(1, 1, 1).euclidean_distance(Coordinate3D())
    assert float(rows[0][2]) == pytest.approx(expected, rel=1e-5)
    assert rows[0][3:] == ["7", "17", "27"]


def test_spatial_dist_center_updated_uses_inside_conc():
    agent = FakeAgent(1, "Cell", Coordinate3D(), track_inside_conc=True, inside_conc={"AMP": 4.25})
    m = PairMeasurement("T")
    record_snapshot("spatial_dist_center_updated", m, _site([agent]), 4.0)
    rows = _rows(m)
    assert rows[0][3:6] == ["7", "17", "27"]
    assert rows[0][-1] == "4.25"


def test_agent_statistics():
    sphere = FakeSphere(2.0, Coordinate3D(1, 2, 3), "basic")
    agent = FakeAgent(7, "Cell", Coordinate3D(1, 2, 3), spheres=[sphere])
    m = PairMeasurement("T")
    record_snapshot("agent-statistics", m, _site([agent]), 0.5)
    assert _rows(m) == [["T", "0.5", "Cell", "7", "2", "1", "2", "3", "Mothercell", "basic"]]


def test_inside_conc_only_tracked_agents():
    tracked = FakeAgent(
        1, "Cell", Coordinate3D(), track_inside_conc=True,
        inside_conc={"AMP": 1.25, "Complex": 2.5, "Defensive": 3.75},
    )
    untracked = FakeAgent(2, "Cell", Coordinate3D())
    m = PairMeasurement("T")
    record_snapshot("inside_conc", m, _site([tracked, untracked]), 1.0)
    rows = _rows(m)
    assert [row[3] for row in rows] == ["1", "1", "1"]
    assert [row[4:] for row in rows] == [["AMP", "1.25"], ["Complex", "2.5"], ["Defensive", "3.75"]]


def test_dist_2_cells():
    agent = FakeAgent(1, "Cell", Coordinate3D(5, 0, 0), basic_radius=3.0)
    m = PairMeasurement("T")
    record_snapshot("dist_2_cells", m, _site([agent]), 1.0)
    rows = _rows(m)
    assert len(rows) == 2
    assert rows[0][3:] == ["6", "16", "26", "5", "3"]
    assert rows[1][3:6] == ["7", "17", "27"]


def test_uptake_only_cells():
    cell = FakeAgent(1, "Cell", Coordinate3D(), current_uptake={"AMP": 0.5, "Complex": 0.25, "Defensive": 0.125})
    other = FakeAgent(2, "Other", Coordinate3D())
    m = PairMeasurement("T")
    record_snapshot("uptake", m, _site([cell, other]), 1.0)
    assert [row[2:] for row in _rows(m)] == [["AMP", "0.5"], ["Complex", "0.25"], ["Defensive", "0.125"]]


def test_uptake_missing_molecule_raises():
    cell = FakeAgent(1, "Cell", Coordinate3D(), current_uptake={})
    with pytest.raises(KeyError):
        record_snapshot("uptake", PairMeasurement("T"), _site([cell]), 1.0)


def test_membrane_and_inside():
    agent = FakeAgent(3, "Cell", Coordinate3D(), membrane=[(0, 1, 1)], inside=[(1, 0, 1)])
    site = _site([agent])
    m = PairMeasurement("T")
    record_snapshot("membrane", m, site, 0.0)
    rows = _rows(m)
    assert rows[0][1:6] == ["3", "Cell", "0", "1", "1"]
    expected = Coordinate3D(0, 1, 1).euclidean_distance(Coordinate3D())
    assert float(rows[0][6]) == pytest.approx(expected, rel=1e-5)
    inside = PairMeasurement("T")
    record_snapshot("inside", inside, site, 0.0)
    assert _rows(inside) == [["T", "3", "Cell", "1", "0", "1"]]


def test_final_conc_averages():
    site = _site()
    m = PairMeasurement("T")
    record_snapshot("final_conc", m, site, 0.0)
    values = [float(v) for v in _rows(m)[0][1:]]
    conc = site.molecule_manager.concentrations
    assert values == pytest.approx([sum(conc[n]) / len(conc[n]) for n in ("AMP", "Complex", "Defensive")])


def test_mod_distrib_picks_maximum_location():
    grid = FakeGrid((2, 2, 2), {"AMP": [0] * 8, "Complex": [1] * 8, "Defensive": [0] * 8})
    m = PairMeasurement("T")
    record_snapshot("mod_distrib", m, FakeSite(grid), 2.0)
    row = _rows(m)[0]
    origin = Coordinate3D()
    assert float(row[2]) == pytest.approx(Coordinate3D(0, 1, 1).euclidean_distance(origin), rel=1e-5)
    assert float(row[3]) == pytest.approx(Coordinate3D(1, 1, 1).euclidean_distance(origin), rel=1e-5)
    assert row[2] == row[4]


def test_environment_bounds():
    m = PairMeasurement("T")
    assert record_environment("environment", m, _site()) is True
    assert _rows(m) == [
        ["T", "0", "0", "0", "0.0", "minBounds", "0"],
        ["T", "10", "20", "30", "0.0", "maxBounds", "0"],
    ]


def test_mol_environment_lists_grid_points():
    m = PairMeasurement("T")
    record_environment("mol_environment", m, _site())
    rows = _rows(m)
    assert [row[1] for row in rows] == [str(i) for i in range(8)]
    assert rows[5][2:] == ["1", "0", "1"]


def test_environment_unknown_name():
    m = PairMeasurement("T")
    assert record_environment("molecules", m, _site()) is False
    assert m.render() == ""


def test_final_conc_missing_molecule_defaults_to_zero():
    grid = FakeGrid((1, 1, 1), {"AMP": [2.5]})
    m = PairMeasurement("T")
    record_snapshot("final_conc", m, FakeSite(grid), 0.0)
    assert _rows(m) == [["T", "2.5", "0", "0"]]
    assert not math.isnan(float(_rows(m)[0][1]))