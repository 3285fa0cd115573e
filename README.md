# abmsim

Building blocks for hybrid agent-based simulations, where cells take up and secrete molecules that diffuse on a grid. The package has no third-party dependencies.

## Modules

- `abmsim.coordinate`: `Coordinate3D`, a 3-D vector dataclass. It supports `+`, `-`, and `*` by a scalar, including the in-place forms. It also has `dot`, `cross`, `magnitude`, `set_magnitude`, `euclidean_distance` and `periodic_distance`.
- `abmsim.randomizer`: `MersenneTwister` is a 32-bit MT19937 whose `random_uint32()` gives the next output. `Randomizer(seed)` builds on it:
  - `generate_double(a=None, b=None)` gives a uniform value in [0, 1], in [0, a] or in [a, b].
  - `generate_int(a, b=None)` gives an integer in [0, a] or in [a, b].
  - `random_direction(spatial_dims, length)` gives a random vector of that length. With `spatial_dims` of 2 the vector lies in the plane.
  - `normal(mean, stddev, box_muller)` uses the Box–Muller method or the polar method.
  - `rayleigh(sigma)` gives a Rayleigh-distributed value.
- `abmsim.algorithms`: `random_permutation(randomizer, size)`, `n_choose_k(n, k)`, `bernoulli_probability(n, k, p)`, and `invert_matrix(matrix)`. `invert_matrix` raises `ValueError` when the matrix is not square or is singular.
- `abmsim.measurements`: `PairMeasurement` and `HistogramMeasurement` collect values during a run. `render()` returns them as `;`-delimited rows, each row prefixed with the owner id.
- `abmsim.sampling`:
  - `parse_measurement_name("name%X")` splits a measurement name from its step interval. The interval defaults to 10.
  - `is_due(...)` decides whether a measurement is taken at the current step.
  - `record_snapshot(...)` and `record_environment(...)` record one named measurement from a site.
  - `MEASUREMENT_COLUMNS` lists the known measurements and their columns.
- `abmsim.insitu`: `InSituMeasurements` holds the active measurements of one run.
  - `observe(time)` records the measurements that are due, plus the environment measurements near the end of the run.
  - `post_simulation(time)` records the once-only measurements after the run.
  - `write_to_files(output_dir)` writes each measurement to `<name>.csv`. A new file starts with a header; an existing one is appended to.
  - `increment` and `add_values` fill individual measurements.
- `abmsim.analyser`: `Analyser` hands out an `InSituMeasurements` per run through `generate_measurement(owner_id)`. `output_all_measurements()` writes them all to `<project_dir>/measurements/`.
- `abmsim.output`: `OutputHandler` manages the project directory.
  - On creation it copies the `*-config.json` files and the main `config.json` into the project directory.
  - `conclude_simulation_run` appends each run to `runs.csv` and packs an existing run directory into a `.tar.gz` archive.
  - `conclude_simulation` returns a hash over all recorded run hashes that does not depend on their order. When `output_graphs` or `output_ovito` is set, it can also start post-processing scripts through `conda_dir`.

## Sites and clocks

The measurement code does not fix a site class. Any object with the attributes named by the protocols in `abmsim.sampling` can be used:

- `SiteView`: `molecule_manager`, `agents`, `system_boundaries`.
- `MoleculeGrid`: `grid_size`, `locations`, `concentrations`, `location_at(i, j, k)`.
- `AgentView`.
- `SimulationClock`: `current_time`, `current_delta_t`, `current_time_step`, `max_time`.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from abmsim.coordinate import Coordinate3D
from abmsim.measurements import PairMeasurement
from abmsim.randomizer import Randomizer

a = Coordinate3D(1.0, 2.0, 4.0)
b = Coordinate3D(4.0, 6.0, 4.0)
print(a.euclidean_distance(b))        # 5.0

rng = Randomizer(42)
direction = rng.random_direction(3, 1.0)
print(direction.magnitude())          # ~1.0

m = PairMeasurement("run-1", "time", "value")
m.add_value_pairs(0.5, 3)
print(m.render(), end="")             # run-1;0.5;3;
```

A `Randomizer` created with a given seed always gives the same sequence, so runs can be repeated exactly.

## What this package does not do

- It contains no simulation engine. There are no cells, agent manager, molecule diffusion grid or simulation loop. Measurements are taken from site objects that you supply.
- It has no command-line program.
- It does not read configuration files. Settings such as active measurements, output flags and `conda_dir` are passed to the constructors directly.