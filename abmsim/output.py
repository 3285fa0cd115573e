"""Output of a simulation project: copied configuration, run records, archives."""

from __future__ import annotations

import hashlib
import logging
import shutil
import subprocess
import tarfile
from pathlib import Path

logger = logging.getLogger(__name__)

RUNS_FILE = "runs.csv"
CONFIG_SUFFIX = "-config.json"
MAIN_CONFIG = "config.json"


class OutputHandler:
    """Keeps the project directory of a simulation and records its runs."""

    def __init__(
        self,
        config_path: str | Path,
        project_dir: str | Path,
        *,
        main_config: str | Path = MAIN_CONFIG,
        activated: bool = False,
        output_graphs: bool = False,
        output_ovito: bool = False,
        conda_dir: str = "",
    ) -> None:
        self.project_dir = Path(project_dir)
        self.project_name = self.project_dir.name
        self.activated = activated
        self.output_graphs = output_graphs
        self.output_ovito = output_ovito
        self.conda_dir = conda_dir

        self.project_dir.mkdir(parents=True, exist_ok=True)
        for entry in Path(config_path).iterdir():
            if CONFIG_SUFFIX in entry.name:
                shutil.copyfile(entry, self.project_dir / entry.name)
        shutil.copyfile(main_config, self.project_dir / MAIN_CONFIG)

    @property
    def runs_csv(self) -> Path:
        return self.project_dir / RUNS_FILE

    def _run_name(self, run: int) -> str:
        return f"{self.project_name}-configs-{run}"

    def conclude_simulation(self, runs: int, seed: int, runtime: float) -> int:
        """Summarise all runs by one hash and start the configured post-processing.

        The hash does not depend on the order in which runs were recorded.
        """
        hashes: list[str] = []
        if self.runs_csv.exists():
            with self.runs_csv.open(encoding="utf-8") as handle:
                hashes = [line.rstrip("\n").rsplit(";", 1)[-1] for line in handle]
        joined = "".join(f"{h} " for h in sorted(hashes))
        hash_of_runs = int.from_bytes(hashlib.sha256(joined.encode("utf-8")).digest()[:8], "big")
        logger.debug("Hash: %d", hash_of_runs)

        measurements = f"{self.project_dir}/measurements"
        if self.output_graphs:
            if not self.conda_dir:
                logger.debug("Please fill a value for conda_dir in output-config.json")
            else:
                self._run_script("../../python_scripts/output_graphs.py", measurements)
        if self.output_ovito:
            self._run_script("../../python_scripts/ovito_preprocessing.py", measurements)
        return hash_of_runs

    def _run_script(self, script: str, argument: str) -> None:
        command = [self.conda_dir, "run", "-n", "abmenv", "python", script, argument]
        logger.debug(" ".join(command))
        subprocess.run(command, check=False)

    def conclude_simulation_run(self, current_run: int, seed: int, run_hash: str) -> None:
        """Record a finished run and archive its configuration directory if present."""
        logger.info("Run: %s, Hash: %s", current_run, run_hash)
        run_name = self._run_name(current_run)
        with self.runs_csv.open("a", encoding="utf-8") as handle:
            handle.write(f"{run_name};{seed};{run_hash}\n")
        run_dir = self.project_dir / run_name
        if run_dir.exists():
            archive = self.project_dir / f"{run_name}.tar.gz"
            with tarfile.open(archive, "w:gz") as tar:
                tar.add(run_dir, arcname=run_name)
            shutil.rmtree(run_dir)

    def setup_output_for_run(self, run: int) -> str | None:
        """Name of the run's output directory when output is activated."""
        if self.activated:
            return self._run_name(run)
        return None

    def output_current_configuration(
        self,
        run_hash: str,
        run: int,
        seed: int = 0,
        simulation_end: bool = False,
    ) -> None:
        """Conclude the run once the simulation has reached its end."""
        if simulation_end and str(self.project_dir):
            self.conclude_simulation_run(run, seed, run_hash)